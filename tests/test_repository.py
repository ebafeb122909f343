"""
Tests for the in-memory and SQLAlchemy tournament repositories.
"""
import pytest

from crictourney.engine.errors import NotFoundError
from crictourney.engine.innings import open_innings
from crictourney.engine.lifecycle import MatchLifecycleManager
from crictourney.engine.outcomes import ScriptedSampler
from crictourney.engine.state import (
    Match, MatchSide, MatchStatus, TeamInfo, PlayerInfo, CommentaryType, TournamentStatus,
    AuctionState, AuctionStatus, AuctionLot, LotStatus, Bid, TeamPurse,
)
from crictourney.repository import InMemoryTournamentRepository, SqlTournamentRepository

from conftest import create_teams


def create_match(tournament_id: str) -> Match:
    match = Match(
        id="m1",
        tournament_id=tournament_id,
        team1=MatchSide(id="a", name="Alpha", players=[f"a{i}" for i in range(11)]),
        team2=MatchSide(id="b", name="Bravo", players=[f"b{i}" for i in range(11)]),
        overs=1,
    )
    match.status = MatchStatus.LIVE
    match.batting_team_id = "a"
    match.bowling_team_id = "b"
    open_innings(match)
    match.add_commentary("Toss done", CommentaryType.TOSS)
    return match


@pytest.fixture(params=["memory", "sql"])
def any_repository(request, sql_session_factory):
    if request.param == "memory":
        return InMemoryTournamentRepository()
    return SqlTournamentRepository(sql_session_factory)


class TestRepositoryContract:
    """Behaviour both repositories share"""

    def test_create_and_get(self, any_repository):
        teams, players = create_teams()
        created = any_repository.create_tournament("Cup", teams, players, overs=5)

        loaded = any_repository.get_tournament(created.id)

        assert loaded.name == "Cup"
        assert loaded.overs == 5
        assert [t.id for t in loaded.teams] == ["a", "b", "c"]
        assert loaded.team("b").players == [f"b{i}" for i in range(11)]
        assert len(loaded.players) == 33
        assert loaded.matches == []

    def test_missing_tournament(self, any_repository):
        with pytest.raises(NotFoundError):
            any_repository.get_tournament("missing")
        with pytest.raises(NotFoundError):
            any_repository.update_tournament("missing", {"name": "x"})

    def test_shallow_patch(self, any_repository):
        teams, players = create_teams()
        created = any_repository.create_tournament("Cup", teams, players)

        updated = any_repository.update_tournament(created.id, {"name": "Trophy"})

        assert updated.name == "Trophy"
        assert len(updated.teams) == 3

    def test_unknown_patch_field(self, any_repository):
        teams, players = create_teams()
        created = any_repository.create_tournament("Cup", teams, players)
        with pytest.raises(ValueError):
            any_repository.update_tournament(created.id, {"budget": 10})

    def test_matches_round_trip(self, any_repository):
        teams, players = create_teams()
        created = any_repository.create_tournament("Cup", teams, players)
        match = create_match(created.id)

        any_repository.update_tournament(created.id, {"matches": [match]})
        loaded = any_repository.get_tournament(created.id).match("m1")

        assert loaded.to_dict() == match.to_dict()
        assert loaded.striker_id == "a0"
        assert loaded.commentary[0].text == "Toss done"

    def test_replace_matches_and_teams(self, any_repository):
        teams, players = create_teams()
        created = any_repository.create_tournament("Cup", teams, players)
        match = create_match(created.id)
        any_repository.update_tournament(created.id, {"matches": [match]})

        match.team1.score = 42
        renamed = TeamInfo(id="a", name="Alpha XI", short_name="AXI", color="#000000", players=["a0"])
        any_repository.update_tournament(created.id, {"matches": [match], "teams": [renamed, teams[1]]})
        loaded = any_repository.get_tournament(created.id)

        assert loaded.match("m1").team1.score == 42
        assert [t.name for t in loaded.teams] == ["Alpha XI", "Bravo"]
        assert loaded.team("a").players == ["a0"]

        any_repository.update_tournament(created.id, {"matches": []})
        assert any_repository.get_tournament(created.id).matches == []

    def test_status_and_champion_round_trip(self, any_repository):
        teams, players = create_teams()
        created = any_repository.create_tournament("Cup", teams, players, status=TournamentStatus.SETUP)
        assert any_repository.get_tournament(created.id).status == TournamentStatus.SETUP

        any_repository.update_tournament(created.id, {
            "status": TournamentStatus.COMPLETED, "champion_id": "b", "runner_up_id": "a",
        })
        loaded = any_repository.get_tournament(created.id)
        assert loaded.status == TournamentStatus.COMPLETED
        assert (loaded.champion_id, loaded.runner_up_id) == ("b", "a")

    def test_auction_round_trip(self, any_repository):
        teams, players = create_teams()
        pool = [PlayerInfo(id="star", name="Star", role="bowler", base_price=900)]
        created = any_repository.create_tournament("Cup", teams, players + pool, status=TournamentStatus.SETUP)
        assert any_repository.get_tournament(created.id).auction is None

        lot = AuctionLot(player_id="star", base_price=900, status=LotStatus.IN_BIDDING, current_bid=950)
        lot.bids.append(Bid(team_id="a", amount=950))
        lot.current_bidder_id = "a"
        auction = AuctionState(
            id="auc", budget=5000, squad_size=12, status=AuctionStatus.ACTIVE, current_index=0,
            lots=[lot], purses=[TeamPurse(team_id=t.id, budget=5000, remaining=5000) for t in teams],
        )
        any_repository.update_tournament(created.id, {"auction": auction})

        loaded = any_repository.get_tournament(created.id)
        assert loaded.player("star").base_price == 900
        assert loaded.player("star").team_id is None
        assert loaded.auction.to_dict() == auction.to_dict()
        assert loaded.auction.current_lot.bids[0].amount == 950

        any_repository.update_tournament(created.id, {"auction": None})
        assert any_repository.get_tournament(created.id).auction is None

    def test_lifecycle_runs_on_repository(self, any_repository):
        teams, players = create_teams()
        created = any_repository.create_tournament("Cup", teams, players, overs=1)
        manager = MatchLifecycleManager(any_repository, sampler=ScriptedSampler(["4"] * 6 + ["6"] * 5))
        manager.initialize_match_state(created.id)

        match = manager.create_match(created.id, "a", "b")
        manager.start_match(created.id, match.id)
        while manager.current_match is not None:
            manager.simulate_ball()

        stored = any_repository.get_tournament(created.id).match(match.id)
        assert stored.status == MatchStatus.COMPLETED
        assert stored.result_summary == manager.completed_matches[0].result_summary


class TestInMemoryRepository:

    def test_reads_are_copies(self):
        repo = InMemoryTournamentRepository()
        teams, players = create_teams()
        created = repo.create_tournament("Cup", teams, players)

        loaded = repo.get_tournament(created.id)
        loaded.name = "Changed"
        loaded.teams.clear()

        again = repo.get_tournament(created.id)
        assert again.name == "Cup"
        assert len(again.teams) == 3

    def test_writes_are_copies(self):
        repo = InMemoryTournamentRepository()
        teams, players = create_teams()
        created = repo.create_tournament("Cup", teams, players)
        match = create_match(created.id)

        repo.update_tournament(created.id, {"matches": [match]})
        match.team1.score = 100

        assert repo.get_tournament(created.id).match("m1").team1.score == 0
