"""
Tournament repositories - read/replace access to tournament snapshots.

The match engine only needs `get_tournament` and `update_tournament`; a patch
replaces whole top-level fields (name, overs, teams, players, matches,
status, champion and runner-up, auction).
"""
import copy
import json
import logging
from typing import Dict, List, Optional, Protocol

from sqlalchemy.orm import Session, sessionmaker

from crictourney.engine.errors import NotFoundError
from crictourney.engine.state import (
    TournamentData, TournamentStatus, TeamInfo, PlayerInfo, Match, AuctionState, generate_id,
)
from crictourney.models.tournament import Tournament, TournamentTeam, TournamentPlayer, MatchRecord

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = (
    "name", "overs", "teams", "players", "matches",
    "status", "champion_id", "runner_up_id", "auction",
)


class TournamentRepository(Protocol):
    def get_tournament(self, tournament_id: str) -> TournamentData:
        ...

    def update_tournament(self, tournament_id: str, patch: dict) -> TournamentData:
        ...

    def create_tournament(
        self, name: str, teams: List[TeamInfo], players: List[PlayerInfo], overs: int = 20,
        status: TournamentStatus = TournamentStatus.ACTIVE, tournament_id: Optional[str] = None,
    ) -> TournamentData:
        ...


def _check_patch(patch: dict) -> None:
    unknown = set(patch) - set(PATCHABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot patch tournament fields: {', '.join(sorted(unknown))}")


class InMemoryTournamentRepository:
    """Dict-backed repository; every read and write copies, like a real store would"""

    def __init__(self):
        self._tournaments: Dict[str, TournamentData] = {}

    def create_tournament(
        self, name: str, teams: List[TeamInfo], players: List[PlayerInfo], overs: int = 20,
        status: TournamentStatus = TournamentStatus.ACTIVE, tournament_id: Optional[str] = None,
    ) -> TournamentData:
        tournament = TournamentData(
            id=tournament_id or generate_id(),
            name=name,
            overs=overs,
            teams=copy.deepcopy(list(teams)),
            players=copy.deepcopy(list(players)),
            status=TournamentStatus(status),
        )
        self._tournaments[tournament.id] = tournament
        return copy.deepcopy(tournament)

    def get_tournament(self, tournament_id: str) -> TournamentData:
        tournament = self._tournaments.get(tournament_id)
        if tournament is None:
            raise NotFoundError(f"Tournament {tournament_id} not found")
        return copy.deepcopy(tournament)

    def update_tournament(self, tournament_id: str, patch: dict) -> TournamentData:
        _check_patch(patch)
        tournament = self._tournaments.get(tournament_id)
        if tournament is None:
            raise NotFoundError(f"Tournament {tournament_id} not found")
        for key, value in patch.items():
            setattr(tournament, key, copy.deepcopy(value))
        return copy.deepcopy(tournament)


class SqlTournamentRepository:
    """SQLAlchemy-backed repository. Match state is stored as a JSON document per fixture."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _load(self, session: Session, tournament_id: str) -> Tournament:
        tournament = session.get(Tournament, tournament_id)
        if tournament is None:
            raise NotFoundError(f"Tournament {tournament_id} not found")
        return tournament

    @staticmethod
    def _to_data(tournament: Tournament) -> TournamentData:
        return TournamentData(
            id=tournament.id,
            name=tournament.name,
            overs=tournament.overs,
            teams=[
                TeamInfo(id=t.id, name=t.name, short_name=t.short_name, color=t.color, players=t.roster)
                for t in tournament.teams
            ],
            players=[
                PlayerInfo(id=p.id, name=p.name, team_id=p.team_id, role=p.role, base_price=p.base_price)
                for p in tournament.players
            ],
            matches=[Match.from_dict(json.loads(m.state_json)) for m in tournament.matches],
            status=TournamentStatus(tournament.status),
            champion_id=tournament.champion_id,
            runner_up_id=tournament.runner_up_id,
            auction=AuctionState.from_dict(json.loads(tournament.auction_json)) if tournament.auction_json else None,
        )

    # Rows are updated in place by id; dropped ids are removed by the delete-orphan cascade

    @staticmethod
    def _set_teams(tournament: Tournament, teams: List[TeamInfo]) -> None:
        existing = {row.id: row for row in tournament.teams}
        rows = []
        for pos, team in enumerate(teams):
            row = existing.get(team.id) or TournamentTeam(id=team.id)
            row.position = pos
            row.name = team.name
            row.short_name = team.short_name
            row.color = team.color
            row.roster_json = json.dumps(list(team.players))
            rows.append(row)
        tournament.teams = rows

    @staticmethod
    def _set_players(tournament: Tournament, players: List[PlayerInfo]) -> None:
        existing = {row.id: row for row in tournament.players}
        rows = []
        for pos, player in enumerate(players):
            row = existing.get(player.id) or TournamentPlayer(id=player.id)
            row.position = pos
            row.name = player.name
            row.role = player.role
            row.team_id = player.team_id
            row.base_price = player.base_price
            rows.append(row)
        tournament.players = rows

    @staticmethod
    def _set_matches(tournament: Tournament, matches: List[Match]) -> None:
        existing = {record.id: record for record in tournament.matches}
        records = []
        for number, match in enumerate(matches, 1):
            record = existing.get(match.id) or MatchRecord(id=match.id)
            record.match_number = number
            record.status = match.status.value
            record.winner_id = match.winner_id
            record.state_json = json.dumps(match.to_dict())
            records.append(record)
        tournament.matches = records

    def create_tournament(
        self, name: str, teams: List[TeamInfo], players: List[PlayerInfo], overs: int = 20,
        status: TournamentStatus = TournamentStatus.ACTIVE, tournament_id: Optional[str] = None,
    ) -> TournamentData:
        session = self.session_factory()
        try:
            tournament = Tournament(
                id=tournament_id or generate_id(), name=name, overs=overs, status=TournamentStatus(status).value,
            )
            self._set_teams(tournament, teams)
            self._set_players(tournament, players)
            session.add(tournament)
            session.commit()
            logger.info("Created tournament %s (%s) with %d teams", tournament.id, name, len(teams))
            return self._to_data(tournament)
        finally:
            session.close()

    def get_tournament(self, tournament_id: str) -> TournamentData:
        session = self.session_factory()
        try:
            return self._to_data(self._load(session, tournament_id))
        finally:
            session.close()

    def update_tournament(self, tournament_id: str, patch: dict) -> TournamentData:
        _check_patch(patch)
        session = self.session_factory()
        try:
            tournament = self._load(session, tournament_id)
            if "name" in patch:
                tournament.name = patch["name"]
            if "overs" in patch:
                tournament.overs = patch["overs"]
            if "teams" in patch:
                self._set_teams(tournament, patch["teams"])
            if "players" in patch:
                self._set_players(tournament, patch["players"])
            if "matches" in patch:
                self._set_matches(tournament, patch["matches"])
            if "status" in patch:
                tournament.status = TournamentStatus(patch["status"]).value
            if "champion_id" in patch:
                tournament.champion_id = patch["champion_id"]
            if "runner_up_id" in patch:
                tournament.runner_up_id = patch["runner_up_id"]
            if "auction" in patch:
                auction = patch["auction"]
                tournament.auction_json = json.dumps(auction.to_dict()) if auction is not None else None
            session.commit()
            return self._to_data(tournament)
        finally:
            session.close()
