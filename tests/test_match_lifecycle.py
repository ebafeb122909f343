"""
Tests for the match lifecycle - create, toss/start, simulate, finish.
"""
import random

import pytest

from crictourney.engine.errors import NotFoundError, IllegalStateError
from crictourney.engine.lifecycle import MatchLifecycleManager
from crictourney.engine.outcomes import OutcomeSampler, ScriptedSampler, BallOutcome
from crictourney.engine.state import MatchStatus, TossDecision, CommentaryType, TournamentStatus

from conftest import quiet_commentary, ScriptedRandom, FakeScheduler

# One-over match: Alpha make 24, Bravo pass 25 with the fifth ball of the chase
FULL_MATCH = ["4"] * 6 + ["6"] * 5


def play_out(manager):
    match = None
    while manager.current_match is not None:
        match = manager.simulate_ball()
    return match


class TestCreateMatch:

    def test_creates_scheduled_match(self, make_manager, repository):
        manager = make_manager()
        match = manager.create_match("t1", "a", "b", venue="Eden Gardens")

        assert match.status == MatchStatus.SCHEDULED
        assert match.overs == 1
        assert match.venue == "Eden Gardens"
        assert match.match_type == "league"
        assert match.team1.players == [f"a{i}" for i in range(11)]
        assert match.team1.score == 0 and match.team2.wickets == 0
        assert [m.id for m in manager.scheduled_matches] == [match.id]
        assert [m.id for m in repository.get_tournament("t1").matches] == [match.id]

    def test_overs_override(self, make_manager):
        match = make_manager().create_match("t1", "a", "b", overs=5)
        assert match.overs == 5

    def test_unknown_team(self, make_manager):
        with pytest.raises(NotFoundError):
            make_manager().create_match("t1", "a", "zz")

    def test_unknown_tournament(self, make_manager):
        with pytest.raises(NotFoundError):
            make_manager().create_match("nope", "a", "b")

    def test_team_cannot_play_itself(self, make_manager):
        with pytest.raises(ValueError):
            make_manager().create_match("t1", "a", "a")


class TestStartMatch:

    @pytest.mark.parametrize("toss,winner,decision,batting", [
        ((0.9, 0.9), "a", TossDecision.BAT, "a"),
        ((0.9, 0.1), "a", TossDecision.BOWL, "b"),
        ((0.1, 0.9), "b", TossDecision.BAT, "b"),
        ((0.1, 0.1), "b", TossDecision.BOWL, "a"),
    ])
    def test_toss_decides_batting_order(self, make_manager, toss, winner, decision, batting):
        manager = make_manager(toss=toss)
        match = manager.create_match("t1", "a", "b")
        started = manager.start_match("t1", match.id)

        assert started.toss_winner_id == winner
        assert started.toss_decision == decision
        assert started.batting_team_id == batting
        assert started.bowling_team_id == ("b" if batting == "a" else "a")

    def test_start_publishes_live_match(self, make_manager, repository):
        manager = make_manager()
        match = manager.create_match("t1", "a", "b")
        started = manager.start_match("t1", match.id)

        assert started.status == MatchStatus.LIVE
        assert manager.current_match.id == match.id
        assert manager.scheduled_matches == []
        assert [c.type for c in started.commentary] == [CommentaryType.INFO, CommentaryType.TOSS]
        assert started.commentary[1].text == "Alpha won the toss and elected to bat first"
        assert started.striker_id == "a0"
        assert started.bowler_id == "b10"
        assert repository.get_tournament("t1").match(match.id).status == MatchStatus.LIVE

    def test_missing_match(self, make_manager):
        with pytest.raises(NotFoundError):
            make_manager().start_match("t1", "missing")

    def test_cannot_start_twice(self, make_manager):
        manager = make_manager()
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)
        with pytest.raises(IllegalStateError):
            manager.start_match("t1", match.id)

    def test_one_live_match_at_a_time(self, make_manager):
        manager = make_manager()
        first = manager.create_match("t1", "a", "b")
        second = manager.create_match("t1", "b", "c")
        manager.start_match("t1", first.id)
        with pytest.raises(IllegalStateError):
            manager.start_match("t1", second.id)

    def test_completed_match_cannot_restart(self, make_manager):
        manager = make_manager(outcomes=FULL_MATCH)
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)
        play_out(manager)
        with pytest.raises(IllegalStateError):
            manager.start_match("t1", match.id)


class TestSimulateBall:

    def test_no_live_match(self, make_manager):
        with pytest.raises(IllegalStateError):
            make_manager().simulate_ball()

    def test_one_delivery_per_call(self, make_manager):
        manager = make_manager(outcomes=["4", "WD", "1"])
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)

        assert manager.simulate_ball().current_ball == 1
        assert manager.simulate_ball().current_ball == 1
        result = manager.simulate_ball()
        assert result.current_ball == 2
        assert result.team1.score == 6

    def test_returned_match_is_a_snapshot(self, make_manager):
        manager = make_manager(outcomes=["4"])
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)

        result = manager.simulate_ball()
        result.team1.score = 999

        assert manager.current_match.team1.score == 4

    def test_full_match_finishes_and_updates_standings(self, make_manager, repository):
        manager = make_manager(outcomes=FULL_MATCH)
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)

        final = play_out(manager)

        assert final.status == MatchStatus.COMPLETED
        assert final.winner_id == "b"
        assert final.team2.score == 30
        assert manager.current_match is None
        assert [m.id for m in manager.completed_matches] == [match.id]

        stored = repository.get_tournament("t1").match(match.id)
        assert stored.status == MatchStatus.COMPLETED
        assert stored.winner_id == "b"

        assert manager.points_table["b"].points == 2
        assert manager.points_table["a"].lost == 1
        assert manager.points_table["c"].played == 0
        assert manager.performance_stats.most_runs[0].team_id in ("a", "b")

        with pytest.raises(IllegalStateError):
            manager.simulate_ball()

    def test_failed_delivery_leaves_match_unchanged(self, make_manager):
        manager = make_manager(outcomes=["1"])
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)
        manager.simulate_ball()
        published = manager.current_match

        with pytest.raises(IndexError):
            manager.simulate_ball()

        assert manager.current_match is published
        assert manager.current_match.team1.score == 1

        manager.sampler = ScriptedSampler(["2"])
        assert manager.simulate_ball().team1.score == 3

    def test_not_reentrant(self, make_manager):
        manager = make_manager()
        errors = []

        class ReentrantSampler(OutcomeSampler):
            def sample(self):
                try:
                    manager.simulate_ball()
                except IllegalStateError as e:
                    errors.append(e)
                return BallOutcome.ONE

        manager.sampler = ReentrantSampler(random.Random(0))
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)

        result = manager.simulate_ball()

        assert len(errors) == 1
        assert result.team1.score == 1
        assert result.current_ball == 1


class TestSessionState:

    def test_finish_requires_completed_match(self, make_manager):
        manager = make_manager()
        match = manager.create_match("t1", "a", "b")
        with pytest.raises(IllegalStateError):
            manager.finish_match(match)

    def test_initialize_restores_results(self, make_manager, repository):
        manager = make_manager(outcomes=FULL_MATCH)
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)
        play_out(manager)
        manager.create_match("t1", "a", "c")

        restored = MatchLifecycleManager(repository)
        restored.initialize_match_state("t1")

        assert [m.id for m in restored.completed_matches] == [match.id]
        assert len(restored.scheduled_matches) == 1
        assert restored.points_table == manager.points_table

    def test_initialize_resumes_live_match(self, make_manager, repository):
        manager = make_manager()
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)

        restored = MatchLifecycleManager(repository, sampler=ScriptedSampler(["6"]))
        restored.initialize_match_state("t1")

        assert restored.current_match.id == match.id
        assert restored.simulate_ball().team1.score == 6

    def test_get_match(self, make_manager):
        manager = make_manager(outcomes=["4"])
        match = manager.create_match("t1", "a", "b")
        assert manager.get_match("t1", match.id).status == MatchStatus.SCHEDULED

        manager.start_match("t1", match.id)
        manager.simulate_ball()
        assert manager.get_match("t1", match.id).team1.score == 4

        with pytest.raises(NotFoundError):
            manager.get_match("t1", "missing")

    def test_standings_positions(self, make_manager):
        manager = make_manager(outcomes=FULL_MATCH)
        match = manager.create_match("t1", "a", "b")
        manager.start_match("t1", match.id)
        play_out(manager)

        standings = manager.standings()
        assert [s.position for s in standings] == [1, 2, 3]
        assert standings[0].row.team_id == "b"
        assert standings[-1].row.team_id == "a"


class FlakyStore:
    """Repository wrapper whose writes fail while `failing` is set"""

    def __init__(self, inner):
        self.inner = inner
        self.failing = False

    def get_tournament(self, tournament_id):
        return self.inner.get_tournament(tournament_id)

    def update_tournament(self, tournament_id, patch):
        if self.failing:
            raise RuntimeError("storage unavailable")
        return self.inner.update_tournament(tournament_id, patch)


@pytest.fixture
def flaky_store(repository):
    return FlakyStore(repository)


@pytest.fixture
def flaky_manager(flaky_store):
    manager = MatchLifecycleManager(
        flaky_store,
        commentary=quiet_commentary,
        sampler=ScriptedSampler(FULL_MATCH + ["6"], rng=random.Random(0)),
        rng=ScriptedRandom((0.9, 0.9)),
        scheduler=FakeScheduler(),
        base_interval=1.0,
    )
    manager.initialize_match_state("t1")
    return manager


class TestStorageFailures:

    def test_failed_save_of_winning_ball_keeps_match_live(self, flaky_manager, flaky_store, repository):
        match = flaky_manager.create_match("t1", "a", "b")
        flaky_manager.start_match("t1", match.id)
        for _ in range(10):
            flaky_manager.simulate_ball()
        before = flaky_manager.current_match

        flaky_store.failing = True
        with pytest.raises(RuntimeError):
            flaky_manager.simulate_ball()

        assert flaky_manager.current_match is before
        assert flaky_manager.current_match.status == MatchStatus.LIVE
        assert flaky_manager.completed_matches == []

        flaky_store.failing = False
        final = flaky_manager.simulate_ball()

        assert final.status == MatchStatus.COMPLETED
        assert flaky_manager.current_match is None
        assert [m.id for m in flaky_manager.completed_matches] == [match.id]
        assert repository.get_tournament("t1").match(match.id).status == MatchStatus.COMPLETED

        other = flaky_manager.create_match("t1", "a", "c")
        assert flaky_manager.start_match("t1", other.id).status == MatchStatus.LIVE

    def test_failed_start_claims_nothing(self, flaky_manager, flaky_store, repository):
        match = flaky_manager.create_match("t1", "a", "b")

        flaky_store.failing = True
        with pytest.raises(RuntimeError):
            flaky_manager.start_match("t1", match.id)

        assert flaky_manager.current_match is None
        assert [m.id for m in flaky_manager.scheduled_matches] == [match.id]
        assert repository.get_tournament("t1").match(match.id).status == MatchStatus.SCHEDULED

        flaky_store.failing = False
        assert flaky_manager.start_match("t1", match.id).status == MatchStatus.LIVE

    def test_start_while_live_leaves_store_untouched(self, make_manager, repository):
        manager = make_manager()
        first = manager.create_match("t1", "a", "b")
        second = manager.create_match("t1", "b", "c")
        manager.start_match("t1", first.id)

        with pytest.raises(IllegalStateError):
            manager.start_match("t1", second.id)

        assert repository.get_tournament("t1").match(second.id).status == MatchStatus.SCHEDULED


class TestFixtureRules:

    def test_unknown_match_type(self, make_manager):
        with pytest.raises(ValueError):
            make_manager().create_match("t1", "a", "b", match_type="friendly")

    @pytest.mark.parametrize("status", [TournamentStatus.SETUP, TournamentStatus.COMPLETED])
    def test_fixtures_need_active_tournament(self, make_manager, repository, status):
        manager = make_manager()
        repository.update_tournament("t1", {"status": status})
        with pytest.raises(IllegalStateError):
            manager.create_match("t1", "a", "b")
