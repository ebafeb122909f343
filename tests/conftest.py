"""
Shared fixtures: in-memory tournaments, scripted randomness and a fake timer.
"""
import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from crictourney.database import init_db
from crictourney.engine.lifecycle import MatchLifecycleManager
from crictourney.engine.outcomes import ScriptedSampler
from crictourney.engine.state import TeamInfo, PlayerInfo
from crictourney.repository import InMemoryTournamentRepository


def quiet_commentary(category, value=None):
    return category


class ScriptedRandom(random.Random):
    """random() returns the scripted values in order, then 0.9"""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)

    def random(self):
        if self.values:
            return self.values.pop(0)
        return 0.9


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Records scheduled ticks; tests fire them by hand"""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire(self):
        assert len(self.pending) == 1, f"Expected one pending tick, found {len(self.pending)}"
        timer = self.pending[0]
        timer.fired = True
        timer.callback()


def create_teams(roster_size: int = 11):
    teams = [
        TeamInfo(id="a", name="Alpha", short_name="ALP", color="#111111",
                 players=[f"a{i}" for i in range(roster_size)]),
        TeamInfo(id="b", name="Bravo", short_name="BRV", color="#222222",
                 players=[f"b{i}" for i in range(roster_size)]),
        TeamInfo(id="c", name="Charlie", short_name="CHA", color="#333333",
                 players=[f"c{i}" for i in range(roster_size)]),
    ]
    players = [
        PlayerInfo(id=pid, name=f"Player {pid}", team_id=team.id, role="batsman")
        for team in teams for pid in team.players
    ]
    return teams, players


@pytest.fixture
def repository():
    """In-memory repository holding tournament 't1' with three teams, one over a side"""
    repo = InMemoryTournamentRepository()
    teams, players = create_teams()
    repo.create_tournament("Test Cup", teams, players, overs=1, tournament_id="t1")
    return repo


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture
def make_manager(repository, fake_scheduler):
    """Factory for a lifecycle session with scripted outcomes and toss"""

    def factory(outcomes=(), toss=(0.9, 0.9)):
        manager = MatchLifecycleManager(
            repository,
            commentary=quiet_commentary,
            sampler=ScriptedSampler(outcomes, rng=random.Random(0)),
            rng=ScriptedRandom(toss),
            scheduler=fake_scheduler,
            base_interval=1.0,
        )
        manager.initialize_match_state("t1")
        return manager

    return factory


@pytest.fixture
def sql_session_factory():
    """In-memory SQLite shared across sessions"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(bind=engine)
    engine.dispose()
