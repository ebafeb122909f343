"""
Ball outcome table and weighted sampler.
"""
import enum
import random
from typing import Optional


class BallOutcome(str, enum.Enum):
    DOT = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    SIX = "6"
    WICKET = "W"
    WIDE = "WD"
    NO_BALL = "NB"
    LEG_BYE = "LB"
    BYE = "B"

    @property
    def runs(self) -> int:
        """Runs scored off the bat for numeric outcomes, 0 otherwise"""
        if self in RUN_OUTCOMES:
            return int(self.value)
        return 0

    @property
    def is_legal(self) -> bool:
        """Wides and no-balls are replayed and don't count toward the over"""
        return self not in (BallOutcome.WIDE, BallOutcome.NO_BALL)


RUN_OUTCOMES = frozenset({
    BallOutcome.DOT, BallOutcome.ONE, BallOutcome.TWO,
    BallOutcome.THREE, BallOutcome.FOUR, BallOutcome.SIX,
})

# Fixed distribution, independent of batter and bowler. Weights sum to 100.
OUTCOME_WEIGHTS = (
    (BallOutcome.DOT, 30),
    (BallOutcome.ONE, 25),
    (BallOutcome.TWO, 10),
    (BallOutcome.THREE, 3),
    (BallOutcome.FOUR, 15),
    (BallOutcome.SIX, 5),
    (BallOutcome.WICKET, 7),
    (BallOutcome.WIDE, 2),
    (BallOutcome.NO_BALL, 1),
    (BallOutcome.LEG_BYE, 1),
    (BallOutcome.BYE, 1),
)

DISMISSAL_TYPES = [
    ("bowled", 0.20),
    ("caught", 0.50),
    ("lbw", 0.15),
    ("caught_behind", 0.10),
    ("stumped", 0.05),
]


class OutcomeSampler:
    """
    Draws ball outcomes from OUTCOME_WEIGHTS.

    Pass a seeded random.Random to make a sequence reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._outcomes = [o for o, _ in OUTCOME_WEIGHTS]
        self._weights = [w for _, w in OUTCOME_WEIGHTS]

    def sample(self) -> BallOutcome:
        return self.rng.choices(self._outcomes, weights=self._weights)[0]

    def sample_dismissal(self) -> str:
        kinds = [d for d, _ in DISMISSAL_TYPES]
        weights = [w for _, w in DISMISSAL_TYPES]
        return self.rng.choices(kinds, weights=weights)[0]


class ScriptedSampler(OutcomeSampler):
    """Replays a fixed outcome sequence, for tests and replays"""

    def __init__(self, outcomes, rng: Optional[random.Random] = None):
        super().__init__(rng)
        self._script = [BallOutcome(o) for o in outcomes]

    def sample(self) -> BallOutcome:
        if not self._script:
            raise IndexError("Outcome script exhausted")
        return self._script.pop(0)
