import random
import threading
from typing import Optional
from faker import Faker

from crictourney.engine.state import PlayerInfo, generate_id

# Faker instances per region - en_US stands in where no locale exists
fake_in = Faker('en_IN')
fake_au = Faker('en_AU')
fake_en = Faker('en_GB')
fake_za = Faker('en_US')
fake_nz = Faker('en_NZ')

# The Faker instances are shared; a name is drawn right after reseeding
_name_lock = threading.Lock()


class PlayerGenerator:
    """Generates fictional players for tournament squads"""

    # Name pool distribution (weighted towards Indian names)
    NAME_POOLS = [
        (fake_in, 60),
        (fake_au, 12),
        (fake_en, 12),
        (fake_za, 8),
        (fake_nz, 8),
    ]

    ROLE_WEIGHTS = {
        "batsman": 30,
        "bowler": 35,
        "all_rounder": 20,
        "wicket_keeper": 15,
    }

    # Batting order for a generated XI: top order first, bowlers last.
    # The bowling rotation is taken from the tail of the roster.
    SQUAD_COMPOSITION = [
        "batsman", "batsman", "wicket_keeper", "batsman", "batsman",
        "all_rounder", "all_rounder", "bowler", "bowler", "bowler", "bowler",
    ]

    @staticmethod
    def _weighted_choice(choices: list[tuple], rng: random.Random) -> any:
        """Select from weighted choices [(item, weight), ...]"""
        items = [c[0] for c in choices]
        weights = [c[1] for c in choices]
        return rng.choices(items, weights=weights, k=1)[0]

    @classmethod
    def generate_player(
        cls, team_id: Optional[str] = None, role: Optional[str] = None, rng: Optional[random.Random] = None,
    ) -> PlayerInfo:
        """
        Generate a single player.

        Args:
            team_id: Team the player is drafted into, or None for an unsold player
            role: Specific role, or weighted random if None
            rng: Random source for role, name pool and name
        """
        rng = rng or random.Random()
        faker_instance = cls._weighted_choice(cls.NAME_POOLS, rng)
        if role is None:
            role = cls._weighted_choice(list(cls.ROLE_WEIGHTS.items()), rng)

        # Names follow rng too, so a seeded rng reproduces the whole squad
        with _name_lock:
            faker_instance.seed_instance(rng.getrandbits(32))
            name = faker_instance.name_male()

        return PlayerInfo(
            id=generate_id(),
            name=name,
            team_id=team_id,
            role=role,
        )

    @classmethod
    def generate_squad(cls, team_id: str, rng: Optional[random.Random] = None) -> list[PlayerInfo]:
        """Generate a full XI in batting order"""
        rng = rng or random.Random()
        return [cls.generate_player(team_id=team_id, role=role, rng=rng) for role in cls.SQUAD_COMPOSITION]

    @classmethod
    def generate_player_pool(cls, count: int, rng: Optional[random.Random] = None) -> list[PlayerInfo]:
        """Generate unattached players with weighted random roles"""
        rng = rng or random.Random()
        return [cls.generate_player(rng=rng) for _ in range(count)]
