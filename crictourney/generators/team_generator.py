"""
Team Generator - builds tournament teams from a fixed list of fictional franchises
"""
import random
from typing import Optional

from crictourney.engine.state import TeamInfo, PlayerInfo, generate_id
from crictourney.generators.player_generator import PlayerGenerator


FRANCHISE_TEAMS = [
    {"name": "Mumbai Titans", "short_name": "MT", "color": "#004BA0"},
    {"name": "Chennai Kings", "short_name": "CK", "color": "#FFFF00"},
    {"name": "Bangalore Warriors", "short_name": "BW", "color": "#EC1C24"},
    {"name": "Kolkata Knights", "short_name": "KK", "color": "#3A225D"},
    {"name": "Delhi Capitals", "short_name": "DC", "color": "#0078BC"},
    {"name": "Hyderabad Sunrisers", "short_name": "HS", "color": "#FF822A"},
    {"name": "Rajasthan Royals", "short_name": "RR", "color": "#EA1A85"},
    {"name": "Punjab Lions", "short_name": "PL", "color": "#ED1B24"},
]


class TeamGenerator:
    """Creates franchise teams with generated squads"""

    @classmethod
    def create_teams(
        cls, count: int = 8, rng: Optional[random.Random] = None, with_squads: bool = True,
    ) -> tuple[list[TeamInfo], list[PlayerInfo]]:
        """
        Create `count` franchise teams, each with a generated XI.

        Args:
            with_squads: False leaves the rosters empty, to be filled at auction

        Returns:
            (teams, players) - team rosters hold player ids in batting order
        """
        if not 2 <= count <= len(FRANCHISE_TEAMS):
            raise ValueError(f"Team count must be between 2 and {len(FRANCHISE_TEAMS)}")

        rng = rng or random.Random()
        teams = []
        players = []
        for team_data in FRANCHISE_TEAMS[:count]:
            team_id = generate_id()
            squad = PlayerGenerator.generate_squad(team_id, rng=rng) if with_squads else []
            teams.append(TeamInfo(
                id=team_id,
                name=team_data["name"],
                short_name=team_data["short_name"],
                color=team_data["color"],
                players=[p.id for p in squad],
            ))
            players.extend(squad)
        return teams, players

    @classmethod
    def get_team_choices(cls) -> list[dict]:
        """Franchises available for a tournament"""
        return [
            {"index": i, "name": t["name"], "short_name": t["short_name"], "color": t["color"]}
            for i, t in enumerate(FRANCHISE_TEAMS)
        ]
