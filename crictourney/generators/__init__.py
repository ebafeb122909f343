from crictourney.generators.player_generator import PlayerGenerator
from crictourney.generators.team_generator import TeamGenerator, FRANCHISE_TEAMS

__all__ = ["PlayerGenerator", "TeamGenerator", "FRANCHISE_TEAMS"]
