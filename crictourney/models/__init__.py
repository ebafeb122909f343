from crictourney.models.tournament import Tournament, TournamentTeam, TournamentPlayer, MatchRecord

__all__ = [
    "Tournament",
    "TournamentTeam",
    "TournamentPlayer",
    "MatchRecord",
]
