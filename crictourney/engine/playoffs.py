"""
Playoffs - knockout fixtures from the league standings

Four or more teams play the IPL format:
- Qualifier 1: 1st vs 2nd
- Eliminator: 3rd vs 4th
- Qualifier 2: loser of Q1 vs winner of the Eliminator
- Final: winner of Q1 vs winner of Q2
With two or three teams the top two go straight to the final.

A tied knockout goes to the team placed higher in the league.
"""
from typing import List, Optional, Tuple

from crictourney.engine.state import Match, MatchType

PlannedFixture = Tuple[MatchType, str, str]


def league_matches(matches: List[Match]) -> List[Match]:
    return [m for m in matches if m.match_type == MatchType.LEAGUE.value]


def is_league_complete(matches: List[Match]) -> bool:
    league = league_matches(matches)
    return bool(league) and all(m.is_completed for m in league)


def _find(matches: List[Match], match_type: MatchType) -> Optional[Match]:
    return next((m for m in matches if m.match_type == match_type.value), None)


def knockout_winner(match: Match, league_order: List[str]) -> str:
    if match.winner_id is not None:
        return match.winner_id
    teams = (match.team1.id, match.team2.id)
    return min(teams, key=lambda t: league_order.index(t) if t in league_order else len(league_order))


def knockout_loser(match: Match, league_order: List[str]) -> str:
    winner = knockout_winner(match, league_order)
    return match.team2.id if winner == match.team1.id else match.team1.id


def first_round(league_order: List[str]) -> List[PlannedFixture]:
    """Opening knockout fixtures for the final league standings"""
    if len(league_order) < 2:
        raise ValueError("Playoffs need at least two teams")
    if len(league_order) < 4:
        return [(MatchType.FINAL, league_order[0], league_order[1])]
    return [
        (MatchType.QUALIFIER_1, league_order[0], league_order[1]),
        (MatchType.ELIMINATOR, league_order[2], league_order[3]),
    ]


def next_round(matches: List[Match], league_order: List[str]) -> List[PlannedFixture]:
    """Knockout fixtures that can be scheduled now that earlier rounds are decided"""
    q1 = _find(matches, MatchType.QUALIFIER_1)
    elim = _find(matches, MatchType.ELIMINATOR)
    q2 = _find(matches, MatchType.QUALIFIER_2)
    final = _find(matches, MatchType.FINAL)

    if final is not None or q1 is None or elim is None:
        return []
    if q2 is None:
        if q1.is_completed and elim.is_completed:
            return [(MatchType.QUALIFIER_2, knockout_loser(q1, league_order), knockout_winner(elim, league_order))]
        return []
    if q2.is_completed:
        return [(MatchType.FINAL, knockout_winner(q1, league_order), knockout_winner(q2, league_order))]
    return []


def tournament_result(matches: List[Match], league_order: List[str]) -> Optional[Tuple[str, str]]:
    """(champion, runner-up) once the final is played"""
    final = _find(matches, MatchType.FINAL)
    if final is None or not final.is_completed:
        return None
    return knockout_winner(final, league_order), knockout_loser(final, league_order)
