"""
Innings and match transitions.

innings 1 live -> innings 2 live -> completed. There are two ways into
`completed`: the second innings running out (all out or overs bowled) and
the chasing side passing the target mid-over. Both leave the same record
behind, a winner (or tie), a result summary and a result commentary line.

Functions here mutate the match they are given; the ball processor calls
them on its private working copy.
"""
import logging
from typing import Optional

from crictourney.engine.errors import IllegalStateError
from crictourney.engine.state import (
    Match, MatchSide, MatchStatus, CommentaryType, BattingEntry, BowlingEntry, utc_now,
)

logger = logging.getLogger(__name__)

MAX_WICKETS = 10
BOWLING_ROTATION_SIZE = 5


def bowling_rotation(side: MatchSide) -> list[str]:
    """Bowlers bat last, so the tail of the roster shares the overs"""
    return list(reversed(side.players[-BOWLING_ROTATION_SIZE:]))


def select_bowler(match: Match) -> Optional[str]:
    """Pick the bowler for the current over (no one bowls consecutive overs when the rotation allows)"""
    rotation = bowling_rotation(match.bowling_side)
    if not rotation:
        match.bowler_id = None
        return None

    bowler_id = rotation[match.current_over % len(rotation)]
    match.bowler_id = bowler_id
    if match.bowling_entry(bowler_id) is None:
        match.bowling_scorecard.append(BowlingEntry(player_id=bowler_id, team_id=match.bowling_team_id))
    return bowler_id


def next_batter(match: Match) -> Optional[str]:
    """First player in the batting order who hasn't come in yet"""
    for player_id in match.batting_side.players:
        entry = match.batting_entry(player_id)
        if entry is None:
            return player_id
    return None


def bring_in_batter(match: Match) -> Optional[str]:
    player_id = next_batter(match)
    if player_id is not None:
        match.batting_scorecard.append(BattingEntry(player_id=player_id, team_id=match.batting_team_id))
    return player_id


def open_innings(match: Match) -> None:
    """Send in the openers and pick the first bowler"""
    match.striker_id = bring_in_batter(match)
    match.non_striker_id = bring_in_batter(match)
    select_bowler(match)


def should_end_innings(match: Match) -> bool:
    """All out first, then overs exhausted. Evaluated once per ball."""
    if match.batting_side.wickets >= MAX_WICKETS:
        return True
    if match.current_over >= match.overs:
        return True
    return False


def _sync_overs(side: MatchSide) -> None:
    side.overs = side.balls / 6


def _wickets_label(count: int) -> str:
    return f"{count} wicket{'s' if count != 1 else ''}"


def _runs_label(count: int) -> str:
    return f"{count} run{'s' if count != 1 else ''}"


def end_innings(match: Match) -> Match:
    """
    Close the current innings.

    First innings: switch to the chase, swap sides, reset the over counters
    and set the target. Second innings: decide the match on runs.
    """
    _require_live(match)

    batting = match.batting_side
    _sync_overs(batting)

    if match.current_innings == 1:
        match.add_commentary(
            f"End of first innings. {batting.name} scored {batting.score}/{batting.wickets} "
            f"({batting.overs_display} overs)",
            CommentaryType.INNINGS_END,
        )

        match.current_innings = 2
        match.batting_team_id, match.bowling_team_id = match.bowling_team_id, match.batting_team_id
        match.current_over = 0
        match.current_ball = 0
        match.target = batting.score + 1

        chasing = match.batting_side
        match.add_commentary(
            f"{chasing.name} need {match.target} runs to win from {match.overs * 6} balls",
            CommentaryType.TARGET,
        )
        open_innings(match)
        logger.info("Match %s: first innings closed at %s/%s, target %s",
                    match.id, batting.score, batting.wickets, match.target)
    else:
        team1, team2 = match.team1, match.team2
        if team1.score > team2.score:
            _declare_winner(match, team1, f"{team1.name} won by {_runs_label(team1.score - team2.score)}")
        elif team2.score > team1.score:
            _declare_winner(match, team2, f"{team2.name} won by {_runs_label(team2.score - team1.score)}")
        else:
            match.is_tied = True
            match.winner_id = None
            match.result_summary = f"Match tied! Both teams scored {team1.score} runs"
            _finish(match)

    match.last_updated = utc_now()
    return match


def complete_chase(match: Match) -> Match:
    """The chasing side has passed the target: match over on this delivery"""
    _require_live(match)

    batting = match.batting_side
    _sync_overs(batting)
    wickets_left = MAX_WICKETS - batting.wickets
    _declare_winner(match, batting, f"{batting.name} won by {_wickets_label(wickets_left)}")
    match.last_updated = utc_now()
    return match


def _declare_winner(match: Match, winner: MatchSide, summary: str) -> None:
    match.winner_id = winner.id
    match.is_tied = False
    match.result_summary = summary
    _finish(match)


def _finish(match: Match) -> None:
    match.status = MatchStatus.COMPLETED
    match.striker_id = None
    match.non_striker_id = None
    match.bowler_id = None
    match.add_commentary(match.result_summary, CommentaryType.RESULT)
    logger.info("Match %s completed: %s", match.id, match.result_summary)


def _require_live(match: Match) -> None:
    if match.is_completed:
        raise IllegalStateError(f"Match {match.id} is already completed")
    if match.status != MatchStatus.LIVE:
        raise IllegalStateError(f"Match {match.id} has not started")
