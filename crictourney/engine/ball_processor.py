"""
Ball processor - applies one outcome to a match.

`process_ball` never touches the match it is given: it works on a deep copy
and returns it, so callers only ever publish a fully updated match.
"""
import copy
from typing import Callable, Optional, Union

from crictourney.engine.commentary import CommentaryGenerator
from crictourney.engine.errors import IllegalStateError
from crictourney.engine.innings import (
    bring_in_batter, complete_chase, end_innings, select_bowler, should_end_innings, MAX_WICKETS,
)
from crictourney.engine.outcomes import BallOutcome, RUN_OUTCOMES
from crictourney.engine.state import Match, MatchStatus, CommentaryType, utc_now

CommentaryFn = Callable[..., str]

EXTRA_COMMENTARY = {
    BallOutcome.WIDE: "wide",
    BallOutcome.NO_BALL: "no_ball",
    BallOutcome.LEG_BYE: "leg_bye",
    BallOutcome.BYE: "bye",
}

_default_commentary = CommentaryGenerator()


def process_ball(
    match: Match,
    outcome: Union[BallOutcome, str],
    commentary: Optional[CommentaryFn] = None,
    dismissal: str = "out",
) -> Match:
    """
    Return a new match with one delivery applied.

    Wides and no-balls are replayed and leave the ball counter alone; every
    other outcome is a legal delivery. Innings end is checked once, after
    the ball/over counters move: all out first, then overs exhausted.
    """
    if match.status != MatchStatus.LIVE:
        raise IllegalStateError(f"Match {match.id} is not live ({match.status.value})")

    outcome = BallOutcome(outcome)
    commentary = commentary or _default_commentary
    working = copy.deepcopy(match)
    delivery = f"{working.current_over}.{working.current_ball + 1}"

    if outcome in RUN_OUTCOMES:
        _apply_runs(working, outcome.runs, commentary, delivery)
    elif outcome == BallOutcome.WICKET:
        _apply_wicket(working, commentary, delivery, dismissal)
    else:
        _apply_extra(working, outcome, commentary, delivery)

    if outcome.is_legal:
        _advance_ball(working)

    if not working.is_completed and should_end_innings(working):
        end_innings(working)

    working.last_updated = utc_now()
    return working


def _rotate_strike(match: Match) -> None:
    match.striker_id, match.non_striker_id = match.non_striker_id, match.striker_id


def _check_target(match: Match) -> None:
    if match.current_innings != 2 or match.target is None:
        return
    if match.batting_side.score >= match.target:
        complete_chase(match)


def _apply_runs(match: Match, runs: int, commentary: CommentaryFn, delivery: str) -> None:
    match.batting_side.score += runs

    batter = match.batting_entry(match.striker_id)
    if batter:
        batter.runs += runs
        batter.balls += 1
        if runs == 4:
            batter.fours += 1
        elif runs == 6:
            batter.sixes += 1

    bowler = match.bowling_entry(match.bowler_id)
    if bowler:
        bowler.runs += runs

    if runs == 6:
        category, kind = "six", CommentaryType.SIX
    elif runs == 4:
        category, kind = "boundary", CommentaryType.BOUNDARY
    elif runs == 0:
        category, kind = "dot", CommentaryType.RUN
    else:
        category, kind = "run", CommentaryType.RUN
    match.add_commentary(commentary(category, runs), kind, ball=delivery)

    if runs % 2 == 1:
        _rotate_strike(match)

    _check_target(match)


def _apply_wicket(match: Match, commentary: CommentaryFn, delivery: str, dismissal: str) -> None:
    batting = match.batting_side
    batting.wickets = min(batting.wickets + 1, MAX_WICKETS)

    batter = match.batting_entry(match.striker_id)
    if batter:
        batter.balls += 1
        batter.is_out = True
        batter.dismissal = dismissal

    bowler = match.bowling_entry(match.bowler_id)
    if bowler:
        bowler.wickets += 1

    match.add_commentary(commentary("wicket"), CommentaryType.WICKET, ball=delivery)

    if batting.wickets < MAX_WICKETS:
        match.striker_id = bring_in_batter(match)
    else:
        match.striker_id = None


def _apply_extra(match: Match, outcome: BallOutcome, commentary: CommentaryFn, delivery: str) -> None:
    batting = match.batting_side
    batting.score += 1
    batting.extras += 1

    bowler = match.bowling_entry(match.bowler_id)
    if outcome == BallOutcome.WIDE or outcome == BallOutcome.NO_BALL:
        # Replayed delivery, charged to the bowler
        if bowler:
            bowler.runs += 1
            if outcome == BallOutcome.WIDE:
                bowler.wides += 1
            else:
                bowler.no_balls += 1
        delivery = f"{match.current_over}.{match.current_ball}"
    else:
        batter = match.batting_entry(match.striker_id)
        if batter:
            batter.balls += 1
        _rotate_strike(match)

    match.add_commentary(commentary(EXTRA_COMMENTARY[outcome], 1), CommentaryType.EXTRA, ball=delivery)
    _check_target(match)


def _advance_ball(match: Match) -> None:
    batting = match.batting_side
    batting.balls += 1
    if match.is_completed:
        # Chase finished on this delivery
        batting.overs = batting.balls / 6

    bowler = match.bowling_entry(match.bowler_id)
    if bowler:
        bowler.balls += 1

    match.current_ball += 1
    if match.current_ball < 6:
        return

    match.current_ball = 0
    match.current_over += 1
    batting.overs = batting.balls / 6

    if match.is_completed:
        return

    match.add_commentary(
        f"End of over {match.current_over}: {batting.name} {batting.score}/{batting.wickets}",
        CommentaryType.OVER_END,
    )
    _rotate_strike(match)
    if match.current_over < match.overs:
        select_bowler(match)
