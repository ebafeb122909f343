"""
Points table and player leaderboards.

Both are recomputed from scratch from the completed matches every time, so
standings can always be re-derived and never drift. A malformed match record
is logged and skipped rather than blocking the whole table.
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Iterable, Optional

from crictourney.engine.state import Match, MatchStatus, TeamInfo, PlayerInfo

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10
MIN_OVERS_FOR_ECONOMY = 4
MIN_RUNS_FOR_STRIKE_RATE = 50

RECORD_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


@dataclass
class PointsTableRow:
    team_id: str
    team_name: str
    team_color: str
    played: int = 0
    won: int = 0
    lost: int = 0
    tied: int = 0
    no_result: int = 0
    points: int = 0
    net_run_rate: float = 0.0
    runs_scored: int = 0
    balls_faced: int = 0
    runs_conceded: int = 0
    balls_bowled: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Standing:
    """Points table row with its league position"""
    position: int
    row: PointsTableRow


@dataclass
class PerformanceStat:
    player_id: str
    player_name: str
    team_id: Optional[str]
    team_name: str = ""
    team_color: str = ""
    matches: int = 0
    runs: int = 0
    balls: int = 0
    strike_rate: float = 0.0
    wickets: int = 0
    overs: float = 0.0
    runs_conceded: int = 0
    economy: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PerformanceStats:
    most_runs: List[PerformanceStat] = field(default_factory=list)
    most_wickets: List[PerformanceStat] = field(default_factory=list)
    best_economy: List[PerformanceStat] = field(default_factory=list)
    highest_strike_rate: List[PerformanceStat] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "most_runs": [s.to_dict() for s in self.most_runs],
            "most_wickets": [s.to_dict() for s in self.most_wickets],
            "best_economy": [s.to_dict() for s in self.best_economy],
            "highest_strike_rate": [s.to_dict() for s in self.highest_strike_rate],
        }


def net_run_rate(runs_scored: int, balls_faced: int, runs_conceded: int, balls_bowled: int) -> float:
    """(runs scored per over) - (runs conceded per over); 0 without balls on both sides"""
    if balls_faced <= 0 or balls_bowled <= 0:
        return 0.0
    scoring_rate = runs_scored / (balls_faced / 6)
    conceding_rate = runs_conceded / (balls_bowled / 6)
    return round(scoring_rate - conceding_rate, 3)


def _balls(overs: float) -> int:
    return int(round(overs * 6))


def _fold_match(table: Dict[str, PointsTableRow], match: Match) -> None:
    # Read everything first so a bad record leaves the table untouched
    team1_id, team2_id = match.team1.id, match.team2.id
    row1, row2 = table[team1_id], table[team2_id]
    score1, score2 = int(match.team1.score), int(match.team2.score)
    balls1, balls2 = _balls(match.team1.overs), _balls(match.team2.overs)
    winner_id, is_tied = match.winner_id, match.is_tied

    row1.played += 1
    row2.played += 1

    row1.runs_scored += score1
    row1.balls_faced += balls1
    row1.runs_conceded += score2
    row1.balls_bowled += balls2

    row2.runs_scored += score2
    row2.balls_faced += balls2
    row2.runs_conceded += score1
    row2.balls_bowled += balls1

    if winner_id == team1_id:
        row1.won += 1
        row1.points += 2
        row2.lost += 1
    elif winner_id == team2_id:
        row2.won += 1
        row2.points += 2
        row1.lost += 1
    elif is_tied:
        row1.tied += 1
        row2.tied += 1
        row1.points += 1
        row2.points += 1
    else:
        # No result: scored exactly like a tie
        row1.no_result += 1
        row2.no_result += 1
        row1.points += 1
        row2.points += 1


def generate_points_table(teams: Iterable[TeamInfo], completed_matches: Iterable[Match]) -> Dict[str, PointsTableRow]:
    """Fold every completed match into a fresh row per team"""
    try:
        table = {
            team.id: PointsTableRow(team_id=team.id, team_name=team.name, team_color=team.color)
            for team in teams
        }

        for match in completed_matches:
            try:
                if match.status != MatchStatus.COMPLETED:
                    continue
                _fold_match(table, match)
            except RECORD_ERRORS as e:
                logger.warning("Skipping malformed match record %s in points table: %s", getattr(match, "id", None), e)

        for row in table.values():
            row.net_run_rate = net_run_rate(row.runs_scored, row.balls_faced, row.runs_conceded, row.balls_bowled)

        return table
    except RECORD_ERRORS:
        logger.exception("Failed to generate points table")
        return {}


def sort_standings(table: Dict[str, PointsTableRow]) -> List[Standing]:
    """League order: points, then net run rate"""
    rows = sorted(table.values(), key=lambda r: (r.points, r.net_run_rate), reverse=True)
    return [Standing(position=pos, row=row) for pos, row in enumerate(rows, 1)]


def _fold_scorecards(stats: Dict[str, PerformanceStat], match: Match) -> None:
    batting = [(b.player_id, int(b.runs), int(b.balls)) for b in match.batting_scorecard]
    bowling = [(b.player_id, int(b.wickets), float(b.overs), int(b.runs)) for b in match.bowling_scorecard]
    appeared = set()

    for player_id, runs, balls in batting:
        stat = stats.get(player_id)
        if stat is None:
            continue
        appeared.add(player_id)
        stat.runs += runs
        stat.balls += balls
        stat.strike_rate = round(stat.runs / stat.balls * 100, 2) if stat.balls > 0 else 0.0

    for player_id, wickets, overs, runs in bowling:
        stat = stats.get(player_id)
        if stat is None:
            continue
        appeared.add(player_id)
        stat.wickets += wickets
        stat.overs = round(stat.overs + overs, 4)
        stat.runs_conceded += runs
        stat.economy = round(stat.runs_conceded / stat.overs, 2) if stat.overs > 0 else 0.0

    for player_id in appeared:
        stats[player_id].matches += 1


def generate_performance_stats(
    teams: Iterable[TeamInfo],
    players: Iterable[PlayerInfo],
    completed_matches: Iterable[Match],
) -> PerformanceStats:
    """Fold every completed scorecard into per-player totals and derive the top-10 lists"""
    try:
        teams_by_id = {t.id: t for t in teams}
        stats: Dict[str, PerformanceStat] = {}
        for player in players:
            team = teams_by_id.get(player.team_id)
            stats[player.id] = PerformanceStat(
                player_id=player.id,
                player_name=player.name,
                team_id=player.team_id,
                team_name=team.name if team else "",
                team_color=team.color if team else "",
            )

        for match in completed_matches:
            try:
                if match.status != MatchStatus.COMPLETED:
                    continue
                _fold_scorecards(stats, match)
            except RECORD_ERRORS as e:
                logger.warning("Skipping malformed match record %s in performance stats: %s", getattr(match, "id", None), e)

        all_stats = list(stats.values())
        return PerformanceStats(
            most_runs=sorted(
                [s for s in all_stats if s.runs > 0], key=lambda s: s.runs, reverse=True
            )[:LEADERBOARD_SIZE],
            most_wickets=sorted(
                [s for s in all_stats if s.wickets > 0], key=lambda s: s.wickets, reverse=True
            )[:LEADERBOARD_SIZE],
            best_economy=sorted(
                [s for s in all_stats if s.overs >= MIN_OVERS_FOR_ECONOMY], key=lambda s: s.economy
            )[:LEADERBOARD_SIZE],
            highest_strike_rate=sorted(
                [s for s in all_stats if s.runs >= MIN_RUNS_FOR_STRIKE_RATE], key=lambda s: s.strike_rate, reverse=True
            )[:LEADERBOARD_SIZE],
        )
    except RECORD_ERRORS:
        logger.exception("Failed to generate performance stats")
        return PerformanceStats()
