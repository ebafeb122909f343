"""
Match lifecycle - create, toss, start, ball-by-ball simulation, finish.

One manager is one tournament session: at most one live match at a time,
a schedule of upcoming fixtures and the completed matches that feed the
standings. The manager is the only writer of the live match; everything
else reads the snapshot it publishes after each call.

Auto simulation is a timer owned by the manager. Every change to the run
condition (auto flag, pause flag, speed, live match) cancels the pending
tick before anything else happens, so a stale tick can never fire.
"""
import copy
import logging
import random
import threading
from typing import Callable, Dict, List, Optional

from crictourney.config import settings
from crictourney.engine.ball_processor import process_ball
from crictourney.engine.commentary import CommentaryGenerator
from crictourney.engine.errors import NotFoundError, IllegalStateError
from crictourney.engine.innings import open_innings
from crictourney.engine.playoffs import (
    first_round, next_round, is_league_complete, league_matches, tournament_result,
)
from crictourney.engine.outcomes import OutcomeSampler, BallOutcome
from crictourney.engine.state import (
    Match, MatchSide, MatchStatus, MatchType, TeamInfo, TournamentData, TournamentStatus, TossDecision,
    CommentaryType, generate_id, utc_now,
)
from crictourney.engine.statistics import (
    PointsTableRow, PerformanceStats, Standing,
    generate_points_table, generate_performance_stats, sort_standings,
)

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], object]


def timer_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run callback once after delay seconds on a daemon thread. The handle has cancel()."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def _match_side(team: TeamInfo) -> MatchSide:
    return MatchSide(id=team.id, name=team.name, color=team.color, players=list(team.players))


class MatchLifecycleManager:
    """Owns the live match of one tournament session"""

    def __init__(
        self,
        repository,
        commentary=None,
        sampler: Optional[OutcomeSampler] = None,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
        base_interval: Optional[float] = None,
    ):
        self.repository = repository
        self.rng = rng or random.Random()
        self.commentary = commentary or CommentaryGenerator(self.rng)
        self.sampler = sampler or OutcomeSampler(self.rng)
        self.scheduler = scheduler or timer_scheduler
        self.base_interval = base_interval if base_interval is not None else settings.AUTO_SIM_BASE_INTERVAL

        self.tournament_id: Optional[str] = None
        self.current_match: Optional[Match] = None
        self.scheduled_matches: List[Match] = []
        self.completed_matches: List[Match] = []
        self.points_table: Dict[str, PointsTableRow] = {}
        self.performance_stats = PerformanceStats()

        # Auto simulation
        self.auto_simulate = False
        self.paused = False
        self.speed = 1

        self._lock = threading.RLock()
        self._busy = False
        self._pending = None
        self._generation = 0

    # ==================== Session state ====================

    def initialize_match_state(self, tournament_id: str) -> TournamentData:
        """Load schedule, live match and results from the repository and rebuild standings"""
        tournament = self.repository.get_tournament(tournament_id)
        with self._lock:
            self.tournament_id = tournament.id
            self.scheduled_matches = [m for m in tournament.matches if m.status == MatchStatus.SCHEDULED]
            self.completed_matches = [m for m in tournament.matches if m.status == MatchStatus.COMPLETED]
            live = [m for m in tournament.matches if m.status == MatchStatus.LIVE]
            self.current_match = live[0] if live else None
            self._recompute_standings(tournament)
            self._reschedule()
        logger.info(
            "Loaded tournament %s: %d scheduled, %d completed, live match: %s",
            tournament.id, len(self.scheduled_matches), len(self.completed_matches),
            self.current_match.id if self.current_match else None,
        )
        return tournament

    def get_match(self, tournament_id: str, match_id: str) -> Match:
        live = self.current_match
        if live is not None and live.id == match_id and live.tournament_id == tournament_id:
            return copy.deepcopy(live)
        match = self.repository.get_tournament(tournament_id).match(match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        return match

    def standings(self) -> List[Standing]:
        return sort_standings(self.points_table)

    # ==================== Match operations ====================

    def create_match(
        self,
        tournament_id: str,
        team1_id: str,
        team2_id: str,
        match_type: str = "league",
        venue: Optional[str] = None,
        scheduled_date: Optional[str] = None,
        overs: Optional[int] = None,
    ) -> Match:
        match_type = MatchType(match_type)
        tournament = self.repository.get_tournament(tournament_id)
        if tournament.status != TournamentStatus.ACTIVE:
            raise IllegalStateError(f"Tournament {tournament.id} is {tournament.status.value}, fixtures need an active tournament")
        team1 = tournament.team(team1_id)
        team2 = tournament.team(team2_id)
        if team1 is None:
            raise NotFoundError(f"Team {team1_id} not found in tournament {tournament_id}")
        if team2 is None:
            raise NotFoundError(f"Team {team2_id} not found in tournament {tournament_id}")
        if team1_id == team2_id:
            raise ValueError("A team cannot play itself")

        match = Match(
            id=generate_id(),
            tournament_id=tournament.id,
            team1=_match_side(team1),
            team2=_match_side(team2),
            overs=overs or tournament.overs,
            venue=venue or "Home Ground",
            scheduled_date=scheduled_date or utc_now(),
            match_type=match_type.value,
        )
        self.repository.update_tournament(tournament.id, {"matches": tournament.matches + [match]})

        with self._lock:
            if self.tournament_id is None:
                self.tournament_id = tournament.id
            self.scheduled_matches.append(match)

        logger.info("Scheduled %s match %s: %s vs %s", match_type.value, match.id, team1.name, team2.name)
        return copy.deepcopy(match)

    def start_match(self, tournament_id: str, match_id: str) -> Match:
        """Toss, open the first innings and publish the match as live"""
        with self._lock:
            # The live slot is checked, stored and claimed in one step
            if self.current_match is not None:
                raise IllegalStateError(f"Match {self.current_match.id} is still live")
            tournament = self.repository.get_tournament(tournament_id)
            match = tournament.match(match_id)
            if match is None:
                raise NotFoundError(f"Match {match_id} not found")
            if match.status != MatchStatus.SCHEDULED:
                raise IllegalStateError(f"Match {match_id} is already {match.status.value}")

            # Two independent coin flips: who wins the toss, and what they choose
            toss_winner = match.team1 if self.rng.random() > 0.5 else match.team2
            decision = TossDecision.BAT if self.rng.random() > 0.5 else TossDecision.BOWL
            toss_loser = match.team2 if toss_winner is match.team1 else match.team1
            batting, bowling = (toss_winner, toss_loser) if decision == TossDecision.BAT else (toss_loser, toss_winner)

            match.toss_winner_id = toss_winner.id
            match.toss_decision = decision
            match.batting_team_id = batting.id
            match.bowling_team_id = bowling.id
            match.status = MatchStatus.LIVE
            match.current_innings = 1
            match.current_over = 0
            match.current_ball = 0

            match.add_commentary(self.commentary("match_start"), CommentaryType.INFO)
            match.add_commentary(
                f"{toss_winner.name} won the toss and elected to {decision.value} first",
                CommentaryType.TOSS,
            )
            open_innings(match)
            match.last_updated = utc_now()

            matches = [match if m.id == match.id else m for m in tournament.matches]
            self.repository.update_tournament(tournament.id, {"matches": matches})

            self.tournament_id = tournament.id
            self.current_match = match
            self.scheduled_matches = [m for m in self.scheduled_matches if m.id != match.id]
            self._reschedule()

        logger.info(
            "Match %s started: %s won the toss and chose to %s",
            match.id, toss_winner.name, decision.value,
        )
        return copy.deepcopy(match)

    def simulate_ball(self) -> Match:
        """
        Bowl one delivery of the live match.

        The ball is applied to a private copy; the published match is only
        replaced once the copy is complete, and a finished match only once
        it has been saved, so a failure leaves the live match untouched.
        """
        with self._lock:
            if self._busy:
                raise IllegalStateError("A delivery is already being simulated")
            if self.current_match is None:
                raise IllegalStateError("No live match to simulate")
            self._busy = True
            match = self.current_match

        try:
            outcome = self.sampler.sample()
            dismissal = self.sampler.sample_dismissal() if outcome == BallOutcome.WICKET else "out"
            updated = process_ball(match, outcome, self.commentary, dismissal)

            if updated.is_completed:
                self.finish_match(updated)
            else:
                with self._lock:
                    self.current_match = updated
            return copy.deepcopy(updated)
        finally:
            with self._lock:
                self._busy = False

    def finish_match(self, match: Match) -> None:
        """Write a completed match back to the tournament and rebuild the standings"""
        if not match.is_completed:
            raise IllegalStateError(f"Match {match.id} is not completed")

        tournament = self.repository.get_tournament(match.tournament_id)
        if tournament.match(match.id) is None:
            matches = tournament.matches + [match]
        else:
            matches = [match if m.id == match.id else m for m in tournament.matches]
        tournament = self.repository.update_tournament(tournament.id, {"matches": matches})

        with self._lock:
            if self.current_match is not None and self.current_match.id == match.id:
                self.current_match = None
            self.completed_matches = [m for m in self.completed_matches if m.id != match.id] + [match]
            self._recompute_standings(tournament)
            self._reschedule()

        logger.info("Match %s saved: %s", match.id, match.result_summary)

        if match.match_type != MatchType.LEAGUE.value:
            self._advance_playoffs(tournament)

    def _recompute_standings(self, tournament: TournamentData) -> None:
        # Knockout results count for the leaderboards but not the league table
        self.points_table = generate_points_table(tournament.teams, league_matches(self.completed_matches))
        self.performance_stats = generate_performance_stats(
            tournament.teams, tournament.players, self.completed_matches,
        )

    # ==================== Playoffs ====================

    def league_order(self, tournament: TournamentData) -> List[str]:
        """Team ids in final league position"""
        completed = [m for m in league_matches(tournament.matches) if m.is_completed]
        return [s.row.team_id for s in sort_standings(generate_points_table(tournament.teams, completed))]

    def generate_playoffs(self, tournament_id: str) -> List[Match]:
        """Schedule the first knockout round once every league match is played"""
        tournament = self.repository.get_tournament(tournament_id)
        if not is_league_complete(tournament.matches):
            raise IllegalStateError("League stage is not complete")
        if any(m.match_type != MatchType.LEAGUE.value for m in tournament.matches):
            raise IllegalStateError("Playoffs already generated")

        order = self.league_order(tournament)
        fixtures = [
            self.create_match(tournament.id, team1_id, team2_id, match_type=match_type.value)
            for match_type, team1_id, team2_id in first_round(order)
        ]
        logger.info(
            "Playoffs for tournament %s: %s",
            tournament.id, ", ".join(m.match_type for m in fixtures),
        )
        return fixtures

    def _advance_playoffs(self, tournament: TournamentData) -> None:
        """Schedule the next knockout round, or crown the champion after the final"""
        order = self.league_order(tournament)
        result = tournament_result(tournament.matches, order)
        if result is not None:
            champion_id, runner_up_id = result
            self.complete_tournament(tournament.id, champion_id, runner_up_id)
            return
        for match_type, team1_id, team2_id in next_round(tournament.matches, order):
            self.create_match(tournament.id, team1_id, team2_id, match_type=match_type.value)

    def complete_tournament(
        self, tournament_id: str, champion_id: str, runner_up_id: Optional[str] = None,
    ) -> TournamentData:
        tournament = self.repository.get_tournament(tournament_id)
        if tournament.status != TournamentStatus.ACTIVE:
            raise IllegalStateError(f"Tournament {tournament.id} is {tournament.status.value}, only an active tournament can complete")
        champion = tournament.team(champion_id)
        if champion is None:
            raise NotFoundError(f"Team {champion_id} not found in tournament {tournament_id}")
        if runner_up_id is not None and tournament.team(runner_up_id) is None:
            raise NotFoundError(f"Team {runner_up_id} not found in tournament {tournament_id}")

        tournament = self.repository.update_tournament(tournament.id, {
            "status": TournamentStatus.COMPLETED,
            "champion_id": champion_id,
            "runner_up_id": runner_up_id,
        })
        logger.info("Tournament %s completed, champion: %s", tournament.id, champion.name)
        return tournament

    # ==================== Auto simulation ====================

    @property
    def interval(self) -> float:
        """Seconds between automatic deliveries"""
        return self.base_interval / self.speed

    @property
    def is_auto_running(self) -> bool:
        return self.auto_simulate and not self.paused and self.current_match is not None

    def toggle_auto_simulation(self) -> bool:
        with self._lock:
            self.auto_simulate = not self.auto_simulate
            self._reschedule()
            logger.info("Auto simulation %s", "enabled" if self.auto_simulate else "disabled")
            return self.auto_simulate

    def toggle_simulation_pause(self) -> bool:
        with self._lock:
            self.paused = not self.paused
            self._reschedule()
            logger.info("Auto simulation %s", "paused" if self.paused else "resumed")
            return self.paused

    def set_simulation_speed(self, speed: float) -> float:
        if speed not in settings.SIMULATION_SPEEDS:
            allowed = ", ".join(f"{s}x" for s in settings.SIMULATION_SPEEDS)
            raise ValueError(f"Unsupported simulation speed {speed}; choose one of {allowed}")
        with self._lock:
            self.speed = speed
            self._reschedule()
        return speed

    def shutdown(self) -> None:
        """Stop auto simulation and drop any pending tick"""
        with self._lock:
            self.auto_simulate = False
            self._cancel_pending()

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _reschedule(self) -> None:
        with self._lock:
            self._cancel_pending()
            if not self.is_auto_running:
                return
            generation = self._generation
            self._pending = self.scheduler(self.interval, lambda: self._tick(generation))

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or not self.is_auto_running:
                return
            self._pending = None
            if self._busy:
                # A manual delivery is in flight, try again next interval
                self._reschedule()
                return

        try:
            self.simulate_ball()
        except Exception as e:
            logger.exception("Auto simulation stopped: %s", e)
            with self._lock:
                self.auto_simulate = False
                self._cancel_pending()
            return

        with self._lock:
            if generation == self._generation and self._pending is None:
                self._reschedule()
