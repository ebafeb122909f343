from crictourney.engine.outcomes import BallOutcome, OutcomeSampler, ScriptedSampler
from crictourney.engine.commentary import CommentaryGenerator
from crictourney.engine.ball_processor import process_ball
from crictourney.engine.lifecycle import MatchLifecycleManager
from crictourney.engine.auction import AuctionEngine
from crictourney.engine.statistics import generate_points_table, generate_performance_stats
from crictourney.engine.errors import EngineError, NotFoundError, IllegalStateError

__all__ = [
    "BallOutcome", "OutcomeSampler", "ScriptedSampler", "CommentaryGenerator",
    "process_ball", "MatchLifecycleManager", "AuctionEngine",
    "generate_points_table", "generate_performance_stats",
    "EngineError", "NotFoundError", "IllegalStateError",
]
