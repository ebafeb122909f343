"""
Shared route dependencies - repository, lifecycle sessions, auctions and error mapping
"""
import threading
from typing import Dict

from fastapi import Depends, HTTPException

from crictourney.database import SessionLocal
from crictourney.engine.auction import AuctionEngine
from crictourney.engine.errors import NotFoundError, IllegalStateError
from crictourney.engine.lifecycle import MatchLifecycleManager
from crictourney.repository import SqlTournamentRepository

# One lifecycle session per tournament, kept for the life of the process
sessions: Dict[str, MatchLifecycleManager] = {}
_sessions_lock = threading.Lock()

# Auction engines serialize bidding per tournament
auctions: Dict[str, AuctionEngine] = {}


def get_repository():
    return SqlTournamentRepository(SessionLocal)


def get_scheduler():
    """None selects the lifecycle's default timer"""
    return None


def get_manager(
    tournament_id: str,
    repository=Depends(get_repository),
    scheduler=Depends(get_scheduler),
) -> MatchLifecycleManager:
    with _sessions_lock:
        manager = sessions.get(tournament_id)
        if manager is None:
            manager = MatchLifecycleManager(repository, scheduler=scheduler)
            try:
                manager.initialize_match_state(tournament_id)
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            sessions[tournament_id] = manager
        return manager


def get_auction_engine(tournament_id: str, repository=Depends(get_repository)) -> AuctionEngine:
    with _sessions_lock:
        engine = auctions.get(tournament_id)
        if engine is None:
            engine = AuctionEngine(repository)
            auctions[tournament_id] = engine
        return engine


def http_error(error: Exception) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, IllegalStateError):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=422, detail=str(error))
