"""
Match API endpoints - fixtures, playoffs, toss/start, ball-by-ball and auto simulation
"""
from fastapi import APIRouter, Depends

from crictourney.engine.errors import EngineError
from crictourney.engine.lifecycle import MatchLifecycleManager
from crictourney.engine.state import Match
from crictourney.api.deps import get_manager, http_error
from crictourney.api.schemas import (
    MatchCreate, MatchResponse, SpeedRequest, SimulationStateResponse, LiveStateResponse,
)

router = APIRouter(prefix="/tournaments/{tournament_id}", tags=["Matches"])


def match_response(match: Match) -> MatchResponse:
    return MatchResponse.model_validate(match.to_dict())


def simulation_state(manager: MatchLifecycleManager) -> SimulationStateResponse:
    live = manager.current_match
    return SimulationStateResponse(
        auto_simulate=manager.auto_simulate,
        paused=manager.paused,
        speed=manager.speed,
        interval_seconds=manager.interval,
        live_match_id=live.id if live else None,
    )


@router.post("/matches", response_model=MatchResponse)
def create_match(
    tournament_id: str,
    request: MatchCreate,
    manager: MatchLifecycleManager = Depends(get_manager),
):
    """Schedule a fixture between two tournament teams"""
    try:
        match = manager.create_match(
            tournament_id,
            request.team1_id,
            request.team2_id,
            match_type=request.match_type,
            venue=request.venue,
            scheduled_date=request.scheduled_date,
            overs=request.overs,
        )
    except (EngineError, ValueError) as e:
        raise http_error(e)
    return match_response(match)


@router.get("/matches/{match_id}", response_model=MatchResponse)
def get_match(tournament_id: str, match_id: str, manager: MatchLifecycleManager = Depends(get_manager)):
    try:
        match = manager.get_match(tournament_id, match_id)
    except EngineError as e:
        raise http_error(e)
    return match_response(match)


@router.post("/playoffs", response_model=list[MatchResponse])
def generate_playoffs(tournament_id: str, manager: MatchLifecycleManager = Depends(get_manager)):
    """Schedule the first knockout round from the final league standings"""
    try:
        fixtures = manager.generate_playoffs(tournament_id)
    except (EngineError, ValueError) as e:
        raise http_error(e)
    return [match_response(m) for m in fixtures]


@router.post("/matches/{match_id}/start", response_model=MatchResponse)
def start_match(tournament_id: str, match_id: str, manager: MatchLifecycleManager = Depends(get_manager)):
    """Toss and start the match. Only one match can be live at a time."""
    try:
        match = manager.start_match(tournament_id, match_id)
    except EngineError as e:
        raise http_error(e)
    return match_response(match)


@router.post("/simulate", response_model=MatchResponse)
def simulate_ball(manager: MatchLifecycleManager = Depends(get_manager)):
    """Bowl one delivery of the live match"""
    try:
        match = manager.simulate_ball()
    except EngineError as e:
        raise http_error(e)
    return match_response(match)


@router.get("/live", response_model=LiveStateResponse)
def get_live_state(manager: MatchLifecycleManager = Depends(get_manager)):
    live = manager.current_match
    return LiveStateResponse(
        simulation=simulation_state(manager),
        match=match_response(live) if live else None,
    )


@router.post("/auto", response_model=SimulationStateResponse)
def toggle_auto_simulation(manager: MatchLifecycleManager = Depends(get_manager)):
    manager.toggle_auto_simulation()
    return simulation_state(manager)


@router.post("/pause", response_model=SimulationStateResponse)
def toggle_pause(manager: MatchLifecycleManager = Depends(get_manager)):
    manager.toggle_simulation_pause()
    return simulation_state(manager)


@router.put("/speed", response_model=SimulationStateResponse)
def set_speed(request: SpeedRequest, manager: MatchLifecycleManager = Depends(get_manager)):
    try:
        manager.set_simulation_speed(request.speed)
    except ValueError as e:
        raise http_error(e)
    return simulation_state(manager)
