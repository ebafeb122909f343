"""
Auction API endpoints - set up the auction, bid and close lots
"""
from fastapi import APIRouter, Depends

from crictourney.engine.auction import AuctionEngine, max_bid_possible
from crictourney.engine.errors import EngineError
from crictourney.engine.state import AuctionState
from crictourney.api.deps import get_auction_engine, http_error
from crictourney.api.schemas import (
    AuctionCreate, AuctionResponse, BidRequest, BidResponse, LotResponse, PurseResponse, LotResultResponse,
)

router = APIRouter(prefix="/tournaments/{tournament_id}/auction", tags=["Auction"])


def auction_response(state: AuctionState) -> AuctionResponse:
    lots = [LotResponse.model_validate(lot.to_dict()) for lot in state.lots]
    current = state.current_lot
    return AuctionResponse(
        id=state.id,
        budget=state.budget,
        squad_size=state.squad_size,
        status=state.status.value,
        current_index=state.current_index,
        current_lot=lots[state.current_index] if current else None,
        lots=lots,
        purses=[
            PurseResponse(
                **purse.to_dict(),
                spent=purse.spent,
                max_bid=max_bid_possible(state, purse),
            )
            for purse in state.purses
        ],
    )


@router.post("", response_model=AuctionResponse)
def initialize_auction(
    tournament_id: str,
    request: AuctionCreate,
    engine: AuctionEngine = Depends(get_auction_engine),
):
    """Put the tournament's unattached players up for auction"""
    try:
        state = engine.initialize_auction(tournament_id, budget=request.budget, squad_size=request.squad_size)
    except (EngineError, ValueError) as e:
        raise http_error(e)
    return auction_response(state)


@router.get("", response_model=AuctionResponse)
def get_auction(tournament_id: str, engine: AuctionEngine = Depends(get_auction_engine)):
    try:
        state = engine.get_auction(tournament_id)
    except EngineError as e:
        raise http_error(e)
    return auction_response(state)


@router.post("/start", response_model=AuctionResponse)
def start_auction(tournament_id: str, engine: AuctionEngine = Depends(get_auction_engine)):
    try:
        state = engine.start_auction(tournament_id)
    except EngineError as e:
        raise http_error(e)
    return auction_response(state)


@router.post("/bid", response_model=AuctionResponse)
def place_bid(tournament_id: str, request: BidRequest, engine: AuctionEngine = Depends(get_auction_engine)):
    """Bid on the player under the hammer"""
    try:
        state = engine.place_bid(tournament_id, request.team_id, request.amount)
    except (EngineError, ValueError) as e:
        raise http_error(e)
    return auction_response(state)


@router.post("/simulate-bidding", response_model=list[BidResponse])
def simulate_bidding(tournament_id: str, engine: AuctionEngine = Depends(get_auction_engine)):
    """Let the teams bid on the current player"""
    try:
        bids = engine.simulate_bidding(tournament_id)
    except EngineError as e:
        raise http_error(e)
    return [BidResponse.model_validate(b.to_dict()) for b in bids]


@router.post("/sell", response_model=LotResultResponse)
def complete_player_auction(tournament_id: str, engine: AuctionEngine = Depends(get_auction_engine)):
    """Close the current lot and move to the next player"""
    try:
        result = engine.complete_player_auction(tournament_id)
    except EngineError as e:
        raise http_error(e)
    return LotResultResponse.model_validate(result, from_attributes=True)


@router.post("/auto-complete", response_model=list[LotResultResponse])
def auto_complete(tournament_id: str, engine: AuctionEngine = Depends(get_auction_engine)):
    """Run automatic bidding on every remaining player"""
    try:
        results = engine.auto_complete(tournament_id)
    except EngineError as e:
        raise http_error(e)
    return [LotResultResponse.model_validate(r, from_attributes=True) for r in results]
