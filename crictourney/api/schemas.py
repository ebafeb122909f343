"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel, Field
from typing import Optional


# Tournament Schemas
class PlayerCreate(BaseModel):
    name: str
    role: str = "batsman"
    base_price: int = Field(0, ge=0)  # 0 uses the auction default


class TeamCreate(BaseModel):
    name: str
    short_name: str = ""
    color: str = "#000000"
    players: list[PlayerCreate] = []  # batting order


class TournamentCreate(BaseModel):
    name: str
    overs: int = Field(20, ge=1, le=50)
    teams: list[TeamCreate] = Field(..., min_length=2)
    pool: list[PlayerCreate] = []  # unattached players; a pool puts the tournament up for auction


class DemoTournamentCreate(BaseModel):
    name: str = "Demo Premier League"
    team_count: int = Field(4, ge=2, le=8)
    overs: int = Field(20, ge=1, le=50)
    seed: Optional[int] = None
    auction: bool = False  # teams start empty and buy their squads from a generated pool


class TeamResponse(BaseModel):
    id: str
    name: str
    short_name: str
    color: str
    players: list[str]

    class Config:
        from_attributes = True


class PlayerResponse(BaseModel):
    id: str
    name: str
    team_id: Optional[str] = None
    role: str
    base_price: int = 0

    class Config:
        from_attributes = True


class MatchSummary(BaseModel):
    id: str
    team1_id: str
    team1_name: str
    team2_id: str
    team2_name: str
    match_type: str
    venue: str
    scheduled_date: str
    status: str
    winner_id: Optional[str] = None
    is_tied: bool = False
    result_summary: Optional[str] = None


class TournamentResponse(BaseModel):
    id: str
    name: str
    overs: int
    status: str  # setup, auction, active, completed
    champion_id: Optional[str] = None
    runner_up_id: Optional[str] = None
    teams: list[TeamResponse]
    players: list[PlayerResponse]
    matches: list[MatchSummary]


class FranchiseResponse(BaseModel):
    index: int
    name: str
    short_name: str
    color: str


class CompleteTournamentRequest(BaseModel):
    champion_id: str
    runner_up_id: Optional[str] = None


# Match Schemas
class MatchCreate(BaseModel):
    team1_id: str
    team2_id: str
    match_type: str = "league"
    venue: Optional[str] = None
    scheduled_date: Optional[str] = None
    overs: Optional[int] = Field(None, ge=1, le=50)


class MatchSideResponse(BaseModel):
    id: str
    name: str
    color: str
    players: list[str]
    score: int
    wickets: int
    extras: int
    overs: float
    balls: int


class CommentaryResponse(BaseModel):
    id: str
    text: str
    type: str
    ball: str
    innings: int
    timestamp: str


class BattingEntryResponse(BaseModel):
    player_id: str
    team_id: str
    runs: int
    balls: int
    fours: int
    sixes: int
    is_out: bool
    dismissal: str
    strike_rate: float


class BowlingEntryResponse(BaseModel):
    player_id: str
    team_id: str
    balls: int
    overs: float
    runs: int
    wickets: int
    wides: int
    no_balls: int
    economy: float


class MatchResponse(BaseModel):
    id: str
    tournament_id: str
    team1: MatchSideResponse
    team2: MatchSideResponse
    overs: int
    venue: str
    scheduled_date: str
    match_type: str
    status: str  # scheduled, live, completed
    current_innings: int
    batting_team_id: Optional[str] = None
    bowling_team_id: Optional[str] = None
    current_over: int
    current_ball: int
    target: Optional[int] = None
    toss_winner_id: Optional[str] = None
    toss_decision: Optional[str] = None
    striker_id: Optional[str] = None
    non_striker_id: Optional[str] = None
    bowler_id: Optional[str] = None
    batting_scorecard: list[BattingEntryResponse]
    bowling_scorecard: list[BowlingEntryResponse]
    commentary: list[CommentaryResponse]
    winner_id: Optional[str] = None
    is_tied: bool
    result_summary: Optional[str] = None
    last_updated: str


# Simulation Schemas
class SpeedRequest(BaseModel):
    speed: float


class SimulationStateResponse(BaseModel):
    auto_simulate: bool
    paused: bool
    speed: float
    interval_seconds: float
    live_match_id: Optional[str] = None


class LiveStateResponse(BaseModel):
    simulation: SimulationStateResponse
    match: Optional[MatchResponse] = None


# Standings Schemas
class StandingResponse(BaseModel):
    position: int
    team_id: str
    team_name: str
    team_color: str
    played: int
    won: int
    lost: int
    tied: int
    no_result: int
    points: int
    net_run_rate: float
    runs_scored: int
    balls_faced: int
    runs_conceded: int
    balls_bowled: int


class PerformanceStatResponse(BaseModel):
    player_id: str
    player_name: str
    team_id: Optional[str] = None
    team_name: str
    team_color: str
    matches: int
    runs: int
    balls: int
    strike_rate: float
    wickets: int
    overs: float
    runs_conceded: int
    economy: float


class LeaderboardsResponse(BaseModel):
    most_runs: list[PerformanceStatResponse]
    most_wickets: list[PerformanceStatResponse]
    best_economy: list[PerformanceStatResponse]
    highest_strike_rate: list[PerformanceStatResponse]


# Auction Schemas
class AuctionCreate(BaseModel):
    budget: Optional[int] = Field(None, gt=0)
    squad_size: Optional[int] = Field(None, ge=1, le=25)


class BidRequest(BaseModel):
    team_id: str
    amount: Optional[int] = None  # minimum raise when omitted


class BidResponse(BaseModel):
    team_id: str
    amount: int
    timestamp: str


class LotResponse(BaseModel):
    player_id: str
    base_price: int
    status: str  # available, in_bidding, sold, unsold
    current_bid: int
    current_bidder_id: Optional[str] = None
    bids: list[BidResponse]
    sold_to: Optional[str] = None
    sold_price: Optional[int] = None


class PurseResponse(BaseModel):
    team_id: str
    budget: int
    remaining: int
    spent: int
    players: list[str]
    max_bid: int


class AuctionResponse(BaseModel):
    id: str
    budget: int
    squad_size: int
    status: str  # waiting, active, completed
    current_index: int
    current_lot: Optional[LotResponse] = None
    lots: list[LotResponse]
    purses: list[PurseResponse]


class LotResultResponse(BaseModel):
    player_id: str
    is_sold: bool
    team_id: Optional[str] = None
    price: int = 0
