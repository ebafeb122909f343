"""
Tournament API endpoints - setup, standings, leaderboards, completion
"""
import random
from fastapi import APIRouter, Depends, HTTPException
from typing import List

from crictourney.config import settings
from crictourney.engine.auction import POOL_SURPLUS_PER_TEAM
from crictourney.engine.errors import EngineError, NotFoundError
from crictourney.engine.lifecycle import MatchLifecycleManager
from crictourney.engine.state import TournamentData, TournamentStatus, TeamInfo, PlayerInfo, generate_id
from crictourney.generators import TeamGenerator, PlayerGenerator
from crictourney.api.deps import get_repository, get_manager, http_error
from crictourney.api.schemas import (
    TournamentCreate, DemoTournamentCreate, TournamentResponse, TeamResponse, PlayerResponse,
    MatchSummary, StandingResponse, LeaderboardsResponse, FranchiseResponse, CompleteTournamentRequest,
)

router = APIRouter(prefix="/tournaments", tags=["Tournaments"])


def tournament_response(tournament: TournamentData) -> TournamentResponse:
    return TournamentResponse(
        id=tournament.id,
        name=tournament.name,
        overs=tournament.overs,
        status=tournament.status.value,
        champion_id=tournament.champion_id,
        runner_up_id=tournament.runner_up_id,
        teams=[TeamResponse.model_validate(t) for t in tournament.teams],
        players=[PlayerResponse.model_validate(p) for p in tournament.players],
        matches=[
            MatchSummary(
                id=m.id,
                team1_id=m.team1.id,
                team1_name=m.team1.name,
                team2_id=m.team2.id,
                team2_name=m.team2.name,
                match_type=m.match_type,
                venue=m.venue,
                scheduled_date=m.scheduled_date,
                status=m.status.value,
                winner_id=m.winner_id,
                is_tied=m.is_tied,
                result_summary=m.result_summary,
            )
            for m in tournament.matches
        ],
    )


@router.post("", response_model=TournamentResponse)
def create_tournament(request: TournamentCreate, repository=Depends(get_repository)):
    """
    Create a tournament with its teams and squads.
    Players sent as a pool are auctioned before any fixture is played.
    """
    teams = []
    players = []
    for team_data in request.teams:
        team_id = generate_id()
        squad = [
            PlayerInfo(id=generate_id(), name=p.name, team_id=team_id, role=p.role, base_price=p.base_price)
            for p in team_data.players
        ]
        teams.append(TeamInfo(
            id=team_id,
            name=team_data.name,
            short_name=team_data.short_name or team_data.name[:3].upper(),
            color=team_data.color,
            players=[p.id for p in squad],
        ))
        players.extend(squad)

    players.extend(
        PlayerInfo(id=generate_id(), name=p.name, role=p.role, base_price=p.base_price)
        for p in request.pool
    )
    status = TournamentStatus.SETUP if request.pool else TournamentStatus.ACTIVE
    tournament = repository.create_tournament(request.name, teams, players, overs=request.overs, status=status)
    return tournament_response(tournament)


@router.post("/demo", response_model=TournamentResponse)
def create_demo_tournament(request: DemoTournamentCreate, repository=Depends(get_repository)):
    """Create a tournament of franchise teams with generated squads, or a generated pool to auction"""
    rng = random.Random(request.seed)
    if request.auction:
        teams, _ = TeamGenerator.create_teams(request.team_count, rng=rng, with_squads=False)
        pool_size = request.team_count * (settings.SQUAD_SIZE + POOL_SURPLUS_PER_TEAM)
        players = PlayerGenerator.generate_player_pool(pool_size, rng=rng)
        status = TournamentStatus.SETUP
    else:
        teams, players = TeamGenerator.create_teams(request.team_count, rng=rng)
        status = TournamentStatus.ACTIVE
    tournament = repository.create_tournament(request.name, teams, players, overs=request.overs, status=status)
    return tournament_response(tournament)


@router.get("/franchises", response_model=List[FranchiseResponse])
def get_franchises():
    """Franchises available for demo tournaments"""
    return TeamGenerator.get_team_choices()


@router.get("/{tournament_id}", response_model=TournamentResponse)
def get_tournament(tournament_id: str, repository=Depends(get_repository)):
    try:
        tournament = repository.get_tournament(tournament_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return tournament_response(tournament)


@router.post("/{tournament_id}/complete", response_model=TournamentResponse)
def complete_tournament(
    tournament_id: str,
    request: CompleteTournamentRequest,
    manager: MatchLifecycleManager = Depends(get_manager),
):
    """Close the tournament and record its champion"""
    try:
        tournament = manager.complete_tournament(tournament_id, request.champion_id, request.runner_up_id)
    except EngineError as e:
        raise http_error(e)
    return tournament_response(tournament)


@router.get("/{tournament_id}/points-table", response_model=List[StandingResponse])
def get_points_table(manager: MatchLifecycleManager = Depends(get_manager)):
    """League standings, sorted by points then net run rate"""
    return [
        StandingResponse(position=standing.position, **standing.row.to_dict())
        for standing in manager.standings()
    ]


@router.get("/{tournament_id}/leaderboards", response_model=LeaderboardsResponse)
def get_leaderboards(manager: MatchLifecycleManager = Depends(get_manager)):
    """Top-10 batting and bowling lists across completed matches"""
    return LeaderboardsResponse.model_validate(manager.performance_stats.to_dict())
