from fastapi import APIRouter, Depends
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamResponse, TeamMembershipCreate, TeamMembershipResponse,
    PlayerCreate, PlayerUpdate, PlayerResponse, PlayerAssignment, PlayerAssignmentResponse,
)
from clubflow.modules.teams.service import TeamService, PlayerService
from clubflow.core.dependencies import require_club_permission, require_feature
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/clubs/{club_id}", tags=["teams"])


def get_team_service(supabase: Client = Depends(get_supabase)) -> TeamService:
    return TeamService(supabase)


def get_player_service(supabase: Client = Depends(get_supabase)) -> PlayerService:
    return PlayerService(supabase)


@router.get("/teams", response_model=List[TeamResponse])
async def list_teams(
    club_id: int,
    status: Optional[str] = None,
    user_data: Dict = Depends(require_club_permission("teams:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.list_teams(club_id, status=status)


@router.post(
    "/teams",
    response_model=TeamResponse,
    status_code=201,
    dependencies=[Depends(require_feature("teamManagement"))],
)
async def create_team(
    club_id: int,
    team_data: TeamCreate,
    user_data: Dict = Depends(require_club_permission("teams:create")),
    service: TeamService = Depends(get_team_service)
):
    return service.create_team(club_id, team_data)


@router.get("/teams/{team_id}", response_model=TeamResponse)
async def get_team(
    club_id: int,
    team_id: int,
    user_data: Dict = Depends(require_club_permission("teams:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.get_team(club_id, team_id)


@router.put("/teams/{team_id}", response_model=TeamResponse)
async def update_team(
    club_id: int,
    team_id: int,
    team_data: TeamUpdate,
    user_data: Dict = Depends(require_club_permission("teams:update")),
    service: TeamService = Depends(get_team_service)
):
    return service.update_team(club_id, team_id, team_data)


@router.delete("/teams/{team_id}", status_code=204)
async def delete_team(
    club_id: int,
    team_id: int,
    user_data: Dict = Depends(require_club_permission("teams:delete")),
    service: TeamService = Depends(get_team_service)
):
    service.delete_team(club_id, team_id)
    return None


@router.get("/teams/{team_id}/memberships", response_model=List[TeamMembershipResponse])
async def list_team_memberships(
    club_id: int,
    team_id: int,
    user_data: Dict = Depends(require_club_permission("teams:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.list_team_memberships(club_id, team_id)


@router.post(
    "/teams/{team_id}/memberships",
    response_model=TeamMembershipResponse,
    status_code=201,
    dependencies=[Depends(require_feature("teamManagement"))],
)
async def add_team_membership(
    club_id: int,
    team_id: int,
    data: TeamMembershipCreate,
    user_data: Dict = Depends(require_club_permission("teams:update")),
    service: TeamService = Depends(get_team_service)
):
    """Put a roster member on a team (400 when already on it or the team is full)"""
    return service.add_team_membership(club_id, team_id, data)


@router.delete("/teams/{team_id}/memberships/{membership_id}", status_code=204)
async def remove_team_membership(
    club_id: int,
    team_id: int,
    membership_id: int,
    user_data: Dict = Depends(require_club_permission("teams:update")),
    service: TeamService = Depends(get_team_service)
):
    service.remove_team_membership(club_id, team_id, membership_id)
    return None


@router.get("/team-memberships", response_model=List[TeamMembershipResponse])
async def list_club_team_memberships(
    club_id: int,
    user_data: Dict = Depends(require_club_permission("teams:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.list_club_team_memberships(club_id)


# Players
@router.get("/players", response_model=List[PlayerResponse])
async def list_players(
    club_id: int,
    team_id: Optional[int] = None,
    user_data: Dict = Depends(require_club_permission("teams:read")),
    service: PlayerService = Depends(get_player_service)
):
    return service.list_players(club_id, team_id=team_id)


@router.post("/players", response_model=PlayerResponse, status_code=201)
async def create_player(
    club_id: int,
    player_data: PlayerCreate,
    user_data: Dict = Depends(require_club_permission("teams:create")),
    service: PlayerService = Depends(get_player_service)
):
    return service.create_player(club_id, player_data)


@router.get("/players/{player_id}", response_model=PlayerResponse)
async def get_player(
    club_id: int,
    player_id: int,
    user_data: Dict = Depends(require_club_permission("teams:read")),
    service: PlayerService = Depends(get_player_service)
):
    return service.get_player(club_id, player_id)


@router.put("/players/{player_id}", response_model=PlayerResponse)
async def update_player(
    club_id: int,
    player_id: int,
    player_data: PlayerUpdate,
    user_data: Dict = Depends(require_club_permission("teams:update")),
    service: PlayerService = Depends(get_player_service)
):
    return service.update_player(club_id, player_id, player_data)


@router.delete("/players/{player_id}", status_code=204)
async def delete_player(
    club_id: int,
    player_id: int,
    user_data: Dict = Depends(require_club_permission("teams:delete")),
    service: PlayerService = Depends(get_player_service)
):
    service.delete_player(club_id, player_id)
    return None


@router.post("/players/{player_id}/teams/{team_id}", response_model=PlayerAssignmentResponse, status_code=201)
async def assign_player(
    club_id: int,
    player_id: int,
    team_id: int,
    assignment: Optional[PlayerAssignment] = None,
    user_data: Dict = Depends(require_club_permission("teams:update")),
    service: PlayerService = Depends(get_player_service)
):
    season = assignment.season if assignment else None
    return service.assign_to_team(club_id, player_id, team_id, season)


@router.delete("/players/{player_id}/teams/{team_id}", status_code=204)
async def unassign_player(
    club_id: int,
    player_id: int,
    team_id: int,
    user_data: Dict = Depends(require_club_permission("teams:update")),
    service: PlayerService = Depends(get_player_service)
):
    service.unassign_from_team(club_id, player_id, team_id)
    return None
