from fastapi import APIRouter, Depends
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.teams.schemas import (
    MemberInvite, MemberResponse, MemberRoleUpdate, TeamCreate, TeamDeleteResponse, TeamResponse, TeamUpdate
)
from filmroom.modules.teams.service import TeamService
from filmroom.core.dependencies import get_current_user_id, require_team_permission
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/teams", tags=["teams"])


def get_team_service(supabase: Client = Depends(get_supabase)) -> TeamService:
    return TeamService(supabase)


@router.post("", response_model=TeamResponse, status_code=201)
async def create_team(
    team_data: TeamCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """Create a team; the caller becomes its owner"""
    return service.create_team(team_data, user_data["id"])


@router.get("", response_model=List[TeamResponse])
async def list_my_teams(
    user_data: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """List teams the current user belongs to"""
    return service.list_teams_for_user(user_data["id"])


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: str,
    user_data: Dict = Depends(require_team_permission("teams:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.get_team(team_id)


@router.put("/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: str,
    team_data: TeamUpdate,
    user_data: Dict = Depends(require_team_permission("teams:update")),
    service: TeamService = Depends(get_team_service)
):
    return service.update_team(team_id, team_data)


@router.delete("/{team_id}", response_model=TeamDeleteResponse)
async def delete_team(
    team_id: str,
    user_data: Dict = Depends(require_team_permission("teams:delete")),
    service: TeamService = Depends(get_team_service)
):
    """Delete a team and all of its games, film and roster (owner only)"""
    return service.delete_team(team_id, user_data["id"])


@router.get("/{team_id}/members", response_model=List[MemberResponse])
async def list_members(
    team_id: str,
    user_data: Dict = Depends(require_team_permission("members:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.list_members(team_id)


@router.post("/{team_id}/members", response_model=MemberResponse, status_code=201)
async def invite_member(
    team_id: str,
    invite: MemberInvite,
    user_data: Dict = Depends(require_team_permission("members:read")),
    service: TeamService = Depends(get_team_service)
):
    """Invite an existing user by email as coach, analyst or viewer"""
    return service.invite_member(team_id, invite, user_data)


@router.put("/{team_id}/members/{user_id}", response_model=MemberResponse)
async def change_member_role(
    team_id: str,
    user_id: str,
    data: MemberRoleUpdate,
    user_data: Dict = Depends(require_team_permission("members:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.change_role(team_id, user_id, data.role, user_data)


@router.delete("/{team_id}/members/{user_id}", status_code=204)
async def remove_member(
    team_id: str,
    user_id: str,
    user_data: Dict = Depends(require_team_permission("members:read")),
    service: TeamService = Depends(get_team_service)
):
    service.remove_member(team_id, user_id, user_data)
    return None
