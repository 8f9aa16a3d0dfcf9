from fastapi import APIRouter, Depends
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.players.schemas import PlayerCreate, PlayerResponse, PlayerUpdate
from filmroom.modules.players.service import PlayerService
from filmroom.core.dependencies import require_team_permission
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/teams/{team_id}/players", tags=["players"])


def get_player_service(supabase: Client = Depends(get_supabase)) -> PlayerService:
    return PlayerService(supabase)


@router.post("", response_model=PlayerResponse, status_code=201)
async def create_player(
    team_id: str,
    player_data: PlayerCreate,
    user_data: Dict = Depends(require_team_permission("players:create")),
    service: PlayerService = Depends(get_player_service)
):
    return service.create_player(team_id, player_data)


@router.get("", response_model=List[PlayerResponse])
async def list_players(
    team_id: str,
    position_group: Optional[str] = None,
    active_only: bool = True,
    user_data: Dict = Depends(require_team_permission("players:read")),
    service: PlayerService = Depends(get_player_service)
):
    """Roster ordered by jersey number"""
    return service.list_players(team_id, position_group, active_only)


@router.get("/{player_id}", response_model=PlayerResponse)
async def get_player(
    team_id: str,
    player_id: str,
    user_data: Dict = Depends(require_team_permission("players:read")),
    service: PlayerService = Depends(get_player_service)
):
    return service.get_player(team_id, player_id)


@router.put("/{player_id}", response_model=PlayerResponse)
async def update_player(
    team_id: str,
    player_id: str,
    player_data: PlayerUpdate,
    user_data: Dict = Depends(require_team_permission("players:update")),
    service: PlayerService = Depends(get_player_service)
):
    return service.update_player(team_id, player_id, player_data)


@router.delete("/{player_id}", status_code=204)
async def delete_player(
    team_id: str,
    player_id: str,
    user_data: Dict = Depends(require_team_permission("players:delete")),
    service: PlayerService = Depends(get_player_service)
):
    service.delete_player(team_id, player_id)
    return None
