from fastapi import APIRouter, Depends
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.drives.schemas import (
    AutoCreateRequest, DriveComplete, DriveCreate, DriveMetrics, DriveResponse, DriveUpdate, DriveWithPlays
)
from filmroom.modules.drives.service import DriveService
from filmroom.core.dependencies import require_team_permission
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/teams/{team_id}", tags=["drives"])


def get_drive_service(supabase: Client = Depends(get_supabase)) -> DriveService:
    return DriveService(supabase)


@router.post("/drives", response_model=DriveResponse, status_code=201)
async def create_drive(
    team_id: str,
    data: DriveCreate,
    user_data: Dict = Depends(require_team_permission("drives:manage")),
    service: DriveService = Depends(get_drive_service)
):
    return service.create_drive(team_id, data, user_data["id"])


@router.get("/drives/metrics", response_model=DriveMetrics)
async def get_drive_metrics(
    team_id: str,
    game_id: Optional[str] = None,
    possession_type: Optional[str] = None,
    user_data: Dict = Depends(require_team_permission("drives:read")),
    service: DriveService = Depends(get_drive_service)
):
    """Points per drive, three-and-out rate and red zone TD rate"""
    return service.get_drive_metrics(team_id, game_id, possession_type)


@router.get("/drives/{drive_id}", response_model=DriveWithPlays)
async def get_drive(
    team_id: str,
    drive_id: str,
    user_data: Dict = Depends(require_team_permission("drives:read")),
    service: DriveService = Depends(get_drive_service)
):
    return service.get_drive_with_plays(team_id, drive_id)


@router.put("/drives/{drive_id}", response_model=DriveResponse)
async def update_drive(
    team_id: str,
    drive_id: str,
    data: DriveUpdate,
    user_data: Dict = Depends(require_team_permission("drives:manage")),
    service: DriveService = Depends(get_drive_service)
):
    return service.update_drive(team_id, drive_id, data)


@router.post("/drives/{drive_id}/complete", response_model=DriveResponse)
async def complete_drive(
    team_id: str,
    drive_id: str,
    data: DriveComplete,
    user_data: Dict = Depends(require_team_permission("drives:manage")),
    service: DriveService = Depends(get_drive_service)
):
    return service.complete_drive(team_id, drive_id, data)


@router.delete("/drives/{drive_id}", status_code=204)
async def delete_drive(
    team_id: str,
    drive_id: str,
    user_data: Dict = Depends(require_team_permission("drives:delete")),
    service: DriveService = Depends(get_drive_service)
):
    """Delete a drive; its plays are unlinked, not deleted"""
    service.delete_drive(team_id, drive_id)
    return None


@router.put("/drives/{drive_id}/plays/{play_id}", response_model=DriveResponse)
async def add_play_to_drive(
    team_id: str,
    drive_id: str,
    play_id: str,
    user_data: Dict = Depends(require_team_permission("drives:manage")),
    service: DriveService = Depends(get_drive_service)
):
    return service.add_play(team_id, drive_id, play_id)


@router.delete("/plays/{play_id}/drive", response_model=Optional[DriveResponse])
async def remove_play_from_drive(
    team_id: str,
    play_id: str,
    user_data: Dict = Depends(require_team_permission("drives:manage")),
    service: DriveService = Depends(get_drive_service)
):
    """Unlink a play from its drive; returns the recalculated drive"""
    return service.remove_play(team_id, play_id)


@router.get("/games/{game_id}/drives", response_model=List[DriveResponse])
async def list_game_drives(
    team_id: str,
    game_id: str,
    possession_type: Optional[str] = None,
    user_data: Dict = Depends(require_team_permission("drives:read")),
    service: DriveService = Depends(get_drive_service)
):
    return service.list_drives_for_game(team_id, game_id, possession_type)


@router.post("/games/{game_id}/drives/auto", response_model=List[DriveResponse], status_code=201)
async def auto_create_drives(
    team_id: str,
    game_id: str,
    request: AutoCreateRequest,
    user_data: Dict = Depends(require_team_permission("drives:manage")),
    service: DriveService = Depends(get_drive_service)
):
    """Build drives from the game's tagged plays"""
    return service.auto_create_drives(team_id, game_id, request.possession_type, user_data["id"])
