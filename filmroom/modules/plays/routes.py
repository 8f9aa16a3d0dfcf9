from fastapi import APIRouter, Depends
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.plays.schemas import (
    ParticipationCreate, ParticipationResponse, PlayCreate, PlayResponse, PlayUpdate
)
from filmroom.modules.plays.service import PlayService
from filmroom.modules.plays.tiers import TAGGING_TIER_ORDER, TIER_CAPABILITIES
from filmroom.core.dependencies import get_current_user_id, require_team_permission
from supabase import Client
from typing import Dict, List

router = APIRouter(tags=["plays"])


def get_play_service(supabase: Client = Depends(get_supabase)) -> PlayService:
    return PlayService(supabase)


@router.get("/tagging-tiers")
async def list_tagging_tiers(user_data: Dict = Depends(get_current_user_id)):
    """Capabilities of each tagging tier, lowest first"""
    return [{"key": key, **TIER_CAPABILITIES[key]} for key in TAGGING_TIER_ORDER]


@router.post("/teams/{team_id}/plays", response_model=PlayResponse, status_code=201)
async def create_play(
    team_id: str,
    play_data: PlayCreate,
    user_data: Dict = Depends(require_team_permission("plays:tag")),
    service: PlayService = Depends(get_play_service)
):
    """Tag a play on a video"""
    return service.create_play(team_id, play_data)


@router.get("/teams/{team_id}/plays/{play_id}", response_model=PlayResponse)
async def get_play(
    team_id: str,
    play_id: str,
    user_data: Dict = Depends(require_team_permission("plays:read")),
    service: PlayService = Depends(get_play_service)
):
    return service.get_play(team_id, play_id)


@router.put("/teams/{team_id}/plays/{play_id}", response_model=PlayResponse)
async def update_play(
    team_id: str,
    play_id: str,
    play_data: PlayUpdate,
    user_data: Dict = Depends(require_team_permission("plays:tag")),
    service: PlayService = Depends(get_play_service)
):
    return service.update_play(team_id, play_id, play_data)


@router.delete("/teams/{team_id}/plays/{play_id}", status_code=204)
async def delete_play(
    team_id: str,
    play_id: str,
    user_data: Dict = Depends(require_team_permission("plays:delete")),
    service: PlayService = Depends(get_play_service)
):
    service.delete_play(team_id, play_id)
    return None


@router.get("/teams/{team_id}/videos/{video_id}/plays", response_model=List[PlayResponse])
async def list_plays_for_video(
    team_id: str,
    video_id: str,
    user_data: Dict = Depends(require_team_permission("plays:read")),
    service: PlayService = Depends(get_play_service)
):
    return service.list_plays_for_video(team_id, video_id)


@router.get("/teams/{team_id}/games/{game_id}/plays", response_model=List[PlayResponse])
async def list_plays_for_game(
    team_id: str,
    game_id: str,
    user_data: Dict = Depends(require_team_permission("plays:read")),
    service: PlayService = Depends(get_play_service)
):
    """All plays across a game's camera angles, by timestamp"""
    return service.list_plays_for_game(team_id, game_id)


@router.post("/teams/{team_id}/plays/{play_id}/participants",
             response_model=List[ParticipationResponse], status_code=201)
async def add_participants(
    team_id: str,
    play_id: str,
    participations: List[ParticipationCreate],
    user_data: Dict = Depends(require_team_permission("plays:tag")),
    service: PlayService = Depends(get_play_service)
):
    return service.add_participations(team_id, play_id, participations)


@router.get("/teams/{team_id}/plays/{play_id}/participants", response_model=List[ParticipationResponse])
async def list_participants(
    team_id: str,
    play_id: str,
    user_data: Dict = Depends(require_team_permission("plays:read")),
    service: PlayService = Depends(get_play_service)
):
    return service.list_participations(team_id, play_id)
