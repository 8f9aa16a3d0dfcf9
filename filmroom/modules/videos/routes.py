import os
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File, Form
from filmroom.config import settings
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.videos.schemas import (
    MarkerCreate, MarkerResponse, UploadPrecheckRequest, UploadPrecheckResponse,
    VideoDeleteResponse, VideoResponse, VideoUpdate
)
from filmroom.modules.videos.service import VideoService
from filmroom.modules.videos.validation import UploadRejected, check_declared_length
from filmroom.core.dependencies import require_team_permission
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/teams/{team_id}", tags=["videos"])


def get_video_service(supabase: Client = Depends(get_supabase)) -> VideoService:
    return VideoService(supabase)


def upload_size(file: UploadFile) -> int:
    """Part size from the form parser, or measured on the spooled file when it is unset."""
    if file.size is not None:
        return file.size
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


@router.post("/videos/precheck", response_model=UploadPrecheckResponse)
async def precheck_upload(
    team_id: str,
    request: UploadPrecheckRequest,
    user_data: Dict = Depends(require_team_permission("videos:upload")),
    service: VideoService = Depends(get_video_service)
):
    """
    Validate file name, type and size and the game's camera limit before uploading.
    Returns the storage path the film will be written to.
    """
    return service.precheck_upload(team_id, request)


@router.post("/games/{game_id}/videos", response_model=VideoResponse, status_code=201)
async def upload_video(
    team_id: str,
    game_id: str,
    request: Request,
    file: UploadFile = File(...),
    camera_label: Optional[str] = Form(None),
    user_data: Dict = Depends(require_team_permission("videos:upload")),
    service: VideoService = Depends(get_video_service)
):
    """Upload one camera angle of game film"""
    if not file.filename:
        raise HTTPException(status_code=400, detail="File name is required")
    try:
        check_declared_length(request.headers.get("content-length"), settings.max_upload_bytes)
    except UploadRejected as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return service.upload_video(
        team_id, game_id, file.filename, file.file, upload_size(file),
        file.content_type, user_data["id"], camera_label
    )


@router.get("/games/{game_id}/videos", response_model=List[VideoResponse])
async def list_videos(
    team_id: str,
    game_id: str,
    user_data: Dict = Depends(require_team_permission("videos:read")),
    service: VideoService = Depends(get_video_service)
):
    return service.list_videos(team_id, game_id)


@router.get("/videos/{video_id}", response_model=VideoResponse)
async def get_video(
    team_id: str,
    video_id: str,
    user_data: Dict = Depends(require_team_permission("videos:read")),
    service: VideoService = Depends(get_video_service)
):
    return service.get_video(team_id, video_id)


@router.put("/videos/{video_id}", response_model=VideoResponse)
async def update_video(
    team_id: str,
    video_id: str,
    data: VideoUpdate,
    user_data: Dict = Depends(require_team_permission("videos:update")),
    service: VideoService = Depends(get_video_service)
):
    """Rename a video or change its camera label"""
    return service.update_video(team_id, video_id, data)


@router.delete("/videos/{video_id}", response_model=VideoDeleteResponse)
async def delete_video(
    team_id: str,
    video_id: str,
    user_data: Dict = Depends(require_team_permission("videos:delete")),
    service: VideoService = Depends(get_video_service)
):
    """Delete a video with its tagged plays, markers and stored film"""
    return service.delete_video(team_id, video_id)


@router.get("/videos/{video_id}/markers", response_model=List[MarkerResponse])
async def list_markers(
    team_id: str,
    video_id: str,
    user_data: Dict = Depends(require_team_permission("videos:read")),
    service: VideoService = Depends(get_video_service)
):
    return service.list_markers(team_id, video_id)


@router.post("/videos/{video_id}/markers", response_model=MarkerResponse, status_code=201)
async def add_marker(
    team_id: str,
    video_id: str,
    data: MarkerCreate,
    user_data: Dict = Depends(require_team_permission("plays:tag")),
    service: VideoService = Depends(get_video_service)
):
    return service.add_marker(team_id, video_id, data, user_data["id"])


@router.delete("/videos/{video_id}/markers/{marker_id}", status_code=204)
async def delete_marker(
    team_id: str,
    video_id: str,
    marker_id: str,
    user_data: Dict = Depends(require_team_permission("plays:tag")),
    service: VideoService = Depends(get_video_service)
):
    service.delete_marker(team_id, video_id, marker_id)
    return None
