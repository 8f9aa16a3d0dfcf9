from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

MARKER_TYPES = (
    "play", "quarter_start", "quarter_end", "halftime", "timeout", "big_play", "turnover", "custom",
)


class UploadPrecheckRequest(BaseModel):
    game_id: str
    file_name: str
    file_size: int
    mime_type: Optional[str] = None


class UploadPrecheckResponse(BaseModel):
    allowed: bool = True
    storage_path: str
    camera_count: int
    camera_limit: int


class VideoUpdate(BaseModel):
    name: Optional[str] = None
    camera_label: Optional[str] = None


class VideoResponse(BaseModel):
    id: str
    game_id: str
    name: str
    file_path: Optional[str] = None
    url: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    camera_order: int = 1
    camera_label: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VideoDeleteResponse(BaseModel):
    video_id: str
    deleted_plays: int
    deleted_markers: int
    storage_removed: int


class MarkerCreate(BaseModel):
    timestamp_seconds: float = Field(ge=0)
    marker_type: str = "custom"
    label: Optional[str] = None


class MarkerResponse(BaseModel):
    id: str
    video_id: str
    timestamp_seconds: float
    marker_type: str
    label: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
