from supabase import Client
from filmroom.config import settings
from filmroom.modules.entitlements.service import EntitlementsService
from filmroom.modules.videos.schemas import (
    MARKER_TYPES, MarkerCreate, MarkerResponse, UploadPrecheckRequest, UploadPrecheckResponse,
    VideoDeleteResponse, VideoResponse, VideoUpdate
)
from filmroom.modules.videos.storage import FilmStorage
from filmroom.modules.videos.validation import (
    SIGNATURE_BYTES, UploadRejected, build_storage_path, check_upload, has_video_signature
)
from typing import BinaryIO, Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class VideoService:
    def __init__(self, supabase: Client, storage: Optional[FilmStorage] = None,
                 entitlements: Optional[EntitlementsService] = None):
        self.supabase = supabase
        self.storage = storage or FilmStorage(supabase)
        self.entitlements = entitlements or EntitlementsService(supabase)

    def _get_team_game(self, team_id: str, game_id: str) -> dict:
        result = self.supabase.table("games")\
            .select("id, team_id")\
            .eq("id", game_id)\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Game not found")
        return result.data[0]

    def _get_team_video(self, team_id: str, video_id: str) -> dict:
        result = self.supabase.table("videos")\
            .select("*")\
            .eq("id", video_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Video not found")
        video = result.data[0]
        owner = self.supabase.table("games")\
            .select("id")\
            .eq("id", video["game_id"])\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not owner.data:
            raise HTTPException(status_code=404, detail="Video not found")
        return video

    def _check_camera_limit(self, team_id: str, game_id: str):
        result = self.entitlements.can_add_camera(team_id, game_id)
        self.entitlements.enforce(result, status_code=429)
        return result

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def precheck_upload(self, team_id: str, request: UploadPrecheckRequest) -> UploadPrecheckResponse:
        """Validate an upload before the client sends the bytes."""
        self._get_team_game(team_id, request.game_id)
        try:
            check_upload(request.file_name, request.file_size, request.mime_type, settings.max_upload_bytes)
        except UploadRejected as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        cameras = self._check_camera_limit(team_id, request.game_id)
        return UploadPrecheckResponse(
            storage_path=build_storage_path(request.file_name, game_id=request.game_id),
            camera_count=cameras.current_usage or 0,
            camera_limit=cameras.limit or 0,
        )

    def upload_video(self, team_id: str, game_id: str, file_name: str, file: BinaryIO, file_size: int,
                     mime_type: Optional[str], user_id: str, camera_label: Optional[str] = None) -> VideoResponse:
        """Store one camera angle, streaming it from the file object after the header check."""
        self._get_team_game(team_id, game_id)
        try:
            check_upload(file_name, file_size, mime_type, settings.max_upload_bytes)
        except UploadRejected as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        header = file.read(SIGNATURE_BYTES)
        file.seek(0)
        if not has_video_signature(header):
            raise HTTPException(status_code=400, detail="File content does not match a supported video format")
        cameras = self._check_camera_limit(team_id, game_id)

        path = build_storage_path(file_name, game_id=game_id)
        try:
            stored_path = self.storage.upload(path, file, mime_type or "video/mp4")
        except Exception as e:
            logger.error(f"Film upload failed for game {game_id}: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to upload film: {str(e)}")

        try:
            result = self.supabase.table("videos").insert({
                "game_id": game_id,
                "name": file_name,
                "file_path": stored_path,
                "mime_type": mime_type,
                "file_size": file_size,
                "camera_order": (cameras.current_usage or 0) + 1,
                "camera_label": camera_label,
                "uploaded_by": user_id,
                "created_at": datetime.utcnow().isoformat(),
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create video record")
        except Exception as e:
            logger.warning(f"Video row insert failed for {stored_path}, removing stored film")
            self.storage.remove([stored_path])
            if isinstance(e, HTTPException):
                raise
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Uploaded film {stored_path} for game {game_id}")
        return VideoResponse(**result.data[0])

    # ------------------------------------------------------------------
    # Read / update
    # ------------------------------------------------------------------

    def list_videos(self, team_id: str, game_id: str) -> List[VideoResponse]:
        self._get_team_game(team_id, game_id)
        try:
            result = self.supabase.table("videos")\
                .select("*")\
                .eq("game_id", game_id)\
                .order("camera_order")\
                .execute()
            return [VideoResponse(**v) for v in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_video(self, team_id: str, video_id: str) -> VideoResponse:
        return VideoResponse(**self._get_team_video(team_id, video_id))

    def update_video(self, team_id: str, video_id: str, data: VideoUpdate) -> VideoResponse:
        self._get_team_video(team_id, video_id)
        update_data = data.model_dump(exclude_unset=True)
        if "name" in update_data and not (update_data["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Video name cannot be empty")
        if not update_data:
            return self.get_video(team_id, video_id)
        try:
            result = self.supabase.table("videos")\
                .update(update_data)\
                .eq("id", video_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Video not found")
            return VideoResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_film(self, videos: List[dict]) -> Dict[str, int]:
        """Remove everything hanging off the given video rows, then the rows themselves."""
        video_ids = [v["id"] for v in videos]
        counts = {"deleted_plays": 0, "deleted_markers": 0, "storage_removed": 0, "deleted_videos": 0}
        if not video_ids:
            return counts

        plays = self.supabase.table("play_instances")\
            .select("id")\
            .in_("video_id", video_ids)\
            .execute()
        play_ids = [p["id"] for p in plays.data or []]
        if play_ids:
            self.supabase.table("player_participation")\
                .delete()\
                .in_("play_instance_id", play_ids)\
                .execute()
            self.supabase.table("play_instances")\
                .delete()\
                .in_("id", play_ids)\
                .execute()
        counts["deleted_plays"] = len(play_ids)

        markers = self.supabase.table("video_markers")\
            .delete()\
            .in_("video_id", video_ids)\
            .execute()
        counts["deleted_markers"] = len(markers.data or [])

        counts["storage_removed"] = self.storage.remove(v.get("file_path") for v in videos)

        self.supabase.table("videos")\
            .delete()\
            .in_("id", video_ids)\
            .execute()
        counts["deleted_videos"] = len(video_ids)
        logger.info(
            f"Deleted {len(video_ids)} video(s), {counts['deleted_plays']} play(s), "
            f"{counts['deleted_markers']} marker(s)"
        )
        return counts

    def delete_video(self, team_id: str, video_id: str) -> VideoDeleteResponse:
        video = self._get_team_video(team_id, video_id)
        try:
            counts = self.delete_film([video])
            return VideoDeleteResponse(
                video_id=video_id,
                deleted_plays=counts["deleted_plays"],
                deleted_markers=counts["deleted_markers"],
                storage_removed=counts["storage_removed"],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ------------------------------------------------------------------
    # Timeline markers
    # ------------------------------------------------------------------

    def add_marker(self, team_id: str, video_id: str, data: MarkerCreate, user_id: str) -> MarkerResponse:
        self._get_team_video(team_id, video_id)
        if data.marker_type not in MARKER_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid marker type: {data.marker_type}")
        result = self.supabase.table("video_markers").insert({
            "video_id": video_id,
            "timestamp_seconds": data.timestamp_seconds,
            "marker_type": data.marker_type,
            "label": data.label,
            "created_by": user_id,
            "created_at": datetime.utcnow().isoformat(),
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create marker")
        return MarkerResponse(**result.data[0])

    def list_markers(self, team_id: str, video_id: str) -> List[MarkerResponse]:
        self._get_team_video(team_id, video_id)
        result = self.supabase.table("video_markers")\
            .select("*")\
            .eq("video_id", video_id)\
            .order("timestamp_seconds")\
            .execute()
        return [MarkerResponse(**m) for m in result.data or []]

    def delete_marker(self, team_id: str, video_id: str, marker_id: str) -> bool:
        self._get_team_video(team_id, video_id)
        result = self.supabase.table("video_markers")\
            .delete()\
            .eq("id", marker_id)\
            .eq("video_id", video_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Marker not found")
        return True
