from supabase import Client
from filmroom.modules.entitlements.service import EntitlementsService
from filmroom.modules.plays.schemas import (
    TAG_SOURCES, ParticipationCreate, ParticipationResponse, PlayCreate, PlayResponse, PlayUpdate
)
from filmroom.modules.plays.tiers import disallowed_fields, play_unit
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

DUPLICATE_TOLERANCE_SECONDS = 2

DB_ERROR_MESSAGES = {
    "23505": (409, "A play with this timestamp already exists."),
    "23503": (400, "Invalid reference (video, team, or player not found)."),
    "23514": (400, "Invalid data format. Please check your entries."),
}


def clean_play_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Empty strings become null."""
    return {key: (None if value == "" else value) for key, value in data.items()}


def database_error(e: Exception) -> HTTPException:
    """Map a Postgres error code to a friendly HTTP error."""
    code = getattr(e, "code", None)
    if code in DB_ERROR_MESSAGES:
        status_code, message = DB_ERROR_MESSAGES[code]
        return HTTPException(status_code=status_code, detail=message)
    return HTTPException(status_code=500, detail=getattr(e, "message", None) or str(e) or "An unexpected error occurred.")


class PlayService:
    def __init__(self, supabase: Client, entitlements: Optional[EntitlementsService] = None):
        self.supabase = supabase
        self.entitlements = entitlements or EntitlementsService(supabase)

    def _get_video_game(self, team_id: str, video_id: str) -> dict:
        """The game a video belongs to, provided it is one of the team's games."""
        video = self.supabase.table("videos")\
            .select("id, game_id")\
            .eq("id", video_id)\
            .limit(1)\
            .execute()
        if not video.data:
            raise HTTPException(status_code=404, detail="Video not found")
        game = self.supabase.table("games")\
            .select("id, team_id, tagging_tier")\
            .eq("id", video.data[0]["game_id"])\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not game.data:
            raise HTTPException(status_code=404, detail="Video not found")
        return game.data[0]

    def _get_writable_game(self, team_id: str, video_id: str) -> dict:
        """The video's game, refused while it is locked or past retention."""
        game = self._get_video_game(team_id, video_id)
        self.entitlements.enforce(self.entitlements.can_access_game(team_id, game["id"]))
        return game

    def _get_play_row(self, team_id: str, play_id: str) -> dict:
        result = self.supabase.table("play_instances")\
            .select("*")\
            .eq("id", play_id)\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Play not found")
        return result.data[0]

    def _check_tier(self, game: dict, data: dict):
        rejected = disallowed_fields(game.get("tagging_tier"), play_unit(data), data)
        if rejected:
            raise HTTPException(
                status_code=400,
                detail=f"Fields not available on the {game['tagging_tier']} tagging tier: {', '.join(rejected)}"
            )

    def check_duplicate(self, video_id: str, timestamp_start: float, exclude_id: Optional[str] = None) -> bool:
        """True when another play on the video starts within the tolerance window."""
        query = self.supabase.table("play_instances")\
            .select("id")\
            .eq("video_id", video_id)\
            .gte("timestamp_start", timestamp_start - DUPLICATE_TOLERANCE_SECONDS)\
            .lte("timestamp_start", timestamp_start + DUPLICATE_TOLERANCE_SECONDS)
        if exclude_id:
            query = query.neq("id", exclude_id)
        return bool(query.limit(1).execute().data)

    # ------------------------------------------------------------------
    # Plays
    # ------------------------------------------------------------------

    def create_play(self, team_id: str, play_data: PlayCreate) -> PlayResponse:
        game = self._get_writable_game(team_id, play_data.video_id)

        data = clean_play_data(play_data.model_dump(exclude_none=True))
        self._check_tier(game, data)
        if data.get("tag_source", "manual") not in TAG_SOURCES:
            raise HTTPException(status_code=400, detail=f"Invalid tag source: {data['tag_source']}")
        if self.check_duplicate(play_data.video_id, play_data.timestamp_start):
            raise HTTPException(status_code=409, detail="A play with this timestamp already exists.")

        data.setdefault("tag_source", "manual")
        data["team_id"] = team_id
        data["created_at"] = datetime.utcnow().isoformat()
        try:
            result = self.supabase.table("play_instances").insert(data).execute()
        except Exception as e:
            logger.error(f"Play insert failed for video {play_data.video_id}: {str(e)}")
            raise database_error(e)
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create play")
        logger.info(f"Created play {result.data[0]['id']} on video {play_data.video_id}")
        return PlayResponse(**result.data[0])

    def update_play(self, team_id: str, play_id: str, play_data: PlayUpdate) -> PlayResponse:
        current = self._get_play_row(team_id, play_id)
        game = self._get_writable_game(team_id, current["video_id"])
        update_data = clean_play_data(play_data.model_dump(exclude_unset=True))
        if not update_data:
            return PlayResponse(**current)

        self._check_tier(game, {**current, **update_data})
        if update_data.get("timestamp_start") is not None and \
                self.check_duplicate(current["video_id"], update_data["timestamp_start"], exclude_id=play_id):
            raise HTTPException(status_code=409, detail="A play with this timestamp already exists.")

        update_data["updated_at"] = datetime.utcnow().isoformat()
        try:
            result = self.supabase.table("play_instances")\
                .update(update_data)\
                .eq("id", play_id)\
                .execute()
        except Exception as e:
            raise database_error(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="Play not found")
        return PlayResponse(**result.data[0])

    def delete_play(self, team_id: str, play_id: str):
        current = self._get_play_row(team_id, play_id)
        self._get_writable_game(team_id, current["video_id"])
        try:
            self.supabase.table("player_participation")\
                .delete()\
                .eq("play_instance_id", play_id)\
                .execute()
            self.supabase.table("play_instances")\
                .delete()\
                .eq("id", play_id)\
                .execute()
            logger.info(f"Deleted play {play_id}")
        except Exception as e:
            raise database_error(e)

    def get_play(self, team_id: str, play_id: str) -> PlayResponse:
        return PlayResponse(**self._get_play_row(team_id, play_id))

    def list_plays_for_video(self, team_id: str, video_id: str) -> List[PlayResponse]:
        self._get_video_game(team_id, video_id)
        result = self.supabase.table("play_instances")\
            .select("*")\
            .eq("video_id", video_id)\
            .order("timestamp_start")\
            .execute()
        return [PlayResponse(**p) for p in result.data or []]

    def list_plays_for_game(self, team_id: str, game_id: str) -> List[PlayResponse]:
        game = self.supabase.table("games")\
            .select("id")\
            .eq("id", game_id)\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not game.data:
            raise HTTPException(status_code=404, detail="Game not found")
        videos = self.supabase.table("videos")\
            .select("id")\
            .eq("game_id", game_id)\
            .execute()
        video_ids = [v["id"] for v in videos.data or []]
        if not video_ids:
            return []
        result = self.supabase.table("play_instances")\
            .select("*")\
            .eq("team_id", team_id)\
            .in_("video_id", video_ids)\
            .order("timestamp_start")\
            .execute()
        return [PlayResponse(**p) for p in result.data or []]

    # ------------------------------------------------------------------
    # Player participation
    # ------------------------------------------------------------------

    def add_participations(self, team_id: str, play_id: str,
                           participations: List[ParticipationCreate]) -> List[ParticipationResponse]:
        current = self._get_play_row(team_id, play_id)
        self._get_writable_game(team_id, current["video_id"])
        if not participations:
            return []
        rows = [{**p.model_dump(), "play_instance_id": play_id} for p in participations]
        try:
            result = self.supabase.table("player_participation").insert(rows).execute()
        except Exception as e:
            raise database_error(e)
        return [ParticipationResponse(**row) for row in result.data or []]

    def list_participations(self, team_id: str, play_id: str) -> List[ParticipationResponse]:
        self._get_play_row(team_id, play_id)
        result = self.supabase.table("player_participation")\
            .select("*")\
            .eq("play_instance_id", play_id)\
            .execute()
        return [ParticipationResponse(**row) for row in result.data or []]
