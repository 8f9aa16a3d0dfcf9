from supabase import Client
from filmroom.modules.drives.derivation import (
    DRIVE_RESULTS, derived_flags, drive_rates, group_plays_into_drives, points_for_result,
    summarize_drive_plays
)
from filmroom.modules.drives.schemas import (
    DriveComplete, DriveCreate, DriveMetrics, DriveResponse, DriveUpdate, DriveWithPlays
)
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class DriveService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _check_game(self, team_id: str, game_id: str):
        result = self.supabase.table("games")\
            .select("id")\
            .eq("id", game_id)\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Game not found")

    def _get_drive_row(self, team_id: str, drive_id: str) -> dict:
        result = self.supabase.table("drives")\
            .select("*")\
            .eq("id", drive_id)\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Drive not found")
        return result.data[0]

    def _get_play_row(self, team_id: str, play_id: str) -> dict:
        result = self.supabase.table("play_instances")\
            .select("id, drive_id")\
            .eq("id", play_id)\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Play not found")
        return result.data[0]

    def _save(self, drive_id: str, update_data: dict) -> DriveResponse:
        update_data["updated_at"] = datetime.utcnow().isoformat()
        result = self.supabase.table("drives")\
            .update(update_data)\
            .eq("id", drive_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Drive not found")
        return DriveResponse(**result.data[0])

    @staticmethod
    def _check_result(result: Optional[str]):
        if result is not None and result not in DRIVE_RESULTS:
            raise HTTPException(status_code=400, detail=f"Invalid drive result: {result}")

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_drive(self, team_id: str, data: DriveCreate, user_id: Optional[str] = None) -> DriveResponse:
        """New drive with placeholder totals until it is completed."""
        self._check_game(team_id, data.game_id)
        try:
            result = self.supabase.table("drives").insert({
                "game_id": data.game_id,
                "team_id": team_id,
                "drive_number": data.drive_number,
                "quarter": data.quarter,
                "possession_type": data.possession_type,
                "start_yard_line": data.start_yard_line,
                "start_time": data.start_time,
                "end_yard_line": data.start_yard_line,
                "plays_count": 0,
                "yards_gained": 0,
                "first_downs": 0,
                "result": "end_half",
                "points": 0,
                "three_and_out": False,
                "reached_red_zone": False,
                "scoring_drive": False,
                "created_by": user_id,
                "created_at": datetime.utcnow().isoformat(),
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create drive")
            return DriveResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to create drive: {str(e)}")

    def update_drive(self, team_id: str, drive_id: str, data: DriveUpdate) -> DriveResponse:
        current = self._get_drive_row(team_id, drive_id)
        update_data = data.model_dump(exclude_unset=True)
        self._check_result(update_data.get("result"))
        if "result" in update_data:
            points = points_for_result(update_data["result"])
            update_data["points"] = points
            update_data.update(derived_flags(current.get("plays_count") or 0, current.get("first_downs") or 0, points))
        if not update_data:
            return DriveResponse(**current)
        return self._save(drive_id, update_data)

    def complete_drive(self, team_id: str, drive_id: str, data: DriveComplete) -> DriveResponse:
        """Set the drive's result; points follow from it."""
        current = self._get_drive_row(team_id, drive_id)
        self._check_result(data.result)
        points = points_for_result(data.result)
        update_data = {
            "result": data.result,
            "points": points,
            "end_yard_line": data.end_yard_line,
            "end_time": data.end_time,
        }
        update_data.update(derived_flags(current.get("plays_count") or 0, current.get("first_downs") or 0, points))
        return self._save(drive_id, update_data)

    def delete_drive(self, team_id: str, drive_id: str):
        self._get_drive_row(team_id, drive_id)
        try:
            self.supabase.table("play_instances")\
                .update({"drive_id": None})\
                .eq("drive_id", drive_id)\
                .execute()
            self.supabase.table("drives")\
                .delete()\
                .eq("id", drive_id)\
                .execute()
            logger.info(f"Deleted drive {drive_id}")
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete drive: {str(e)}")

    def list_drives_for_game(self, team_id: str, game_id: str,
                             possession_type: Optional[str] = None) -> List[DriveResponse]:
        self._check_game(team_id, game_id)
        query = self.supabase.table("drives").select("*").eq("game_id", game_id)
        if possession_type:
            query = query.eq("possession_type", possession_type)
        result = query.order("drive_number").execute()
        return [DriveResponse(**d) for d in result.data or []]

    def get_drive_with_plays(self, team_id: str, drive_id: str) -> DriveWithPlays:
        drive = self._get_drive_row(team_id, drive_id)
        plays = self.supabase.table("play_instances")\
            .select("*")\
            .eq("drive_id", drive_id)\
            .order("timestamp_start")\
            .execute()
        return DriveWithPlays(**drive, plays=plays.data or [])

    # ------------------------------------------------------------------
    # Play linkage
    # ------------------------------------------------------------------

    def recalculate_drive_stats(self, drive_id: str) -> DriveResponse:
        plays = self.supabase.table("play_instances")\
            .select("yards_gained, resulted_in_first_down, yard_line")\
            .eq("drive_id", drive_id)\
            .execute()
        stats = summarize_drive_plays(plays.data or [])
        drive = self.supabase.table("drives")\
            .select("points")\
            .eq("id", drive_id)\
            .limit(1)\
            .execute()
        points = (drive.data[0].get("points") or 0) if drive.data else 0
        stats.update(derived_flags(stats["plays_count"], stats["first_downs"], points))
        return self._save(drive_id, stats)

    def add_play(self, team_id: str, drive_id: str, play_id: str) -> DriveResponse:
        self._get_drive_row(team_id, drive_id)
        play = self._get_play_row(team_id, play_id)
        self.supabase.table("play_instances")\
            .update({"drive_id": drive_id})\
            .eq("id", play_id)\
            .execute()
        previous = play.get("drive_id")
        if previous and previous != drive_id:
            self.recalculate_drive_stats(previous)
        return self.recalculate_drive_stats(drive_id)

    def remove_play(self, team_id: str, play_id: str) -> Optional[DriveResponse]:
        play = self._get_play_row(team_id, play_id)
        self.supabase.table("play_instances")\
            .update({"drive_id": None})\
            .eq("id", play_id)\
            .execute()
        if play.get("drive_id"):
            return self.recalculate_drive_stats(play["drive_id"])
        return None

    # ------------------------------------------------------------------
    # Auto-creation and metrics
    # ------------------------------------------------------------------

    def auto_create_drives(self, team_id: str, game_id: str, possession_type: str = "offense",
                           user_id: Optional[str] = None) -> List[DriveResponse]:
        """Group a game's tagged plays into drives for one side of the ball."""
        self._check_game(team_id, game_id)
        videos = self.supabase.table("videos")\
            .select("id")\
            .eq("game_id", game_id)\
            .execute()
        video_ids = [v["id"] for v in videos.data or []]
        if not video_ids:
            return []
        plays = self.supabase.table("play_instances")\
            .select("*")\
            .in_("video_id", video_ids)\
            .eq("team_id", team_id)\
            .eq("is_opponent_play", possession_type == "defense")\
            .order("timestamp_start")\
            .execute()
        if not plays.data:
            return []

        created = []
        for grouped in group_plays_into_drives(plays.data):
            drive = self.create_drive(team_id, DriveCreate(
                game_id=game_id,
                drive_number=grouped["drive_number"],
                quarter=grouped["quarter"],
                start_yard_line=grouped["start_yard_line"],
                possession_type=possession_type,
                start_time=grouped["start_time"],
            ), user_id)
            self.supabase.table("play_instances")\
                .update({"drive_id": drive.id})\
                .in_("id", grouped["play_ids"])\
                .execute()
            stats = summarize_drive_plays([p for p in plays.data if p["id"] in grouped["play_ids"]])
            stats.update({
                "result": grouped["result"],
                "points": grouped["points"],
                "end_yard_line": grouped["end_yard_line"],
                "end_time": grouped["end_time"],
            })
            stats.update(derived_flags(stats["plays_count"], stats["first_downs"], grouped["points"]))
            created.append(self._save(drive.id, stats))
        logger.info(f"Auto-created {len(created)} {possession_type} drive(s) for game {game_id}")
        return created

    def get_drive_metrics(self, team_id: str, game_id: Optional[str] = None,
                          possession_type: Optional[str] = None) -> DriveMetrics:
        query = self.supabase.table("drives")\
            .select("points, three_and_out, reached_red_zone, result")\
            .eq("team_id", team_id)
        if game_id:
            query = query.eq("game_id", game_id)
        if possession_type:
            query = query.eq("possession_type", possession_type)
        try:
            result = query.execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return DriveMetrics(**drive_rates(result.data or []))
