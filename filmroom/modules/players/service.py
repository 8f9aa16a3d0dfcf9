from supabase import Client
from filmroom.modules.players.schemas import (
    POSITION_GROUPS, PlayerCreate, PlayerResponse, PlayerUpdate, position_group_for
)
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class PlayerService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_player_row(self, team_id: str, player_id: str) -> dict:
        result = self.supabase.table("players")\
            .select("*")\
            .eq("id", player_id)\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Player not found")
        return result.data[0]

    def _check_jersey_available(self, team_id: str, jersey_number: int, exclude_id: Optional[str] = None):
        query = self.supabase.table("players")\
            .select("id")\
            .eq("team_id", team_id)\
            .eq("jersey_number", jersey_number)\
            .eq("is_active", True)
        if exclude_id:
            query = query.neq("id", exclude_id)
        if query.execute().data:
            raise HTTPException(status_code=409, detail=f"Jersey number {jersey_number} is already in use")

    @staticmethod
    def _resolve_group(position: Optional[str], group: Optional[str]) -> Optional[str]:
        if group is not None:
            if group not in POSITION_GROUPS:
                raise HTTPException(status_code=400, detail=f"Invalid position group: {group}")
            return group
        return position_group_for(position)

    def create_player(self, team_id: str, player_data: PlayerCreate) -> PlayerResponse:
        if not player_data.first_name.strip() or not player_data.last_name.strip():
            raise HTTPException(status_code=400, detail="First and last name are required")
        try:
            if player_data.is_active:
                self._check_jersey_available(team_id, player_data.jersey_number)
            insert_data = player_data.model_dump()
            insert_data["position_group"] = self._resolve_group(
                player_data.primary_position, player_data.position_group
            )
            insert_data["team_id"] = team_id
            insert_data["created_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("players").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create player")
            return PlayerResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_player(self, team_id: str, player_id: str) -> PlayerResponse:
        return PlayerResponse(**self._get_player_row(team_id, player_id))

    def list_players(self, team_id: str, position_group: Optional[str] = None,
                     active_only: bool = True) -> List[PlayerResponse]:
        try:
            query = self.supabase.table("players").select("*").eq("team_id", team_id)
            if position_group:
                query = query.eq("position_group", position_group)
            if active_only:
                query = query.eq("is_active", True)
            result = query.order("jersey_number").execute()
            return [PlayerResponse(**p) for p in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_player(self, team_id: str, player_id: str, player_data: PlayerUpdate) -> PlayerResponse:
        current = self._get_player_row(team_id, player_id)
        update_data = player_data.model_dump(exclude_unset=True)
        if not update_data:
            return PlayerResponse(**current)
        try:
            jersey = update_data.get("jersey_number", current["jersey_number"])
            active = update_data.get("is_active", current.get("is_active", True))
            if active and ("jersey_number" in update_data or "is_active" in update_data):
                self._check_jersey_available(team_id, jersey, exclude_id=player_id)
            if "position_group" in update_data or "primary_position" in update_data:
                update_data["position_group"] = self._resolve_group(
                    update_data.get("primary_position", current.get("primary_position")),
                    update_data.get("position_group"),
                )
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("players")\
                .update(update_data)\
                .eq("id", player_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Player not found")
            return PlayerResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_player(self, team_id: str, player_id: str):
        self._get_player_row(team_id, player_id)
        try:
            self.supabase.table("player_participation")\
                .delete()\
                .eq("player_id", player_id)\
                .execute()
            self.supabase.table("players")\
                .delete()\
                .eq("id", player_id)\
                .execute()
            logger.info(f"Deleted player {player_id} from team {team_id}")
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
