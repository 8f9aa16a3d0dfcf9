from supabase import Client
from filmroom.modules.scouting.metrics import compute_opponent_metrics, matches_opponent
from filmroom.modules.scouting.schemas import OpponentSummary
from filmroom.modules.scouting.tendencies import opponent_tendencies
from typing import Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ScoutingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _team_games(self, team_id: str) -> List[dict]:
        result = self.supabase.table("games")\
            .select("id, name, date, opponent, opponent_team_name, is_opponent_game")\
            .eq("team_id", team_id)\
            .execute()
        return result.data or []

    def find_opponent_games(self, team_id: str, opponent_name: str, game_id: Optional[str] = None) -> List[dict]:
        """Regular and scouting games whose opponent matches the name."""
        games = [g for g in self._team_games(team_id) if matches_opponent(g, opponent_name)]
        if game_id:
            games = [g for g in games if g["id"] == game_id]
        return games

    def _film_rows(self, team_id: str, games: List[dict]) -> Dict[str, list]:
        if not games:
            return {"videos": [], "plays": []}
        videos = self.supabase.table("videos")\
            .select("id, game_id")\
            .in_("game_id", [g["id"] for g in games])\
            .execute()
        video_ids = [v["id"] for v in videos.data or []]
        plays = []
        if video_ids:
            plays = self.supabase.table("play_instances")\
                .select("*")\
                .eq("team_id", team_id)\
                .in_("video_id", video_ids)\
                .execute().data or []
        return {"videos": videos.data or [], "plays": plays}

    def calculate_opponent_metrics(self, team_id: str, opponent_name: str, game_id: Optional[str] = None) -> dict:
        if not opponent_name or not opponent_name.strip():
            raise HTTPException(status_code=400, detail="Opponent name is required")
        try:
            games = self.find_opponent_games(team_id, opponent_name, game_id)
            rows = self._film_rows(team_id, games)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to load scouting film for {opponent_name}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return compute_opponent_metrics(team_id, opponent_name, games, rows["videos"], rows["plays"], game_id)

    def get_tendencies(self, team_id: str, opponent_name: str, top_formations: int = 5) -> dict:
        if not opponent_name or not opponent_name.strip():
            raise HTTPException(status_code=400, detail="Opponent name is required")
        try:
            games = self.find_opponent_games(team_id, opponent_name)
            rows = self._film_rows(team_id, games)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to load scouting film for {opponent_name}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        opponent_plays = [p for p in rows["plays"] if p.get("is_opponent_play")]
        return opponent_tendencies(opponent_name, opponent_plays, top_formations)

    def list_opponents(self, team_id: str) -> List[OpponentSummary]:
        """Distinct opponents on the schedule with how many games each has"""
        summaries: Dict[str, OpponentSummary] = {}
        for game in self._team_games(team_id):
            name = game.get("opponent_team_name") or game.get("opponent")
            if not name:
                continue
            key = name.strip().lower()
            summary = summaries.get(key)
            if summary is None:
                summary = summaries[key] = OpponentSummary(name=name.strip())
            summary.games += 1
            if game.get("is_opponent_game"):
                summary.scouting_games += 1
        return sorted(summaries.values(), key=lambda s: s.name.lower())
