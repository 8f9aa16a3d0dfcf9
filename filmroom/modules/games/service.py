from supabase import Client
from filmroom.modules.entitlements.service import EntitlementsService
from filmroom.modules.games.schemas import (
    GameCreate, GameDeleteResponse, GameResponse, GameUpdate, QuarterScores, ScoreUpdate
)
from filmroom.modules.plays.tiers import TIER_CAPABILITIES, is_upgrade, is_valid_tier
from filmroom.modules.videos.service import VideoService
from typing import Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)

QUARTER_KEYS = ("q1", "q2", "q3", "q4", "ot")
EXPIRED_LOCK_REASON = "Retention period ended. Upgrade your plan to keep film longer."


def game_result(team_score: int, opponent_score: int) -> str:
    if team_score > opponent_score:
        return "win"
    if team_score < opponent_score:
        return "loss"
    return "tie"


def _complete_quarters(scores: QuarterScores) -> Dict[str, int]:
    values = {key: getattr(scores, key) for key in QUARTER_KEYS}
    values["total"] = scores.total if scores.total is not None else sum(values.values())
    return values


class GameService:
    def __init__(self, supabase: Client, entitlements: Optional[EntitlementsService] = None,
                 video_service: Optional[VideoService] = None):
        self.supabase = supabase
        self.entitlements = entitlements or EntitlementsService(supabase)
        self._video_service = video_service

    @property
    def video_service(self) -> VideoService:
        if self._video_service is None:
            self._video_service = VideoService(self.supabase, entitlements=self.entitlements)
        return self._video_service

    def _get_game_row(self, team_id: str, game_id: str) -> dict:
        result = self.supabase.table("games")\
            .select("*")\
            .eq("id", game_id)\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Game not found")
        return result.data[0]

    def _update(self, game_id: str, update_data: dict) -> GameResponse:
        update_data["updated_at"] = datetime.utcnow().isoformat()
        result = self.supabase.table("games")\
            .update(update_data)\
            .eq("id", game_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Game not found")
        return GameResponse(**result.data[0])

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_game(self, team_id: str, game_data: GameCreate, user_data: dict) -> GameResponse:
        """Create a game: entitlement check, insert, then spend one upload token."""
        if game_data.tagging_tier is not None and not is_valid_tier(game_data.tagging_tier):
            raise HTTPException(status_code=400, detail=f"Invalid tagging tier: {game_data.tagging_tier}")
        game_type = "opponent" if game_data.is_opponent_game else "team"
        self.entitlements.enforce(self.entitlements.can_create_game(team_id, game_type))

        try:
            now = datetime.utcnow()
            retention_days = self.entitlements.get_retention_days(team_id)
            insert_data = game_data.model_dump(mode="json")
            insert_data.update({
                "team_id": team_id,
                "is_locked": False,
                "expires_at": (now + timedelta(days=retention_days)).isoformat(),
                "created_by": user_data["id"],
                "created_at": now.isoformat(),
            })
            result = self.supabase.table("games").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create game")
            game = result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        try:
            self.entitlements.token_service.consume_token(team_id, game["id"], game_type, user_data["id"])
        except HTTPException:
            # No token, no game
            self.supabase.table("games").delete().eq("id", game["id"]).execute()
            raise

        if game_data.tagging_tier:
            self._write_tier_audit(user_data, game, "tagging_tier_selected", {"tier": game_data.tagging_tier})
        logger.info(f"Created {game_type} game {game['id']} for team {team_id}, expires in {retention_days} days")
        return GameResponse(**game)

    def get_game(self, team_id: str, game_id: str) -> GameResponse:
        try:
            return GameResponse(**self._get_game_row(team_id, game_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_games(self, team_id: str, is_opponent_game: Optional[bool] = None, opponent: Optional[str] = None,
                   start_date: Optional[str] = None, end_date: Optional[str] = None) -> List[GameResponse]:
        try:
            query = self.supabase.table("games").select("*").eq("team_id", team_id)
            if is_opponent_game is not None:
                query = query.eq("is_opponent_game", is_opponent_game)
            if opponent:
                query = query.ilike("opponent", f"%{opponent}%")
            if start_date:
                query = query.gte("date", start_date)
            if end_date:
                query = query.lte("date", end_date)
            result = query.order("date", desc=True).execute()
            return [GameResponse(**g) for g in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_game(self, team_id: str, game_id: str, game_data: GameUpdate) -> GameResponse:
        self._get_game_row(team_id, game_id)
        update_data = game_data.model_dump(mode="json", exclude_unset=True)
        if "name" in update_data and not (update_data["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Game name cannot be empty")
        if not update_data:
            return self.get_game(team_id, game_id)
        try:
            return self._update(game_id, update_data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def update_score(self, team_id: str, game_id: str, score: ScoreUpdate) -> GameResponse:
        """
        Set the final score. When quarter_scores are given they are stored as the
        manual breakdown and the totals come from them.
        """
        game = self._get_game_row(team_id, game_id)
        update_data = {}
        team_score = score.team_score
        opponent_score = score.opponent_score

        if score.quarter_scores is not None:
            team = _complete_quarters(score.quarter_scores.team)
            opponent = _complete_quarters(score.quarter_scores.opponent)
            if any(v < 0 for v in list(team.values()) + list(opponent.values())):
                raise HTTPException(status_code=400, detail="Scores cannot be negative")
            breakdown = dict(game.get("quarter_scores") or {})
            breakdown["manual"] = {"team": team, "opponent": opponent}
            breakdown["source"] = "manual"
            update_data["quarter_scores"] = breakdown
            team_score = team["total"]
            opponent_score = opponent["total"]

        for value in (team_score, opponent_score):
            if value is not None and value < 0:
                raise HTTPException(status_code=400, detail="Scores cannot be negative")
        if team_score is not None:
            update_data["team_score"] = team_score
        if opponent_score is not None:
            update_data["opponent_score"] = opponent_score
        if not update_data:
            raise HTTPException(status_code=400, detail="No score provided")

        final_team = update_data.get("team_score", game.get("team_score"))
        final_opponent = update_data.get("opponent_score", game.get("opponent_score"))
        if final_team is not None and final_opponent is not None:
            update_data["game_result"] = game_result(final_team, final_opponent)
        try:
            return self._update(game_id, update_data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def calculate_quarter_scores(self, team_id: str, game_id: str) -> Dict[str, Dict[str, int]]:
        """Quarter breakdown from tagged scoring plays; stored under quarter_scores.calculated."""
        game = self._get_game_row(team_id, game_id)
        plays = self._game_plays(game_id, "quarter, scoring_points, is_opponent_play")
        calculated = {
            "team": {key: 0 for key in QUARTER_KEYS + ("total",)},
            "opponent": {key: 0 for key in QUARTER_KEYS + ("total",)},
        }
        for play in plays:
            points = play.get("scoring_points") or 0
            if points <= 0:
                continue
            side = calculated["opponent" if play.get("is_opponent_play") else "team"]
            quarter = play.get("quarter") or 0
            if 1 <= quarter <= 4:
                side[f"q{quarter}"] += points
            elif quarter >= 5:
                side["ot"] += points
            side["total"] += points

        breakdown = dict(game.get("quarter_scores") or {})
        breakdown["calculated"] = calculated
        breakdown["last_calculated_at"] = datetime.utcnow().isoformat()
        breakdown.setdefault("source", "calculated")
        self._update(game_id, {"quarter_scores": breakdown})
        return calculated

    # ------------------------------------------------------------------
    # Tagging tier
    # ------------------------------------------------------------------

    def set_tagging_tier(self, team_id: str, game_id: str, tier: str, user_data: dict) -> GameResponse:
        """Choose the game's tagging tier. Once set it can only move up."""
        if not is_valid_tier(tier):
            raise HTTPException(status_code=400, detail=f"Invalid tagging tier: {tier}")
        game = self._get_game_row(team_id, game_id)
        current = game.get("tagging_tier")
        if current == tier:
            return GameResponse(**game)
        if current is not None and not is_upgrade(current, tier):
            raise HTTPException(
                status_code=400,
                detail=f"Tagging tier can only be upgraded, not downgraded. Current: {current}, Attempted: {tier}"
            )
        updated = self._update(game_id, {"tagging_tier": tier})
        if current is None:
            self._write_tier_audit(user_data, game, "tagging_tier_selected", {"tier": tier})
        else:
            self._write_tier_audit(user_data, game, "tagging_tier_upgraded", {"from_tier": current, "to_tier": tier})
        logger.info(f"Game {game_id} tagging tier set to {tier} (was {current})")
        return updated

    def get_tagging_tier(self, team_id: str, game_id: str) -> dict:
        game = self._get_game_row(team_id, game_id)
        tier = game.get("tagging_tier")
        return {
            "game_id": game_id,
            "tagging_tier": tier,
            "capabilities": TIER_CAPABILITIES.get(tier) if tier else None,
        }

    def _write_tier_audit(self, user_data: dict, game: dict, action: str, details: dict):
        details = dict(details, game_id=game["id"], game_name=game.get("name"))
        try:
            self.supabase.table("audit_logs").insert({
                "actor_id": user_data.get("id"),
                "actor_email": user_data.get("email"),
                "action": action,
                "target_type": "game",
                "target_id": game["id"],
                "target_name": game.get("name"),
                "details": details,
                "timestamp": datetime.utcnow().isoformat(),
            }).execute()
        except Exception as e:
            logger.warning(f"Failed to write audit log {action} for game {game['id']}: {e}")

    # ------------------------------------------------------------------
    # Access and deletion
    # ------------------------------------------------------------------

    def check_access(self, team_id: str, game_id: str) -> GameResponse:
        """403 when the game is locked or past retention."""
        game = self._get_game_row(team_id, game_id)
        self.entitlements.enforce(self.entitlements.can_access_game(team_id, game_id))
        return GameResponse(**game)

    def _game_videos(self, game_id: str) -> List[dict]:
        result = self.supabase.table("videos")\
            .select("id, file_path")\
            .eq("game_id", game_id)\
            .execute()
        return result.data or []

    def _game_plays(self, game_id: str, columns: str = "id") -> List[dict]:
        video_ids = [v["id"] for v in self._game_videos(game_id)]
        if not video_ids:
            return []
        result = self.supabase.table("play_instances")\
            .select(columns)\
            .in_("video_id", video_ids)\
            .execute()
        return result.data or []

    def delete_game(self, team_id: str, game_id: str, user_id: Optional[str] = None) -> GameDeleteResponse:
        """
        Delete a game and everything under it.
        The upload token is refunded only when no plays were tagged.
        """
        game = self._get_game_row(team_id, game_id)
        try:
            videos = self._game_videos(game_id)
            tagged = len(self._game_plays(game_id))
            refunded = False
            if tagged == 0:
                refunded = self.entitlements.token_service.refund_token(
                    team_id, game_id, "Game deleted before any plays were tagged",
                    "opponent" if game.get("is_opponent_game") else "team", user_id
                )

            counts = self.video_service.delete_film(videos)
            self.supabase.table("drives")\
                .delete()\
                .eq("game_id", game_id)\
                .execute()
            self.supabase.table("games")\
                .delete()\
                .eq("id", game_id)\
                .execute()
            logger.info(f"Deleted game {game_id} (videos={len(videos)}, tags={tagged}, refunded={refunded})")
            return GameDeleteResponse(
                game_id=game_id,
                token_refunded=refunded,
                deleted_videos=counts["deleted_videos"],
                deleted_tags=counts["deleted_plays"],
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete game {game_id}: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def get_expired_games(self, now: Optional[datetime] = None) -> List[dict]:
        """Unlocked games whose expires_at has passed."""
        now = now or datetime.utcnow()
        result = self.supabase.table("games")\
            .select("id, team_id, name, expires_at")\
            .eq("is_locked", False)\
            .lt("expires_at", now.isoformat())\
            .execute()
        return result.data or []

    def lock_expired_game(self, game: dict) -> int:
        """Lock an expired game and remove its film from storage. Returns objects removed."""
        self.supabase.table("games")\
            .update({
                "is_locked": True,
                "locked_reason": EXPIRED_LOCK_REASON,
                "updated_at": datetime.utcnow().isoformat(),
            })\
            .eq("id", game["id"])\
            .execute()
        videos = self._game_videos(game["id"])
        removed = self.video_service.storage.remove(v.get("file_path") for v in videos)
        logger.info(f"Locked expired game {game['id']} (expired at {game.get('expires_at')}), removed {removed} film object(s)")
        return removed
