import hashlib
import logging
import time
from supabase import Client
from fastapi import HTTPException
from filmroom.config.permissions_config import PERMISSION_MATRIX
from filmroom.modules.auth.schemas import TeamMembershipSummary
from datetime import datetime
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

# Token -> user cache so a page firing many parallel requests validates the JWT once
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


def _purge_expired(now: float):
    expired = [key for key, (_, expiry) in _AUTH_USER_CACHE.items() if expiry <= now]
    for key in expired:
        del _AUTH_USER_CACHE[key]


def _summary(team_id: str, team_name: Optional[str], role: str) -> TeamMembershipSummary:
    permissions = PERMISSION_MATRIX["roles"].get(role, [])
    return TeamMembershipSummary(team_id=team_id, team_name=team_name, role=role, permissions=permissions)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Validate a Supabase Auth bearer token; 401 when it is missing, expired or malformed."""
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        cached = _AUTH_USER_CACHE.get(cache_key)
        if cached:
            user_data, expiry = cached
            if now < expiry:
                return user_data
            del _AUTH_USER_CACHE[cache_key]

        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
            "created_at": getattr(user, "created_at", None),
        }
        if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
            _purge_expired(now)
        if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
            _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
        return user_data

    def get_user_teams(self, user_id: str) -> List[TeamMembershipSummary]:
        """Owned teams (legacy teams.user_id) first, then active memberships on other teams."""
        teams: Dict[str, TeamMembershipSummary] = {}
        owned = self.supabase.table("teams")\
            .select("id, name")\
            .eq("user_id", user_id)\
            .execute()
        for team in owned.data or []:
            teams[team["id"]] = _summary(team["id"], team.get("name"), "owner")

        memberships = self.supabase.table("team_memberships")\
            .select("team_id, role")\
            .eq("user_id", user_id)\
            .eq("is_active", True)\
            .execute()
        other = [m for m in memberships.data or [] if m["team_id"] not in teams]
        names = {}
        if other:
            named = self.supabase.table("teams")\
                .select("id, name")\
                .in_("id", [m["team_id"] for m in other])\
                .execute()
            names = {t["id"]: t.get("name") for t in named.data or []}
        for m in other:
            teams[m["team_id"]] = _summary(m["team_id"], names.get(m["team_id"]), m["role"])
        return list(teams.values())

    def record_activity(self, user_id: str, now: Optional[datetime] = None):
        """Stamp profiles.last_active_at; the admin dashboard counts active users from it."""
        now = now or datetime.utcnow()
        try:
            self.supabase.table("profiles")\
                .update({"last_active_at": now.isoformat()})\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.warning(f"Could not record activity for user {user_id}: {e}")
