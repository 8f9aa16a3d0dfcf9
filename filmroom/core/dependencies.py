"""
Core dependencies for route protection and team role checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from filmroom.config.permissions_config import has_min_role, min_role_for
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (platform admin flag, team roles)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def is_platform_admin(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    """Platform admin via app_metadata (set server-side) or the profiles flag."""
    if cache is not None and "is_platform_admin" in cache:
        return cache["is_platform_admin"]
    result = False
    app_metadata = user_data.get("app_metadata") or {}
    if app_metadata.get("type") == "platform_admin":
        result = True
    else:
        try:
            profile = supabase.table("profiles")\
                .select("is_platform_admin")\
                .eq("id", user_data["id"])\
                .limit(1)\
                .execute()
            result = bool(profile.data and profile.data[0].get("is_platform_admin"))
        except Exception as e:
            logger.error(f"Error checking platform admin flag: {e}")
            result = False
    if cache is not None:
        cache["is_platform_admin"] = result
    return result


def get_team(team_id: str, supabase: Client) -> Optional[dict]:
    result = supabase.table("teams")\
        .select("*")\
        .eq("id", team_id)\
        .limit(1)\
        .execute()
    return result.data[0] if result.data else None


def get_team_role(
    team_id: str,
    user_id: str,
    supabase: Client,
    team: Optional[dict] = None,
    cache: Optional[Dict[str, Any]] = None
) -> Optional[str]:
    """Return owner/coach/analyst/viewer for the user on the team, or None. Legacy teams.user_id counts as owner."""
    cache_key = f"team_role:{team_id}"
    if cache is not None and cache_key in cache:
        return cache[cache_key]
    if team is None:
        team = get_team(team_id, supabase)
    role = None
    if team and team.get("user_id") == user_id:
        role = "owner"
    elif team:
        membership = supabase.table("team_memberships")\
            .select("role")\
            .eq("team_id", team_id)\
            .eq("user_id", user_id)\
            .eq("is_active", True)\
            .limit(1)\
            .execute()
        if membership.data:
            role = membership.data[0]["role"]
    if cache is not None:
        cache[cache_key] = role
    return role


def check_team_role(team_id: str, user_data: dict, supabase: Client, min_role: str,
                    cache: Optional[Dict[str, Any]] = None) -> dict:
    """Raise 404 for unknown teams and 403 when the user's role is below min_role. Returns user_data with team_role."""
    team = get_team(team_id, supabase)
    if not team:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Team not found"
        )
    if is_platform_admin(user_data, supabase, cache):
        return {**user_data, "team_role": "owner", "is_platform_admin": True}
    role = get_team_role(team_id, user_data["id"], supabase, team=team, cache=cache)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this team"
        )
    if not has_min_role(role, min_role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient team role. Required: {min_role}"
        )
    return {**user_data, "team_role": role, "is_platform_admin": False}


def require_team_role(min_role: str):
    """Factory function to create a team role check for routes with a team_id path parameter"""
    def check_role(
        team_id: str,
        request: Request,
        user_data: dict = Depends(get_current_user_id),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        cache = _get_request_cache(request)
        return check_team_role(team_id, user_data, supabase, min_role, cache)
    return check_role


def require_team_permission(permission_name: str):
    """Same as require_team_role, with the role looked up from the action matrix ("games:create")."""
    return require_team_role(min_role_for(permission_name))


def require_platform_admin(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Dependency for back-office routes"""
    if not is_platform_admin(user_data, supabase, _get_request_cache(request)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Platform admin access required"
        )
    return user_data
