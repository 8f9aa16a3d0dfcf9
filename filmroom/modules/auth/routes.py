from fastapi import APIRouter, Depends
from filmroom.modules.auth.schemas import CurrentUserResponse
from filmroom.modules.auth.service import AuthService
from filmroom.core.dependencies import get_auth_service, get_current_user_id, is_platform_admin
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
):
    """Current user with platform admin flag and team roles, for the frontend."""
    user_id = current_user["id"]
    service.record_activity(user_id)
    return CurrentUserResponse(
        id=user_id,
        email=current_user.get("email"),
        user_metadata=current_user.get("user_metadata") or {},
        app_metadata=current_user.get("app_metadata") or {},
        is_platform_admin=is_platform_admin(current_user, service.supabase),
        teams=service.get_user_teams(user_id),
    )
