from fastapi import APIRouter, Depends
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.entitlements.schemas import (
    EntitlementResult, SubscriptionOverview, TierComparisonItem, TokenBalanceSummary,
    TokenTransactionResponse
)
from filmroom.modules.entitlements.service import EntitlementsService
from filmroom.core.dependencies import require_team_permission
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/teams/{team_id}", tags=["entitlements"])


def get_entitlements_service(supabase: Client = Depends(get_supabase)) -> EntitlementsService:
    return EntitlementsService(supabase)


@router.get("/subscription", response_model=SubscriptionOverview)
async def get_subscription(
    team_id: str,
    user_data: Dict = Depends(require_team_permission("billing:read")),
    service: EntitlementsService = Depends(get_entitlements_service)
):
    """Current tier, game limits, token balance and camera limit"""
    return service.get_overview(team_id)


@router.get("/subscription/tiers", response_model=List[TierComparisonItem])
async def compare_tiers(
    team_id: str,
    user_data: Dict = Depends(require_team_permission("billing:read")),
    service: EntitlementsService = Depends(get_entitlements_service)
):
    return service.get_tier_comparison(team_id)


@router.get("/tokens", response_model=TokenBalanceSummary)
async def get_tokens(
    team_id: str,
    user_data: Dict = Depends(require_team_permission("billing:read")),
    service: EntitlementsService = Depends(get_entitlements_service)
):
    return service.token_service.get_balance_summary(team_id)


@router.get("/tokens/transactions", response_model=List[TokenTransactionResponse])
async def list_token_transactions(
    team_id: str,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(require_team_permission("billing:read")),
    service: EntitlementsService = Depends(get_entitlements_service)
):
    return service.token_service.list_transactions(team_id, limit=limit, offset=offset)


@router.get("/entitlements/games", response_model=Dict[str, EntitlementResult])
async def check_game_creation(
    team_id: str,
    user_data: Dict = Depends(require_team_permission("games:read")),
    service: EntitlementsService = Depends(get_entitlements_service)
):
    """Whether a team game and an opponent game could be created right now"""
    return {
        "team": service.can_create_game(team_id, "team"),
        "opponent": service.can_create_game(team_id, "opponent"),
    }
