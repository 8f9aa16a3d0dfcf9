from supabase import Client
from filmroom.config.tier_config import TIER_ORDER, get_next_tier, is_active_status
from filmroom.core.timeutils import is_past
from filmroom.modules.entitlements.schemas import (
    EntitlementResult, GameLimits, TierInfo, TierComparisonItem, SubscriptionOverview
)
from filmroom.modules.entitlements.token_service import TokenService, designated_allocation, no_tokens_reason
from filmroom.config import settings
from typing import List, Optional, Dict
from fastapi import HTTPException
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class EntitlementsService:
    def __init__(self, supabase: Client, token_service: Optional[TokenService] = None):
        self.supabase = supabase
        self.token_service = token_service or TokenService(supabase)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_subscription(self, team_id: str) -> Optional[dict]:
        result = self.supabase.table("subscriptions")\
            .select("*")\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_tier_config(self, tier_key: str) -> Optional[dict]:
        result = self.supabase.table("tier_config")\
            .select("*")\
            .eq("tier_key", tier_key)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_all_tier_configs(self) -> List[dict]:
        result = self.supabase.table("tier_config")\
            .select("*")\
            .eq("is_active", True)\
            .order("sort_order")\
            .execute()
        return result.data or []

    def _active_subscription(self, team_id: str):
        """Return (subscription, tier_config) or an EntitlementResult refusal."""
        subscription = self.get_subscription(team_id)
        if not subscription:
            return EntitlementResult(allowed=False, reason="No subscription found")
        if not is_active_status(subscription.get("status"), bool(subscription.get("billing_waived"))):
            return EntitlementResult(allowed=False, reason="Subscription is not active")
        tier_config = self.get_tier_config(subscription["tier"])
        if not tier_config:
            return EntitlementResult(allowed=False, reason="Tier configuration not found")
        return subscription, tier_config

    def _get_game(self, game_id: str) -> Optional[dict]:
        result = self.supabase.table("games")\
            .select("id, team_id, is_locked, locked_reason, expires_at")\
            .eq("id", game_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_game_counts(self, team_id: str) -> Dict[str, int]:
        """Count unlocked, unexpired games by type."""
        result = self.supabase.table("games")\
            .select("id, is_opponent_game, expires_at")\
            .eq("team_id", team_id)\
            .eq("is_locked", False)\
            .execute()
        now = datetime.utcnow()
        counts = {"team": 0, "opponent": 0}
        for game in result.data or []:
            if is_past(game.get("expires_at"), now):
                continue
            counts["opponent" if game.get("is_opponent_game") else "team"] += 1
        return counts

    def get_cameras_for_game(self, game_id: str) -> int:
        result = self.supabase.table("videos")\
            .select("id")\
            .eq("game_id", game_id)\
            .execute()
        return len(result.data or [])

    # ------------------------------------------------------------------
    # Capability checks
    # ------------------------------------------------------------------

    def can_create_game(self, team_id: str, game_type: str) -> EntitlementResult:
        checked = self._active_subscription(team_id)
        if isinstance(checked, EntitlementResult):
            return checked
        subscription, tier_config = checked

        tokens = self.token_service.get_balance_summary(team_id)
        available = tokens.team_available if game_type == "team" else tokens.opponent_available
        if available < 1:
            monthly_team, monthly_opponent = designated_allocation(tier_config)
            return EntitlementResult(
                allowed=False,
                reason=no_tokens_reason(game_type),
                current_usage=0,
                limit=monthly_team if game_type == "team" else monthly_opponent,
                upgrade_option=get_next_tier(subscription["tier"]),
            )

        if tier_config.get("max_active_games") is not None:
            counts = self.get_game_counts(team_id)
            limit_key = "max_team_games" if game_type == "team" else "max_opponent_games"
            limit = tier_config.get(limit_key)
            if limit is not None and counts[game_type] >= limit:
                label = "team" if game_type == "team" else "opponent"
                return EntitlementResult(
                    allowed=False,
                    reason=f"{label.capitalize()} game limit reached. Your plan allows {_plural(limit, f'active {label} game')}.",
                    upgrade_option="plus",
                    current_usage=counts[game_type],
                    limit=limit,
                )
        return EntitlementResult(allowed=True)

    def can_add_camera(self, team_id: str, game_id: str) -> EntitlementResult:
        checked = self._active_subscription(team_id)
        if isinstance(checked, EntitlementResult):
            return checked
        subscription, tier_config = checked

        game = self._get_game(game_id)
        if not game:
            return EntitlementResult(allowed=False, reason="Game not found")
        if game.get("is_locked"):
            return EntitlementResult(
                allowed=False,
                reason="Game is locked. Upgrade your plan to access this game.",
                upgrade_option=get_next_tier(subscription["tier"]),
            )
        if is_past(game.get("expires_at")):
            return EntitlementResult(allowed=False, reason="Game has expired")

        current = self.get_cameras_for_game(game_id)
        limit = tier_config["max_cameras_per_game"]
        if current >= limit:
            return EntitlementResult(
                allowed=False,
                reason=f"Camera limit reached. Your plan allows {_plural(limit, 'camera angle')} per game.",
                upgrade_option=get_next_tier(subscription["tier"]),
                current_usage=current,
                limit=limit,
            )
        return EntitlementResult(allowed=True, current_usage=current, limit=limit)

    def can_access_game(self, team_id: str, game_id: str) -> EntitlementResult:
        checked = self._active_subscription(team_id)
        if isinstance(checked, EntitlementResult):
            return checked
        subscription, _ = checked

        game = self._get_game(game_id)
        if not game:
            return EntitlementResult(allowed=False, reason="Game not found")
        if game.get("is_locked"):
            return EntitlementResult(
                allowed=False,
                reason=game.get("locked_reason") or "Game is locked due to plan limits. Upgrade to access.",
                upgrade_option=get_next_tier(subscription["tier"]),
            )
        if is_past(game.get("expires_at")):
            return EntitlementResult(allowed=False, reason="Game has expired and is no longer accessible")
        return EntitlementResult(allowed=True)

    @staticmethod
    def enforce(result: EntitlementResult, status_code: int = 403):
        """Raise when a capability check refused."""
        if result.allowed:
            return
        if result.reason == "Game not found":
            raise HTTPException(status_code=404, detail=result.reason)
        raise HTTPException(status_code=status_code, detail=result.reason)

    # ------------------------------------------------------------------
    # Limits and tier info
    # ------------------------------------------------------------------

    def get_game_limits(self, team_id: str) -> GameLimits:
        subscription = self.get_subscription(team_id)
        if not subscription:
            return GameLimits(max_active_games=0, max_team_games=0, max_opponent_games=0, retention_days=0)
        tier_config = self.get_tier_config(subscription["tier"])
        if not tier_config:
            return GameLimits(max_active_games=0, max_team_games=0, max_opponent_games=0, retention_days=30)
        counts = self.get_game_counts(team_id)
        return GameLimits(
            max_active_games=tier_config.get("max_active_games"),
            max_team_games=tier_config.get("max_team_games"),
            max_opponent_games=tier_config.get("max_opponent_games"),
            retention_days=tier_config["retention_days"],
            current_active_games=counts["team"] + counts["opponent"],
            current_team_games=counts["team"],
            current_opponent_games=counts["opponent"],
        )

    def get_retention_days(self, team_id: str) -> int:
        subscription = self.get_subscription(team_id)
        tier_config = self.get_tier_config(subscription["tier"]) if subscription else None
        return tier_config["retention_days"] if tier_config else 30

    def get_camera_limit(self, team_id: str) -> int:
        subscription = self.get_subscription(team_id)
        if not subscription:
            return 1
        tier_config = self.get_tier_config(subscription["tier"])
        return (tier_config or {}).get("max_cameras_per_game") or 1

    def get_current_tier(self, team_id: str) -> Optional[TierInfo]:
        subscription = self.get_subscription(team_id)
        if not subscription:
            return None
        tier_config = self.get_tier_config(subscription["tier"])
        if not tier_config:
            return None
        return TierInfo(
            tier_key=subscription["tier"],
            display_name=tier_config["display_name"],
            status=subscription["status"],
            billing_waived=bool(subscription.get("billing_waived")),
            features=tier_config.get("features") or [],
            next_tier=get_next_tier(subscription["tier"]),
        )

    def get_tier_comparison(self, team_id: str) -> List[TierComparisonItem]:
        subscription = self.get_subscription(team_id)
        current_tier = (subscription or {}).get("tier") or "basic"
        current_index = TIER_ORDER.index(current_tier) if current_tier in TIER_ORDER else 0
        items = []
        for config in self.get_all_tier_configs():
            tier_key = config["tier_key"]
            this_index = TIER_ORDER.index(tier_key) if tier_key in TIER_ORDER else -1
            items.append(TierComparisonItem(
                tier_key=tier_key,
                display_name=config["display_name"],
                is_current=tier_key == current_tier,
                is_upgrade=this_index > current_index,
                monthly_price=config["price_monthly_cents"] / 100,
                yearly_price=config["price_yearly_cents"] / 100,
                upload_tokens=config["monthly_upload_tokens"],
                cameras_per_game=config["max_cameras_per_game"],
                retention_days=config["retention_days"],
                features=config.get("features") or [],
            ))
        return items

    def get_overview(self, team_id: str) -> SubscriptionOverview:
        try:
            return SubscriptionOverview(
                tier=self.get_current_tier(team_id),
                limits=self.get_game_limits(team_id),
                tokens=self.token_service.get_balance_summary(team_id),
                camera_limit=self.get_camera_limit(team_id),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    def create_subscription(self, team_id: str, user_id: Optional[str] = None, tier_key: str = "basic") -> dict:
        """Start a team on a tier and grant its first month of upload tokens."""
        trial_days = settings.default_trial_days
        row = {
            "team_id": team_id,
            "tier": tier_key,
            "status": "trialing" if trial_days > 0 else "active",
            "billing_waived": False,
            "created_at": datetime.utcnow().isoformat(),
        }
        if trial_days > 0:
            row["trial_ends_at"] = (datetime.utcnow() + timedelta(days=trial_days)).isoformat()
        result = self.supabase.table("subscriptions").insert(row).execute()
        self.token_service.initialize_subscription_tokens(team_id, self.get_tier_config(tier_key), user_id)
        logger.info(f"Created {row['status']} {tier_key} subscription for team {team_id}")
        return result.data[0] if result.data else row
