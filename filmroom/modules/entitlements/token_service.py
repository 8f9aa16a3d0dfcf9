from supabase import Client
from filmroom.config.tier_config import is_active_status
from filmroom.core.timeutils import parse_timestamp
from filmroom.modules.entitlements.schemas import TokenBalanceSummary, TokenTransactionResponse
from typing import Dict, List, Optional, Tuple
from fastapi import HTTPException
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)

NO_TOKENS_REASON = "No upload tokens available. Purchase additional tokens or wait for your next billing cycle."

GAME_TYPES = ("team", "opponent")
GAME_TYPE_LABELS = {"team": "team film", "opponent": "opponent scouting"}

# Balance writes are compare-and-set; a concurrent writer forces a re-read
BALANCE_WRITE_ATTEMPTS = 3


def no_tokens_reason(game_type: str) -> str:
    return (
        f"No {GAME_TYPE_LABELS[game_type]} tokens available. "
        "Purchase additional tokens or wait for your next billing cycle."
    )


def pool_columns(game_type: str) -> Dict[str, str]:
    """token_balance columns of the team or opponent pool."""
    return {
        "subscription": f"{game_type}_subscription_tokens_available",
        "used": f"{game_type}_subscription_tokens_used_this_period",
        "purchased": f"{game_type}_purchased_tokens_available",
    }


def pool_available(balance: dict, game_type: str) -> int:
    columns = pool_columns(game_type)
    return (balance.get(columns["subscription"]) or 0) + (balance.get(columns["purchased"]) or 0)


def designated_allocation(tier_config: Optional[dict]) -> Tuple[int, int]:
    """Monthly (team, opponent) grant. Tier rows without the split divide the combined allocation."""
    tier_config = tier_config or {}
    monthly = tier_config.get("monthly_upload_tokens") or 0
    team = tier_config.get("monthly_team_tokens")
    opponent = tier_config.get("monthly_opponent_tokens")
    if team is None:
        team = (monthly + 1) // 2
    if opponent is None:
        opponent = monthly // 2
    return team, opponent


class TokenService:
    """
    Upload tokens: one is spent per game created, refunded when a game is deleted before tagging.

    Team games and opponent scouting games draw on separate pools. The legacy combined
    columns (subscription_tokens_available, purchased_tokens_available) move with them.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_balance(self, team_id: str) -> Optional[dict]:
        result = self.supabase.table("token_balance")\
            .select("*")\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_balance_summary(self, team_id: str) -> TokenBalanceSummary:
        try:
            balance = self.get_balance(team_id)
            subscription = self.supabase.table("subscriptions")\
                .select("tier, status, billing_waived")\
                .eq("team_id", team_id)\
                .limit(1)\
                .execute()
            sub = subscription.data[0] if subscription.data else None

            tier_config = None
            if sub and sub.get("tier"):
                tier = self.supabase.table("tier_config")\
                    .select("monthly_upload_tokens, token_rollover_cap, monthly_team_tokens, monthly_opponent_tokens")\
                    .eq("tier_key", sub["tier"])\
                    .limit(1)\
                    .execute()
                tier_config = tier.data[0] if tier.data else None
            monthly_team, monthly_opponent = designated_allocation(tier_config)
            allocation = {
                "monthly_allocation": tier_config["monthly_upload_tokens"] if tier_config else 0,
                "rollover_cap": tier_config["token_rollover_cap"] if tier_config else 0,
                "monthly_team_allocation": monthly_team,
                "monthly_opponent_allocation": monthly_opponent,
            }

            has_active = bool(sub) and is_active_status(sub.get("status"), bool(sub.get("billing_waived")))
            if not balance:
                return TokenBalanceSummary(has_active_subscription=has_active, **allocation)
            subscription_available = balance.get("subscription_tokens_available") or 0
            purchased_available = balance.get("purchased_tokens_available") or 0
            return TokenBalanceSummary(
                subscription_available=subscription_available,
                purchased_available=purchased_available,
                total_available=subscription_available + purchased_available,
                used_this_period=balance.get("subscription_tokens_used_this_period") or 0,
                team_available=pool_available(balance, "team"),
                team_used_this_period=balance.get(pool_columns("team")["used"]) or 0,
                opponent_available=pool_available(balance, "opponent"),
                opponent_used_this_period=balance.get(pool_columns("opponent")["used"]) or 0,
                period_start=parse_timestamp(balance.get("period_start")),
                period_end=parse_timestamp(balance.get("period_end")),
                has_active_subscription=has_active,
                **allocation,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def initialize_subscription_tokens(self, team_id: str, tier_config: Optional[dict],
                                       user_id: Optional[str] = None) -> dict:
        """Create the team's balance with its first monthly grant, split into team and opponent pools."""
        team_tokens, opponent_tokens = designated_allocation(tier_config)
        monthly_tokens = team_tokens + opponent_tokens
        now = datetime.utcnow()
        result = self.supabase.table("token_balance").insert({
            "team_id": team_id,
            "subscription_tokens_available": monthly_tokens,
            "purchased_tokens_available": 0,
            "subscription_tokens_used_this_period": 0,
            "team_subscription_tokens_available": team_tokens,
            "team_subscription_tokens_used_this_period": 0,
            "team_purchased_tokens_available": 0,
            "opponent_subscription_tokens_available": opponent_tokens,
            "opponent_subscription_tokens_used_this_period": 0,
            "opponent_purchased_tokens_available": 0,
            "period_start": now.isoformat(),
            "period_end": (now + timedelta(days=30)).isoformat(),
        }).execute()
        self._log_transaction(
            team_id, "subscription_grant", monthly_tokens, monthly_tokens, "subscription",
            notes=f"Initial monthly allocation ({team_tokens} team, {opponent_tokens} opponent)", user_id=user_id
        )
        return result.data[0] if result.data else {}

    def _compare_and_set(self, team_id: str, update: dict, expected: dict) -> bool:
        """Write update only while the row still holds the expected values. True when it landed."""
        query = self.supabase.table("token_balance")\
            .update(update)\
            .eq("team_id", team_id)
        for column, value in expected.items():
            query = query.eq(column, value)
        return bool(query.execute().data)

    def consume_token(self, team_id: str, game_id: str, game_type: str = "team",
                      user_id: Optional[str] = None) -> dict:
        """
        Spend one token from the game type's pool, subscription tokens before purchased ones.

        403 when the pool is empty; 409 when the balance keeps changing underneath us.
        """
        if game_type not in GAME_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid game type: {game_type}")
        columns = pool_columns(game_type)
        for attempt in range(1, BALANCE_WRITE_ATTEMPTS + 1):
            balance = self.get_balance(team_id)
            if not balance:
                raise HTTPException(status_code=403, detail=no_tokens_reason(game_type))
            if (balance.get(columns["subscription"]) or 0) > 0:
                source = "subscription"
                guarded = (columns["subscription"], "subscription_tokens_available")
                update = {
                    columns["subscription"]: balance[columns["subscription"]] - 1,
                    columns["used"]: (balance.get(columns["used"]) or 0) + 1,
                    "subscription_tokens_available": max((balance.get("subscription_tokens_available") or 0) - 1, 0),
                    "subscription_tokens_used_this_period":
                        (balance.get("subscription_tokens_used_this_period") or 0) + 1,
                }
            elif (balance.get(columns["purchased"]) or 0) > 0:
                source = "purchased"
                guarded = (columns["purchased"], "purchased_tokens_available")
                update = {
                    columns["purchased"]: balance[columns["purchased"]] - 1,
                    "purchased_tokens_available": max((balance.get("purchased_tokens_available") or 0) - 1, 0),
                }
            else:
                raise HTTPException(status_code=403, detail=no_tokens_reason(game_type))

            if self._compare_and_set(team_id, update, {c: balance.get(c) for c in guarded}):
                break
            logger.info(f"Token balance for team {team_id} changed while spending (attempt {attempt})")
        else:
            logger.warning(f"Gave up spending a {game_type} token for team {team_id} after {attempt} attempts")
            raise HTTPException(status_code=409, detail="Token balance changed during the request. Try again.")

        remaining = pool_available({**balance, **update}, game_type)
        self._log_transaction(team_id, "consumption", -1, remaining, source,
                              reference_id=game_id, user_id=user_id, game_type=game_type)
        logger.info(f"Consumed {game_type} {source} upload token for team {team_id} (game {game_id}), {remaining} left")
        return {"success": True, "source": source, "game_type": game_type, "remaining": remaining}

    def refund_token(self, team_id: str, game_id: str, notes: str, game_type: str = "team",
                     user_id: Optional[str] = None) -> bool:
        """Return one token to the game type's subscription pool. False when there is no balance row."""
        columns = pool_columns(game_type)
        for _ in range(BALANCE_WRITE_ATTEMPTS):
            balance = self.get_balance(team_id)
            if not balance:
                return False
            update = {
                columns["subscription"]: (balance.get(columns["subscription"]) or 0) + 1,
                "subscription_tokens_available": (balance.get("subscription_tokens_available") or 0) + 1,
            }
            expected = {c: balance.get(c) for c in (columns["subscription"], "subscription_tokens_available")}
            if self._compare_and_set(team_id, update, expected):
                break
        else:
            logger.warning(f"Token refund for team {team_id} (game {game_id}) lost to concurrent updates")
            return False

        total_after = update["subscription_tokens_available"] + (balance.get("purchased_tokens_available") or 0)
        try:
            self._log_transaction(team_id, "refund", 1, total_after, "subscription",
                                  reference_id=game_id, notes=notes, user_id=user_id, game_type=game_type)
        except Exception as e:
            # Refund already applied
            logger.warning(f"Failed to log token refund for team {team_id}: {e}")
        return True

    def list_transactions(self, team_id: str, limit: int = 50, offset: int = 0) -> List[TokenTransactionResponse]:
        try:
            result = self.supabase.table("token_transactions")\
                .select("*")\
                .eq("team_id", team_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [TokenTransactionResponse(**tx) for tx in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _log_transaction(self, team_id: str, transaction_type: str, amount: int, balance_after: int,
                         source: str, reference_id: Optional[str] = None, notes: Optional[str] = None,
                         user_id: Optional[str] = None, game_type: Optional[str] = None):
        self.supabase.table("token_transactions").insert({
            "team_id": team_id,
            "transaction_type": transaction_type,
            "amount": amount,
            "balance_after": balance_after,
            "source": source,
            "reference_id": reference_id,
            "reference_type": "game" if reference_id else None,
            "game_type": game_type,
            "notes": notes,
            "created_by": user_id,
            "created_at": datetime.utcnow().isoformat(),
        }).execute()
