from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class EntitlementResult(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    upgrade_option: Optional[str] = None
    current_usage: Optional[int] = None
    limit: Optional[int] = None


class GameLimits(BaseModel):
    max_active_games: Optional[int] = None
    max_team_games: Optional[int] = None
    max_opponent_games: Optional[int] = None
    retention_days: int
    current_active_games: int = 0
    current_team_games: int = 0
    current_opponent_games: int = 0


class TokenBalanceSummary(BaseModel):
    subscription_available: int = 0
    purchased_available: int = 0
    total_available: int = 0
    used_this_period: int = 0
    monthly_allocation: int = 0
    rollover_cap: int = 0
    team_available: int = 0
    team_used_this_period: int = 0
    opponent_available: int = 0
    opponent_used_this_period: int = 0
    monthly_team_allocation: int = 0
    monthly_opponent_allocation: int = 0
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    has_active_subscription: bool = False


class TokenTransactionResponse(BaseModel):
    id: str
    team_id: str
    transaction_type: str
    amount: int
    balance_after: Optional[int] = None
    source: Optional[str] = None
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    game_type: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TierInfo(BaseModel):
    tier_key: str
    display_name: str
    status: str
    billing_waived: bool = False
    features: List[str] = []
    next_tier: Optional[str] = None


class TierComparisonItem(BaseModel):
    tier_key: str
    display_name: str
    is_current: bool
    is_upgrade: bool
    monthly_price: float
    yearly_price: float
    upload_tokens: int
    cameras_per_game: int
    retention_days: int
    features: List[str] = []


class SubscriptionOverview(BaseModel):
    tier: Optional[TierInfo] = None
    limits: GameLimits
    tokens: TokenBalanceSummary
    camera_limit: int
