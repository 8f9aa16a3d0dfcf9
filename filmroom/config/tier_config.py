"""
Subscription Tier Configuration
Default rows for the tier_config table (basic/plus/premium).
Used by the seed script; the API always reads limits from the table.
"""

TIER_ORDER = ["basic", "plus", "premium"]

ACTIVE_SUBSCRIPTION_STATUSES = ["active", "trialing", "past_due", "waived"]

DEFAULT_TIER_CONFIGS = [
    {
        "tier_key": "basic",
        "display_name": "Basic",
        "description": "Essential game planning tools for new coaches and small programs.",
        "tagline": "Essential Game Planning",
        "max_active_games": 2,
        "max_team_games": 1,
        "max_opponent_games": 1,
        "retention_days": 30,
        "max_cameras_per_game": 1,
        "monthly_upload_tokens": 2,
        "token_rollover_cap": 2,
        "monthly_team_tokens": 1,
        "monthly_opponent_tokens": 1,
        "team_token_rollover_cap": 2,
        "opponent_token_rollover_cap": 2,
        "max_video_duration_seconds": 10800,
        "price_monthly_cents": 0,
        "price_yearly_cents": 0,
        "sort_order": 1,
        "is_active": True,
        "features": [
            "Digital Playbook",
            "1 Team Game + 1 Opponent Game",
            "30-Day Film Retention",
            "1 Camera Angle per Game",
            "2 Monthly Upload Tokens",
        ],
    },
    {
        "tier_key": "plus",
        "display_name": "Plus",
        "description": "Full season workflow for active coaches who want to scout opponents and analyze games.",
        "tagline": "Full Season Workflow",
        "max_active_games": None,
        "max_team_games": None,
        "max_opponent_games": None,
        "retention_days": 180,
        "max_cameras_per_game": 3,
        "monthly_upload_tokens": 4,
        "token_rollover_cap": 5,
        "monthly_team_tokens": 2,
        "monthly_opponent_tokens": 2,
        "team_token_rollover_cap": 4,
        "opponent_token_rollover_cap": 4,
        "max_video_duration_seconds": 10800,
        "price_monthly_cents": 2900,
        "price_yearly_cents": 29000,
        "sort_order": 2,
        "is_active": True,
        "features": [
            "Digital Playbook",
            "Unlimited Games",
            "180-Day Film Retention",
            "3 Camera Angles per Game",
            "4 Monthly Upload Tokens (5 Max Rollover)",
            "Full Analytics Dashboard",
            "Drive-by-Drive Analysis",
        ],
    },
    {
        "tier_key": "premium",
        "display_name": "Premium",
        "description": "Year-round performance tracking for clubs and advanced programs.",
        "tagline": "Year-Round Performance",
        "max_active_games": None,
        "max_team_games": None,
        "max_opponent_games": None,
        "retention_days": 365,
        "max_cameras_per_game": 5,
        "monthly_upload_tokens": 8,
        "token_rollover_cap": 10,
        "monthly_team_tokens": 4,
        "monthly_opponent_tokens": 4,
        "team_token_rollover_cap": 8,
        "opponent_token_rollover_cap": 8,
        "max_video_duration_seconds": 10800,
        "price_monthly_cents": 7900,
        "price_yearly_cents": 79000,
        "sort_order": 3,
        "is_active": True,
        "features": [
            "Digital Playbook",
            "Unlimited Games",
            "365-Day Film Retention",
            "5 Camera Angles per Game",
            "8 Monthly Upload Tokens (10 Max Rollover)",
            "Advanced Analytics",
            "O-Line Grading",
            "Player Performance Tracking",
        ],
    },
]


def get_next_tier(tier_key):
    if tier_key not in TIER_ORDER:
        return None
    index = TIER_ORDER.index(tier_key)
    if index < len(TIER_ORDER) - 1:
        return TIER_ORDER[index + 1]
    return None


def is_active_status(status, billing_waived: bool = False) -> bool:
    if billing_waived:
        return True
    return status in ACTIVE_SUBSCRIPTION_STATUSES
