"""
Tagging tiers: how much detail a coach records per play.

A game's tier is chosen once and may only move up
(quick -> standard -> comprehensive). Each tier lists which play fields
may be filled in for each unit; comprehensive allows everything.
"""

from typing import Dict, List, Optional

TAGGING_TIER_ORDER = ["quick", "standard", "comprehensive"]

UNITS = ("offense", "defense", "special_teams")

ALL_FIELDS = "all"

_QUICK_FIELDS = {
    "offense": [
        "drive_context", "down", "distance", "yard_line", "hash_mark", "play_code", "formation",
        "play_type", "result_type", "yards_gained", "resulted_in_first_down", "notes", "fumbled",
    ],
    "defense": [
        "drive_context", "down", "distance", "yard_line", "hash_mark", "opponent_play_type",
        "result_type", "yards_gained", "resulted_in_first_down", "notes", "is_tfl", "is_sack",
        "is_forced_fumble", "is_pbu",
    ],
    "special_teams": [
        "special_teams_unit", "kick_result", "kick_distance", "return_yards", "is_fair_catch",
        "is_touchback", "is_muffed", "penalty_on_play",
    ],
}

_STANDARD_EXTRA_FIELDS = {
    "offense": ["direction", "qb_id", "ball_carrier_id", "target_id", "drop", "contested_catch"],
    "defense": [
        "formation", "opponent_player_number", "pressure_player_ids", "coverage_player_id",
        "opponent_qb_evaluation", "tackler_ids",
    ],
    "special_teams": ["kicker_id", "punter_id", "returner_id", "kickoff_type", "punt_type", "blocked_by"],
}

TIER_CAPABILITIES: Dict[str, dict] = {
    "quick": {
        "name": "Quick",
        "time_per_play": "15-20 sec",
        "show_player_attribution": False,
        "show_ol_tracking": False,
        "show_defensive_tracking": False,
        "show_performance_sections": False,
        "fields": _QUICK_FIELDS,
    },
    "standard": {
        "name": "Standard",
        "time_per_play": "30-45 sec",
        "show_player_attribution": True,
        "show_ol_tracking": False,
        "show_defensive_tracking": False,
        "show_performance_sections": False,
        "fields": {unit: _QUICK_FIELDS[unit] + _STANDARD_EXTRA_FIELDS[unit] for unit in UNITS},
    },
    "comprehensive": {
        "name": "Comprehensive",
        "time_per_play": "2-3 min",
        "show_player_attribution": True,
        "show_ol_tracking": True,
        "show_defensive_tracking": True,
        "show_performance_sections": True,
        "fields": {unit: [ALL_FIELDS] for unit in UNITS},
    },
}

# Detail only comprehensive tagging records
COMPREHENSIVE_ONLY_FIELDS = {
    "lt_id", "lt_block_result", "lg_id", "lg_block_result", "c_id", "c_block_result",
    "rg_id", "rg_block_result", "rt_id", "rt_block_result",
    "ol_penalty_player_id", "has_motion", "is_play_action", "facing_blitz",
    "missed_tackle_ids", "sack_player_id", "coverage_result", "qb_decision_grade",
    "gunner_tackle_id", "long_snapper_id", "snap_quality", "holder_id", "coverage_tackler_id", "blocker_id",
}

GATED_FIELDS = set(COMPREHENSIVE_ONLY_FIELDS)
for _unit in UNITS:
    GATED_FIELDS |= set(_QUICK_FIELDS[_unit]) | set(_STANDARD_EXTRA_FIELDS[_unit])


def is_valid_tier(tier: Optional[str]) -> bool:
    return tier in TAGGING_TIER_ORDER


def get_tier_capabilities(tier: str) -> dict:
    if not is_valid_tier(tier):
        raise ValueError(f"Unknown tagging tier: {tier}")
    return TIER_CAPABILITIES[tier]


def is_upgrade(from_tier: Optional[str], to_tier: str) -> bool:
    """True when to_tier is strictly above from_tier. Any tier is an upgrade from none."""
    if not is_valid_tier(to_tier):
        return False
    if from_tier is None:
        return True
    if not is_valid_tier(from_tier):
        return False
    return TAGGING_TIER_ORDER.index(to_tier) > TAGGING_TIER_ORDER.index(from_tier)


def allowed_fields(tier: str, unit: str) -> List[str]:
    """Field names a tier may record for a unit; ["all"] means unrestricted."""
    fields = get_tier_capabilities(tier)["fields"]
    if unit not in fields:
        raise ValueError(f"Unknown unit: {unit}")
    return list(fields[unit])


def play_unit(play: dict) -> str:
    """Which unit a play belongs to, from its tagged data."""
    if play.get("special_teams_unit"):
        return "special_teams"
    return "defense" if play.get("is_opponent_play") else "offense"


def _has_value(value) -> bool:
    return value is not None and value is not False and value != "" and value != []


def disallowed_fields(tier: Optional[str], unit: str, data: dict) -> List[str]:
    """
    Tier-gated fields filled in on data that the tier does not allow for the unit, sorted.
    Fields no tier gates (identifiers, scoring flags, tags) always pass.
    """
    if tier is None or tier == "comprehensive":
        return []
    allowed = set(allowed_fields(tier, unit))
    if unit == "special_teams":
        # Situation fields come from the scrimmage unit the kick came from
        allowed |= set(_QUICK_FIELDS["offense"]) | set(_QUICK_FIELDS["defense"])
    return sorted(
        k for k, v in data.items() if k in GATED_FIELDS and k not in allowed and _has_value(v)
    )
