"""
Seed Tier Config Script
Upserts the subscription tier rows (limits, token allowances, prices) from config.
Run manually after a deploy that changes tier limits.
"""

import sys
from filmroom.config.tier_config import DEFAULT_TIER_CONFIGS
from filmroom.database.supabase_client import get_service_supabase
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_tier_configs(supabase: Client) -> int:
    """Create or update one tier_config row per tier_key"""
    logger.info("Seeding tier config...")
    created_count = 0
    updated_count = 0

    for tier in DEFAULT_TIER_CONFIGS:
        try:
            existing = supabase.table("tier_config")\
                .select("tier_key")\
                .eq("tier_key", tier["tier_key"])\
                .limit(1)\
                .execute()

            if existing.data:
                values = {k: v for k, v in tier.items() if k != "tier_key"}
                supabase.table("tier_config")\
                    .update(values)\
                    .eq("tier_key", tier["tier_key"])\
                    .execute()
                updated_count += 1
                logger.debug(f"Updated tier: {tier['tier_key']}")
            else:
                supabase.table("tier_config").insert(tier).execute()
                created_count += 1
                logger.debug(f"Created tier: {tier['tier_key']}")
        except Exception as e:
            logger.error(f"Error processing tier {tier['tier_key']}: {e}")

    logger.info(f"Tiers seeded: {created_count} created, {updated_count} updated")
    return created_count + updated_count


def main():
    try:
        supabase = get_service_supabase()
        count = seed_tier_configs(supabase)
        logger.info(f"Seeding completed: {count} tiers processed")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
