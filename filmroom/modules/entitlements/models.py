# Supabase tables: tier_config, subscriptions, token_balance, token_transactions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py and token_service.py

"""
Expected Supabase table structure:

tier_config:
- tier_key: text (primary key) - basic, plus, premium
- display_name: text
- max_active_games / max_team_games / max_opponent_games: integer (nullable = unlimited)
- retention_days: integer (> 0)
- max_cameras_per_game: integer (>= 1)
- monthly_upload_tokens: integer
- token_rollover_cap: integer (>= monthly_upload_tokens)
- monthly_team_tokens / monthly_opponent_tokens: integer (designated monthly grant)
- team_token_rollover_cap / opponent_token_rollover_cap: integer
- max_video_duration_seconds: integer
- price_monthly_cents / price_yearly_cents: integer
- sort_order: integer
- is_active: boolean
- features: jsonb (array of display strings)

subscriptions:
- id: uuid (primary key)
- team_id: uuid (foreign key to teams.id, unique)
- tier: text (foreign key to tier_config.tier_key)
- status: text - active, trialing, past_due, waived, canceled, none
- billing_waived: boolean (default: false)
- trial_ends_at: timestamp (nullable)
- current_period_end: timestamp (nullable)
- created_at: timestamp (default: now())

token_balance:
- team_id: uuid (primary key, foreign key to teams.id)
- subscription_tokens_available: integer
- purchased_tokens_available: integer
- subscription_tokens_used_this_period: integer
- team_subscription_tokens_available / team_subscription_tokens_used_this_period / team_purchased_tokens_available: integer
- opponent_subscription_tokens_available / opponent_subscription_tokens_used_this_period / opponent_purchased_tokens_available: integer
  (the combined columns above track the sum of both pools)
- period_start / period_end: timestamp (nullable)

token_transactions:
- id: uuid (primary key)
- team_id: uuid
- transaction_type: text - subscription_grant, consumption, refund, purchase
- amount: integer (negative for consumption)
- balance_after: integer
- source: text - subscription, purchased
- reference_id: uuid (nullable, game id)
- reference_type: text (nullable)
- game_type: text (nullable) - team, opponent
- notes: text (nullable)
- created_by: uuid (nullable)
- created_at: timestamp (default: now())
"""
