# Supabase tables: games, audit_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

games
- id: uuid (primary key)
- team_id: uuid (foreign key to teams.id, not null)
- name: text (not null)
- opponent: text (nullable)
- opponent_team_name: text (nullable) - for scouting film, the team being scouted
- date: date (nullable)
- location: text (nullable)
- is_opponent_game: boolean (default: false) - scouting film rather than our own game
- team_score: integer (nullable)
- opponent_score: integer (nullable)
- game_result: text (nullable) - values: win, loss, tie
- quarter_scores: jsonb (default: '{}') - { calculated: {team: {q1..ot,total}, opponent: {...}},
  manual: {...}, source: calculated|manual }
- tagging_tier: text (nullable) - values: quick, standard, comprehensive; only ever upgraded
- is_locked: boolean (default: false)
- locked_reason: text (nullable)
- expires_at: timestamp (nullable) - created_at + tier retention_days
- created_by: uuid (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

audit_logs
- id: uuid (primary key)
- actor_id: uuid (nullable)
- actor_email: text (nullable)
- action: text (not null) - e.g. tagging_tier_selected, tagging_tier_upgraded
- target_type: text (not null)
- target_id: uuid (nullable)
- target_name: text (nullable)
- details: jsonb (nullable)
- timestamp: timestamp (default: now())
"""
