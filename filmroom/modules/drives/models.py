# Supabase table: drives
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- game_id: uuid (foreign key to games.id, not null)
- team_id: uuid (foreign key to teams.id, not null)
- drive_number: integer (not null)
- quarter: integer (not null)
- possession_type: text (not null, default: 'offense') - values: offense, defense
- start_time: numeric (nullable) - video seconds
- end_time: numeric (nullable)
- start_yard_line: integer (not null) - 0-100, own goal line = 0
- end_yard_line: integer (not null)
- plays_count: integer (default: 0)
- yards_gained: integer (default: 0)
- first_downs: integer (default: 0)
- result: text (not null) - values: touchdown, field_goal, punt, turnover, downs, end_half, end_game, safety
- points: integer (default: 0)
- three_and_out: boolean (default: false) - 3 plays, no first down
- reached_red_zone: boolean (default: false) - any play at yard_line >= 80
- scoring_drive: boolean (default: false) - points > 0
- notes: text (nullable)
- created_by: uuid (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
