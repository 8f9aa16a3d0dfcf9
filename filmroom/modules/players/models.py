# Supabase table: players
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- team_id: uuid (foreign key to teams.id, not null)
- jersey_number: integer (not null) - 0-99, unique among a team's active players
- first_name: text (not null)
- last_name: text (not null)
- primary_position: text (not null) - e.g. QB, WR, MIKE, CB, K
- secondary_position: text (nullable)
- position_group: text (nullable) - values: offense, defense, special_teams
- depth_order: integer (default: 1)
- grade_level: text (nullable)
- weight: integer (nullable)
- height: integer (nullable) - inches
- notes: text (nullable)
- is_active: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
