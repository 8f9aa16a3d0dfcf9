# Supabase tables: play_instances, player_participation
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

play_instances
- id: uuid (primary key)
- team_id: uuid (foreign key to teams.id, not null)
- video_id: uuid (foreign key to videos.id, not null)
- camera_id: uuid (nullable)
- drive_id: uuid (foreign key to drives.id, nullable)
- timestamp_start: numeric (not null) - seconds into the video
- timestamp_end: numeric (nullable)
- is_opponent_play: boolean (default: false) - true when the opponent has the ball
- one nullable column per field of PlayFields in schemas.py (identification, situation,
  result, attribution, offensive line, defensive tracking, special teams, scoring,
  penalties); array columns for tackler_ids, missed_tackle_ids, pressure_player_ids, tags
- tag_source: text (default: 'manual') - values: manual, ai, ai_assisted
- ai_confidence: numeric (nullable) - 0..1, check constraint
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

player_participation
- id: uuid (primary key)
- play_instance_id: uuid (foreign key to play_instances.id, not null)
- player_id: uuid (foreign key to players.id, not null)
- participation_type: text (not null) - e.g. ball_carrier, tackle, pressure, tfl,
  forced_fumble, interception, fumble_recovery, pass_breakup
- result: text (nullable) - e.g. sack, hurry
- position_played: text (nullable)
- assignment: text (nullable)
- assignment_grade: integer (nullable)
- notes: text (nullable)
"""
