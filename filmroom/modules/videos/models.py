# Supabase tables: videos, video_markers
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

videos
- id: uuid (primary key)
- game_id: uuid (foreign key to games.id, not null)
- name: text (not null) - original file name, renameable
- file_path: text (nullable) - storage key, or s3://bucket/key when film lives in S3
- url: text (nullable)
- mime_type: text (nullable)
- file_size: bigint (nullable)
- camera_order: integer (not null, default: 1) - 1-based angle order within the game
- camera_label: text (nullable) - e.g. "Sideline", "End zone"
- uploaded_by: uuid (foreign key to auth.users.id, nullable)
- created_at: timestamp (default: now())

video_markers
- id: uuid (primary key)
- video_id: uuid (foreign key to videos.id, not null)
- timestamp_seconds: numeric (not null)
- marker_type: text (not null, default: 'custom') - values: play, quarter_start, quarter_end, halftime, timeout, big_play, turnover, custom
- label: text (nullable)
- created_by: uuid (nullable)
- created_at: timestamp (default: now())
"""
