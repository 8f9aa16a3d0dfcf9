# Supabase tables: teams, team_memberships
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

teams
- id: uuid (primary key)
- name: text (not null)
- level: text (nullable) - e.g. youth, middle_school, jv, varsity
- organization_id: uuid (foreign key to organizations.id, nullable)
- user_id: uuid (foreign key to auth.users.id, not null) - creator; treated as owner
- colors: jsonb (nullable) - {primary, secondary}
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

team_memberships
- id: uuid (primary key)
- team_id: uuid (foreign key to teams.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- role: text (not null) - values: owner, coach, analyst, viewer
- invited_by: uuid (nullable)
- invited_at: timestamp (nullable)
- joined_at: timestamp (nullable)
- is_active: boolean (default: true) - removal is a soft delete
- unique (team_id, user_id)
"""
