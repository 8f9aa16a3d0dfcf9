# Supabase Auth
# Sessions, sign-up and password handling live entirely in Supabase Auth.
# This API only validates bearer tokens issued by it.

"""
Tables read by this module:

auth.users (managed by Supabase):
- id: uuid
- email: text
- app_metadata: jsonb - {"type": "platform_admin"} marks back-office staff

profiles:
- id: uuid (primary key, same as auth.users.id)
- email: text
- full_name: text (nullable)
- is_platform_admin: boolean (default: false)
- last_active_at: timestamp (nullable)
- created_at: timestamp (default: now())
"""
