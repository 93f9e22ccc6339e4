# Supabase tables: user_profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (unique, not null)
- first_name: text (nullable)
- last_name: text (nullable)
- profile_image_url: text (nullable)
- preferred_language: text (default: 'de')
- is_active: boolean (default: true)
- is_super_admin: boolean (default: false) - mirrors app_metadata.type = "super_user"
- last_login_at: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
