# Supabase table: email_invitations
# This file documents the expected database schema

"""
Expected Supabase table structure:

email_invitations:
- id: serial (primary key)
- club_id: integer (references clubs.id, on delete cascade)
- invited_by: uuid (references user_profiles.id)
- email: text (not null, stored lower-case)
- role_id: integer (references roles.id)
- personal_message: text (nullable)
- token: text (unique, 64 hex chars)
- status: text - pending | accepted | expired
- expires_at: timestamp (created_at + invitation_ttl_days)
- accepted_at: timestamp (nullable)
- created_at: timestamp (default: now())
"""
