# Supabase tables: clubs, club_memberships, activity_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

clubs:
- id: serial (primary key)
- name: text (not null)
- short_name: text (nullable)
- description: text (nullable)
- address, phone, email, website: text (nullable)
- logo_url: text (nullable)
- founded_year: integer (nullable)
- member_count: integer (default: 0)
- primary_color: text (default: '#3b82f6')
- secondary_color: text (default: '#64748b')
- accent_color: text (default: '#10b981')
- settings: jsonb (default: {})
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

club_memberships:
- id: serial (primary key)
- user_id: uuid (references user_profiles.id)
- club_id: integer (references clubs.id, on delete cascade)
- role_id: integer (references roles.id)
- status: text - active | inactive | suspended ("inactive" = join request awaiting approval)
- joined_at: timestamp (default: now())
- created_at, updated_at: timestamp
- unique (user_id, club_id)

activity_logs:
- id: serial (primary key)
- club_id: integer (references clubs.id)
- user_id: uuid (actor)
- action: text - club_updated | membership_requested | membership_approved |
  membership_rejected | role_changed | membership_status_changed |
  membership_removed | user_invited | invitation_accepted | subscription_changed | ...
- target_user_id: uuid (nullable)
- target_resource: text (nullable)
- target_resource_id: integer (nullable)
- description: text
- metadata: jsonb
- ip_address: text (nullable)
- user_agent: text (nullable)
- created_at: timestamp (default: now())
"""
