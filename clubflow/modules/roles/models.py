# Supabase table: roles
# This file documents the expected database schema

"""
Expected Supabase table structure:

roles:
- id: serial (primary key)
- name: text (unique, not null) - member | trainer | club-administrator | obmann
- display_name: text (not null)
- description: text (nullable)
- permissions: jsonb (list of "resource:action" names, see config/permissions_config.py)
- is_active: boolean (default: true)
- sort_order: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Roles are global; club_memberships.role_id points at them. Rows are
maintained by scripts/seed_roles_plans.py.
"""
