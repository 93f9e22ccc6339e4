# Supabase table: facilities
# This file documents the expected database schema

"""
Expected Supabase table structure:

facilities:
- id: serial (primary key)
- club_id: integer (references clubs.id, not null)
- name: varchar(200) (not null)
- type: varchar(50) - field | hall | court | pool | room | other (nullable)
- description: text (nullable)
- capacity: integer (nullable)
- location: text (nullable)
- max_concurrent_bookings: integer (default: 1)
- status: varchar(20) - available | maintenance | unavailable (default: 'available')
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
