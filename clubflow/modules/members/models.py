# Supabase table: members
# This file documents the expected database schema

"""
Expected Supabase table structure:

members:
- id: serial (primary key)
- club_id: integer (references clubs.id, not null)
- first_name: varchar(100) (not null)
- last_name: varchar(100) (not null)
- email: varchar(255) (nullable)
- phone: varchar(50) (nullable)
- birth_date: date (nullable)
- address: text (nullable)
- membership_number: varchar(50) (nullable, unique per club)
- status: varchar(20) - active | inactive | suspended (default: 'active')
- join_date: date (nullable)
- notes: text (nullable)
- emergency_contact: jsonb (nullable)
- pays_membership_fee: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Only active members count towards the plan's member limit.
"""
