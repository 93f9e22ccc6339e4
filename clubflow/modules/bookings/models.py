# Supabase table: bookings
# This file documents the expected database schema

"""
Expected Supabase table structure:

bookings:
- id: serial (primary key)
- club_id: integer (references clubs.id, not null)
- facility_id: integer (references facilities.id, nullable; null means the row is an event)
- team_id: integer (references teams.id, nullable)
- member_id: integer (references members.id, nullable)
- title: varchar(255) (not null)
- description: text (nullable)
- start_time: timestamptz (not null)
- end_time: timestamptz (not null)
- type: varchar(50) - training | match | event | meeting | booking (not null)
- location: varchar(255) (nullable, used by events without a facility)
- is_public: boolean (default: true)
- recurring: boolean (default: false)
- recurring_pattern: varchar(50) - daily | weekly | monthly (nullable)
- recurring_until: date (nullable)
- contact_person: varchar(255) (nullable)
- contact_email: varchar(255) (nullable)
- contact_phone: varchar(50) (nullable)
- participants: jsonb (nullable, a head count or a list of user ids)
- cost: varchar(50) (nullable)
- status: varchar(20) - confirmed | pending | cancelled (default: 'confirmed')
- notes: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Cancelled bookings never count against a facility's max_concurrent_bookings.
"""
