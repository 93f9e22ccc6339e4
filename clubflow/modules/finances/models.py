# Supabase tables: finances, member_fees, training_fees
# This file documents the expected database schema

"""
Expected Supabase table structure:

finances:
- id: serial (primary key)
- club_id: integer (references clubs.id, not null)
- member_id: integer (references members.id, nullable)
- player_id: integer (references players.id, nullable)
- team_id: integer (references teams.id, nullable)
- type: varchar(20) - income | expense (not null)
- category: varchar(100) (not null)
- subcategory: varchar(100) (nullable)
- amount: numeric(10,2) (not null)
- description: text (not null)
- date: date (not null)
- due_date: date (nullable)
- reference: varchar(255) (nullable)
- payment_method: varchar(50) (nullable)
- status: varchar(20) - pending | paid | overdue | cancelled (default: 'pending')
- priority: varchar(20) - low | normal | high | urgent (default: 'normal')
- recurring: boolean (default: false)
- recurring_interval: varchar(20) - monthly | quarterly | yearly (nullable)
- next_due_date: date (nullable)
- tags: jsonb (nullable)
- notes: text (nullable)
- is_active: boolean (default: true)
- created_at / updated_at: timestamp (default: now())

member_fees:
- id, club_id, member_id (not null)
- fee_type: varchar(50) - membership | training | registration | equipment
- amount: numeric(10,2), period: monthly | quarterly | yearly | one-time
- start_date (not null), end_date, status: active | suspended | cancelled
- last_payment, next_payment, total_paid, total_owed, notes, is_active
- created_at / updated_at

training_fees:
- id, club_id, name, description
- fee_type: varchar(50) - training | coaching | camp | equipment
- amount, period, start_date, end_date
- target_type: team | player | both, team_ids jsonb, player_ids jsonb
- status, auto_generate, last_payment, next_payment, total_paid, total_owed,
  notes, is_active, created_at / updated_at

A scheduler pass moves pending finances whose due_date has passed to 'overdue'.
"""
