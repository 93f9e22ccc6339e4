# Supabase tables: teams, team_memberships, players, player_team_assignments
# This file documents the expected database schema

"""
Expected Supabase table structure:

teams:
- id: serial (primary key)
- club_id: integer (references clubs.id, not null)
- name: varchar(255) (not null)
- category: varchar(100) (nullable) - youth, adult, senior, ...
- age_group: varchar(50) (nullable) - U17, U15, ...
- gender: varchar(20) (nullable) - male | female | mixed
- description: text (nullable)
- max_members: integer (nullable)
- status: varchar(20) - active | inactive (default: 'active')
- season: varchar(20) (nullable) - e.g. 2025/26
- created_at, updated_at: timestamp

team_memberships (roster members on a team):
- id: serial (primary key)
- team_id: integer (references teams.id)
- member_id: integer (references members.id)
- role: varchar(100) - player | captain | trainer | ... (default: 'player')
- position: varchar(100) (nullable)
- jersey_number: integer (nullable)
- status: varchar(20) (default: 'active')
- joined_at, left_at, created_at, updated_at: timestamp

players (squad players, independent from the member roster):
- id: serial (primary key)
- club_id: integer (references clubs.id)
- first_name, last_name: varchar(100) (not null)
- jersey_number: integer (nullable)
- position: varchar(50) (nullable)
- birth_date: date (nullable)
- phone, email, address, nationality, profile_image_url: text (nullable)
- height, weight: integer (nullable)
- preferred_foot: varchar(10) (nullable) - left | right | both
- status: varchar(20) - active | injured | suspended | inactive
- contract_start, contract_end: date (nullable)
- notes: text (nullable)
- created_at, updated_at: timestamp

player_team_assignments:
- id: serial (primary key)
- player_id: integer (references players.id)
- team_id: integer (references teams.id)
- season: varchar(20) (not null)
- is_active: boolean (default: true)
- joined_at, left_at, created_at, updated_at: timestamp
"""
