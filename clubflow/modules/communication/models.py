# Supabase tables: announcements, notifications, messages, message_recipients
# This file documents the expected database schema

"""
Expected Supabase table structure:

announcements:
- id: serial (primary key)
- club_id: integer (references clubs.id, not null)
- author_id: uuid (references auth.users.id, not null)
- title: varchar(255), content: text, category: varchar(50) (not null)
- priority: varchar(20) - low | normal | high | urgent (default: 'normal')
- target_audience: varchar(50) - all | members | trainers | teams (default: 'all')
- target_team_ids: jsonb (nullable)
- published_at, scheduled_for, expires_at: timestamp (nullable)
- is_pinned: boolean (default: false)
- is_published: boolean (default: false)
- view_count: integer (default: 0)
- tags: jsonb (nullable)
- created_at / updated_at: timestamp (default: now())
- deleted_at: timestamp (nullable, soft delete)

notifications:
- id: serial (primary key)
- club_id, user_id (not null)
- type: varchar(50) - message | announcement | booking | payment | system
- title: varchar(255) (not null), content: text (nullable)
- priority: varchar(20) (default: 'normal')
- status: varchar(20) - unread | read | dismissed (default: 'unread')
- related_entity_type: varchar(50), related_entity_id: integer (nullable)
- action_url: varchar(500), action_text: varchar(100) (nullable)
- read_at, expires_at: timestamp (nullable)
- created_at / updated_at: timestamp (default: now())

messages:
- id: serial (primary key)
- club_id, sender_id (not null)
- subject: varchar(255) (nullable), content: text (not null)
- message_type: varchar(50) - direct | group | reply (default: 'direct')
- priority: varchar(20) (default: 'normal')
- status: varchar(20) - draft | sent (default: 'sent')
- thread_id: integer (nullable, parent message of a reply)
- created_at / updated_at: timestamp (default: now())
- deleted_at: timestamp (nullable, soft delete)

message_recipients:
- id: serial (primary key)
- message_id: integer (references messages.id, not null)
- recipient_type: varchar(20) - user | all (not null)
- recipient_id: varchar (nullable, user id; null for 'all')
- status: varchar(20) - sent | read (default: 'sent')
- read_at, delivered_at: timestamp (nullable)
- created_at / updated_at: timestamp (default: now())

The sender always gets a recipient row so their own read state is tracked.
"""
