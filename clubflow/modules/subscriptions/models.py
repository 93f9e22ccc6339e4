# Supabase tables: subscription_plans, club_subscriptions, subscription_usage, feature_access_log
# This file documents the expected database schema

"""
Expected Supabase table structure:

subscription_plans:
- id: serial (primary key)
- name: varchar(100), plan_type: varchar(50) - free | starter | professional | enterprise (unique)
- price_monthly, price_yearly: numeric(10,2)
- member_limit: integer (nullable, null means unlimited)
- features: jsonb (feature name -> boolean)
- is_active: boolean (default: true), sort_order: integer
- created_at / updated_at

club_subscriptions:
- id: serial (primary key)
- club_id: integer (references clubs.id, not null)
- plan_id: integer (references subscription_plans.id, not null)
- plan_type: varchar(50) (not null)
- status: active | inactive | cancelled | expired | trialing (default: 'active')
- billing_interval: monthly | yearly (default: 'monthly')
- current_period_start, current_period_end: timestamptz (not null)
- trial_end, canceled_at: timestamptz (nullable)
- metadata: jsonb (nullable)
- created_at / updated_at

subscription_usage:
- id, club_id, subscription_id
- member_count, team_count, facility_count, messages_sent, emails_sent: integer
- period_start, period_end: timestamptz
- created_at

feature_access_log:
- id, club_id, feature_name, user_id, accessed_at, metadata jsonb ({result, reason})

A club without a subscription row, or whose period has ended, is on the free plan.
A cancelled subscription stays in force until current_period_end.
"""
