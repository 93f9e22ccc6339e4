# Accounts live in Supabase Auth (auth.users); no ClubFlow table of its own.

"""
Supabase Auth calls made by AuthService:
- auth.sign_up(): new account, first/last name kept in user_metadata; a user_profiles row is created alongside
- auth.sign_in_with_password(): login, followed by a club_memberships lookup for the club switcher
- auth.get_user(): bearer token -> user, cached per token for a minute
- auth.sign_out()
- auth.admin.update_user_by_id(): app_metadata.type = "super_user" (service role key only)
"""
