# Supabase Auth
# Users are registered by admins through the users module (auth.sign_up),
# and log in through this module. No custom auth tables are required.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (metadata: name, role)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

Profile data (name, role, status, avatar) lives in the public.profiles table,
see docqa/modules/users/models.py.
"""
