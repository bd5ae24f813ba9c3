# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- name: text (nullable) - from sign-up metadata
- email: text (unique, not null) - synced from auth.users
- avatar: text (nullable) - avatar URL
- role: text (not null, default: 'user') - 'admin' | 'user'
- status: text (not null, default: 'activo') - 'activo' | 'restringido' | 'vacaciones'
- created_at: timestamp (default: now())

Expected RPC:
- handle_delete_user(user_id uuid) - security definer function that deletes
  the row from auth.users

Note: Authentication data (password, tokens) is stored in auth.users table
managed by Supabase Auth. Email uniqueness is enforced there.
"""
