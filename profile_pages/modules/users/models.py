# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id on delete cascade)
- username: text (unique, not null) - public routing key
- name: text (not null) - display name
- bio: text (not null, default '') - newlines preserved
- image: text (nullable) - avatar URL
- role: text (not null, default 'user') - 'user' | 'admin'
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

A trigger on auth.users may insert the profiles row from user_metadata
(username, name) at signup, so application-side inserts tolerate
duplicate-key failures (SQLSTATE 23505).

Note: Authentication data (password, tokens) is stored in auth.users table
managed by Supabase Auth. This table only stores profile information.
"""
