# Supabase Auth + profiles.role
# This module uses Supabase's built-in authentication system.
# Roles live on the profiles table (see modules/users/models.py).

"""
Supabase Auth provides:
- auth.sign_up() - Self-service registration (may require email confirmation)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the current user from a JWT
- auth.sign_out() - Logout users
- auth.admin.create_user() / delete_user() - Service-role only, bypasses
  email confirmation

Registration metadata (username, name) is stored in user_metadata so that a
database trigger can create the matching profiles row.

Authorization rules:
- is_admin: profiles.role == 'admin' for the current identity
- can_edit(username): current identity's username == username, or is_admin
Both are false when no identity can be resolved.
"""
