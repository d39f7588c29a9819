# Supabase Auth
# This module relies on Supabase's built-in authentication system
# No custom tables are required - Supabase Auth issues and validates the JWTs

"""
Supabase Auth provides:
- auth.get_user(jwt) - Resolve the user behind a bearer token

Only the user id is taken from Supabase Auth. Authorization data
(is_super_admin, legacy role string) lives in the public users table,
documented in admin_rbac/modules/rbac/models.py.
"""
