# Supabase tables: users, permissions, roles, role_permissions, user_roles, user_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in repository.py

"""
Expected Supabase table structure:

users (owned by the auth layer; only these columns are read here):
- id: text (primary key)
- email: text (unique, not null)
- role: text (default: 'user') - legacy single role string, 'admin' for admin accounts
- is_super_admin: boolean (not null, default: false)
- created_at: timestamp (default: now())

permissions:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null, unique) - dot-namespaced, e.g. "orders.delete"
- display_name: text (not null)
- description: text (nullable)
- resource: text (not null) - e.g. "orders", "settings"
- action: text (not null) - e.g. "delete", "fraud_checker.edit"
- category: text (not null) - e.g. "Orders"
- is_sensitive: boolean (not null, default: false)
- created_at: timestamp (default: now())

roles:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null, unique) - e.g. "manager", "sales_rep"
- display_name: text (not null)
- description: text (nullable)
- is_system: boolean (not null, default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

role_permissions:
- id: uuid (primary key)
- role_id: uuid (foreign key to roles.id, on delete cascade)
- permission_id: uuid (foreign key to permissions.id, on delete cascade)
- created_at: timestamp (default: now())
- unique constraint on (role_id, permission_id)

user_roles:
- id: uuid (primary key)
- user_id: text (foreign key to users.id, on delete cascade)
- role_id: uuid (foreign key to roles.id, on delete cascade)
- assigned_by: text (foreign key to users.id, on delete set null)
- created_at: timestamp (default: now())
- unique constraint on (user_id, role_id)

user_permissions (per-user overrides):
- id: uuid (primary key)
- user_id: text (foreign key to users.id, on delete cascade)
- permission_id: uuid (foreign key to permissions.id, on delete cascade)
- granted: boolean (not null) - true adds the permission, false removes it
- assigned_by: text (foreign key to users.id, on delete set null)
- created_at: timestamp (default: now())
- unique constraint on (user_id, permission_id)
"""
