"""
Relational access for RBAC tables.

Every write that may race with another request (seeding, role links,
role assignment) is an upsert, so duplicate keys are absorbed by the
store instead of surfacing as errors. Store errors are not caught here.
"""

from supabase import AsyncClient
from typing import Any, Dict, Iterable, List, Optional, Set


class RBACRepository:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase

    # Users

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = await self.supabase.table("users")\
            .select("id, role, is_super_admin, created_at")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    async def get_earliest_user_with_role(self, role: str) -> Optional[Dict[str, Any]]:
        result = await self.supabase.table("users")\
            .select("id, role, is_super_admin, created_at")\
            .eq("role", role)\
            .order("created_at")\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    async def set_super_admin(self, user_id: str, is_super_admin: bool = True) -> None:
        await self.supabase.table("users")\
            .update({"is_super_admin": is_super_admin})\
            .eq("id", user_id)\
            .execute()

    # Permissions

    async def count_permissions(self) -> int:
        result = await self.supabase.table("permissions")\
            .select("id", count="exact")\
            .limit(1)\
            .execute()
        return result.count or 0

    async def list_permissions(self) -> List[Dict[str, Any]]:
        result = await self.supabase.table("permissions")\
            .select("*")\
            .order("category")\
            .order("name")\
            .execute()
        return result.data or []

    async def list_permission_names(self) -> List[str]:
        result = await self.supabase.table("permissions")\
            .select("name")\
            .execute()
        return [p["name"] for p in result.data or []]

    async def get_permission_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        result = await self.supabase.table("permissions")\
            .select("*")\
            .eq("name", name)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    async def get_permissions_by_names(self, names: List[str]) -> List[Dict[str, Any]]:
        if not names:
            return []
        result = await self.supabase.table("permissions")\
            .select("id, name")\
            .in_("name", names)\
            .execute()
        return result.data or []

    async def upsert_permission(self, permission: Dict[str, Any]) -> None:
        """Insert one catalog permission; an existing name is left untouched"""
        await self.supabase.table("permissions")\
            .upsert(permission, on_conflict="name", ignore_duplicates=True)\
            .execute()

    # Roles

    async def list_roles(self) -> List[Dict[str, Any]]:
        result = await self.supabase.table("roles")\
            .select("*")\
            .order("created_at")\
            .execute()
        return result.data or []

    async def get_role(self, role_id: str) -> Optional[Dict[str, Any]]:
        result = await self.supabase.table("roles")\
            .select("*")\
            .eq("id", role_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    async def get_role_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        result = await self.supabase.table("roles")\
            .select("*")\
            .eq("name", name)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    async def upsert_role(self, role: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a role unless its name exists; returns the stored row either way"""
        await self.supabase.table("roles")\
            .upsert(role, on_conflict="name", ignore_duplicates=True)\
            .execute()
        return await self.get_role_by_name(role["name"])

    async def create_role(self, role: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.supabase.table("roles").insert(role).execute()
        return result.data[0]

    async def update_role(self, role_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        result = await self.supabase.table("roles")\
            .update(fields)\
            .eq("id", role_id)\
            .execute()
        return result.data[0] if result.data else None

    async def delete_role(self, role_id: str) -> bool:
        # role_permissions and user_roles rows go with it (on delete cascade)
        result = await self.supabase.table("roles")\
            .delete()\
            .eq("id", role_id)\
            .execute()
        return len(result.data or []) > 0

    async def get_role_permission_names(self, role_id: str) -> List[str]:
        result = await self.supabase.table("role_permissions")\
            .select("permission_id, permissions(name)")\
            .eq("role_id", role_id)\
            .execute()
        return sorted(
            item["permissions"]["name"]
            for item in result.data or []
            if item.get("permissions") and item["permissions"].get("name")
        )

    async def link_role_permissions(self, role_id: str, permission_ids: Iterable[str]) -> None:
        rows = [{"role_id": role_id, "permission_id": pid} for pid in permission_ids]
        if not rows:
            return
        await self.supabase.table("role_permissions")\
            .upsert(rows, on_conflict="role_id,permission_id", ignore_duplicates=True)\
            .execute()

    async def get_role_permission_ids(self, role_id: str) -> List[str]:
        result = await self.supabase.table("role_permissions")\
            .select("permission_id")\
            .eq("role_id", role_id)\
            .execute()
        return [item["permission_id"] for item in result.data or []]

    async def unlink_role_permissions(self, role_id: str, permission_ids: Iterable[str]) -> None:
        permission_ids = list(permission_ids)
        if not permission_ids:
            return
        await self.supabase.table("role_permissions")\
            .delete()\
            .eq("role_id", role_id)\
            .in_("permission_id", permission_ids)\
            .execute()

    async def list_role_user_ids(self, role_id: str) -> List[str]:
        result = await self.supabase.table("user_roles")\
            .select("user_id")\
            .eq("role_id", role_id)\
            .execute()
        return [r["user_id"] for r in result.data or []]

    # User roles

    async def list_user_roles(self, user_id: str) -> List[Dict[str, Any]]:
        result = await self.supabase.table("user_roles")\
            .select("role_id, roles(id, name, display_name)")\
            .eq("user_id", user_id)\
            .execute()
        return [item["roles"] for item in result.data or [] if item.get("roles")]

    async def add_user_role(self, user_id: str, role_id: str, assigned_by: Optional[str] = None) -> bool:
        """Returns False when the user already held the role"""
        result = await self.supabase.table("user_roles")\
            .upsert(
                {"user_id": user_id, "role_id": role_id, "assigned_by": assigned_by},
                on_conflict="user_id,role_id",
                ignore_duplicates=True
            )\
            .execute()
        return bool(result.data)

    async def remove_user_role(self, user_id: str, role_id: str) -> bool:
        result = await self.supabase.table("user_roles")\
            .delete()\
            .eq("user_id", user_id)\
            .eq("role_id", role_id)\
            .execute()
        return len(result.data or []) > 0

    async def _user_role_ids(self, user_id: str) -> List[str]:
        result = await self.supabase.table("user_roles")\
            .select("role_id")\
            .eq("user_id", user_id)\
            .execute()
        return list({r["role_id"] for r in result.data or []})

    async def get_role_permission_names_for_user(self, user_id: str) -> Set[str]:
        """Union of permission names over every role the user holds"""
        role_ids = await self._user_role_ids(user_id)
        if not role_ids:
            return set()
        result = await self.supabase.table("role_permissions")\
            .select("permission_id, permissions(name)")\
            .in_("role_id", role_ids)\
            .execute()
        return {
            item["permissions"]["name"]
            for item in result.data or []
            if item.get("permissions") and item["permissions"].get("name")
        }

    async def user_has_role_permission(self, user_id: str, permission_id: str) -> bool:
        role_ids = await self._user_role_ids(user_id)
        if not role_ids:
            return False
        result = await self.supabase.table("role_permissions")\
            .select("role_id")\
            .in_("role_id", role_ids)\
            .eq("permission_id", permission_id)\
            .limit(1)\
            .execute()
        return bool(result.data)

    # User permission overrides

    async def list_overrides(self, user_id: str) -> List[Dict[str, Any]]:
        result = await self.supabase.table("user_permissions")\
            .select("permission_id, granted, assigned_by, created_at, permissions(name)")\
            .eq("user_id", user_id)\
            .execute()
        overrides = []
        for item in result.data or []:
            if not item.get("permissions"):
                continue
            overrides.append({
                "permission_id": item["permission_id"],
                "permission_name": item["permissions"]["name"],
                "granted": item["granted"],
                "assigned_by": item.get("assigned_by"),
                "created_at": item.get("created_at"),
            })
        return overrides

    async def get_override(self, user_id: str, permission_id: str) -> Optional[Dict[str, Any]]:
        result = await self.supabase.table("user_permissions")\
            .select("permission_id, granted, assigned_by, created_at")\
            .eq("user_id", user_id)\
            .eq("permission_id", permission_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    async def upsert_override(
        self,
        user_id: str,
        permission_id: str,
        granted: bool,
        assigned_by: Optional[str] = None
    ) -> None:
        """Create the override or replace the existing one for (user, permission)"""
        await self.supabase.table("user_permissions")\
            .upsert(
                {
                    "user_id": user_id,
                    "permission_id": permission_id,
                    "granted": granted,
                    "assigned_by": assigned_by,
                },
                on_conflict="user_id,permission_id"
            )\
            .execute()

    async def delete_override(self, user_id: str, permission_id: str) -> bool:
        result = await self.supabase.table("user_permissions")\
            .delete()\
            .eq("user_id", user_id)\
            .eq("permission_id", permission_id)\
            .execute()
        return len(result.data or []) > 0
