"""
Role and override administration.

Every mutation clears the permission cache of each affected user before
returning, so the next resolution reads the store.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from admin_rbac.core.exceptions import NotFoundError, RBACValidationError
from admin_rbac.modules.rbac.repository import RBACRepository
from admin_rbac.modules.rbac.resolver import PermissionResolver
from admin_rbac.modules.rbac.schemas import (
    PermissionResponse, RoleCreate, RoleUpdate, RoleWithPermissionsResponse
)

logger = logging.getLogger(__name__)


class RBACService:
    def __init__(self, repository: RBACRepository, resolver: PermissionResolver):
        self.repository = repository
        self.resolver = resolver

    # Catalog

    async def list_permissions_by_category(self) -> Dict[str, List[PermissionResponse]]:
        grouped: Dict[str, List[PermissionResponse]] = {}
        for row in await self.repository.list_permissions():
            grouped.setdefault(row["category"], []).append(PermissionResponse(**row))
        return grouped

    # Roles

    async def list_roles(self) -> List[RoleWithPermissionsResponse]:
        roles = await self.resolver.get_all_roles_with_permissions()
        return [RoleWithPermissionsResponse(**role) for role in roles]

    async def get_role(self, role_id: str) -> RoleWithPermissionsResponse:
        role = await self._require_role(role_id)
        permissions = await self.resolver.get_role_permissions(role_id)
        return RoleWithPermissionsResponse(**role, permissions=permissions)

    async def create_role(self, actor_id: str, role_data: RoleCreate) -> RoleWithPermissionsResponse:
        """Create a custom role; every listed permission name must exist"""
        if await self.repository.get_role_by_name(role_data.name):
            raise RBACValidationError("A role with this name already exists")

        permission_ids = await self._resolve_permission_ids(role_data.permissions)

        role = await self.repository.create_role({
            "name": role_data.name,
            "display_name": role_data.display_name,
            "description": role_data.description,
            "is_system": False,
        })
        await self.repository.link_role_permissions(role["id"], permission_ids)
        logger.info("User %s created role %s", actor_id, role_data.name)

        # A new role has no holders yet, so no cache entry can be stale
        return await self.get_role(role["id"])

    async def update_role(self, actor_id: str, role_id: str, role_data: RoleUpdate) -> RoleWithPermissionsResponse:
        role = await self._require_role(role_id)

        if role_data.permissions is not None and role.get("is_system"):
            raise RBACValidationError("Cannot modify permissions of system roles")

        update_data = {}
        if role_data.display_name:
            update_data["display_name"] = role_data.display_name
        if role_data.description is not None:
            update_data["description"] = role_data.description

        permission_ids = None
        if role_data.permissions is not None:
            permission_ids = await self._resolve_permission_ids(role_data.permissions)

        if update_data:
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            await self.repository.update_role(role_id, update_data)

        if permission_ids is not None:
            holders = await self.repository.list_role_user_ids(role_id)
            try:
                current = set(await self.repository.get_role_permission_ids(role_id))
                wanted = set(permission_ids)
                # New links go in before stale ones are removed
                await self.repository.link_role_permissions(role_id, [p for p in permission_ids if p not in current])
                await self.repository.unlink_role_permissions(role_id, current - wanted)
            finally:
                for user_id in holders:
                    self.resolver.clear_permission_cache(user_id)
            logger.info(
                "User %s replaced permissions of role %s (%d holders invalidated)",
                actor_id, role["name"], len(holders)
            )

        return await self.get_role(role_id)

    async def delete_role(self, actor_id: str, role_id: str) -> None:
        role = await self._require_role(role_id)
        if role.get("is_system"):
            raise RBACValidationError("Cannot delete system roles")
        if await self.repository.list_role_user_ids(role_id):
            raise RBACValidationError("Cannot delete a role that is assigned to users")
        await self.repository.delete_role(role_id)
        logger.info("User %s deleted role %s", actor_id, role["name"])

    # User roles

    async def assign_role(self, actor_id: str, user_id: str, role_id: str) -> None:
        await self._require_modifiable_user(actor_id, user_id, "roles")
        role = await self._require_role(role_id)

        created = await self.repository.add_user_role(user_id, role_id, assigned_by=actor_id)
        self.resolver.clear_permission_cache(user_id)
        if not created:
            raise RBACValidationError("User already has this role")
        logger.info("User %s assigned role %s to user %s", actor_id, role["name"], user_id)

    async def remove_role(self, actor_id: str, user_id: str, role_id: str) -> None:
        await self._require_modifiable_user(actor_id, user_id, "roles")
        role = await self._require_role(role_id)

        removed = await self.repository.remove_user_role(user_id, role_id)
        self.resolver.clear_permission_cache(user_id)
        if not removed:
            raise RBACValidationError("User does not have this role")
        logger.info("User %s removed role %s from user %s", actor_id, role["name"], user_id)

    # Overrides

    async def set_permission_override(self, actor_id: str, user_id: str, permission: str, granted: bool) -> None:
        """Grant or deny one permission for a user, replacing any earlier override for it"""
        await self._require_modifiable_user(actor_id, user_id, "permissions")
        record = await self._require_permission(permission)

        await self.repository.upsert_override(user_id, record["id"], granted, assigned_by=actor_id)
        self.resolver.clear_permission_cache(user_id)
        logger.info(
            "User %s %s permission %s for user %s",
            actor_id, "granted" if granted else "denied", permission, user_id
        )

    async def remove_permission_override(self, actor_id: str, user_id: str, permission: str) -> None:
        await self._require_modifiable_user(actor_id, user_id, "permissions")
        record = await self._require_permission(permission)

        removed = await self.repository.delete_override(user_id, record["id"])
        self.resolver.clear_permission_cache(user_id)
        if not removed:
            raise NotFoundError("Permission override not found")
        logger.info("User %s removed override %s for user %s", actor_id, permission, user_id)

    # Helpers

    async def _require_role(self, role_id: str) -> Dict:
        role = await self.repository.get_role(role_id)
        if not role:
            raise NotFoundError("Role not found")
        return role

    async def _require_permission(self, name: str) -> Dict:
        record = await self.repository.get_permission_by_name(name)
        if not record:
            raise NotFoundError(f"Permission not found: {name}")
        return record

    async def _require_modifiable_user(self, actor_id: Optional[str], user_id: str, what: str) -> Dict:
        if user_id == actor_id:
            raise RBACValidationError(f"Cannot modify your own {what}")
        target = await self.repository.get_user(user_id)
        if not target:
            raise NotFoundError("User not found")
        if target.get("is_super_admin"):
            raise RBACValidationError(f"Cannot modify super admin's {what}")
        return target

    async def _resolve_permission_ids(self, names: List[str]) -> List[str]:
        unique_names = list(dict.fromkeys(names))
        records = await self.repository.get_permissions_by_names(unique_names)
        found = {r["name"]: r["id"] for r in records}
        unknown = [n for n in unique_names if n not in found]
        if unknown:
            raise NotFoundError(f"Unknown permissions: {', '.join(unknown)}")
        return [found[n] for n in unique_names]
