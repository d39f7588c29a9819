"""
Effective permission resolution.

Precedence, highest first:

1. Super admin: the full catalog. Overrides never apply.
2. Per-user override: granted=True adds a permission, granted=False removes it.
3. Role membership: union over every role the user holds.

Unknown users resolve to an empty set. Store errors propagate to the caller.
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from admin_rbac.core.cache import PermissionCache
from admin_rbac.modules.rbac.repository import RBACRepository
from admin_rbac.modules.rbac.schemas import (
    OverrideSummary, PermissionCheckResult, RoleSummary, UserPermissionContext
)

logger = logging.getLogger(__name__)


class PermissionResolver:
    def __init__(self, repository: RBACRepository, cache: Optional[PermissionCache] = None):
        self.repository = repository
        self.cache = cache if cache is not None else PermissionCache()

    async def get_effective_permissions(self, user_id: Optional[str]) -> FrozenSet[str]:
        if not user_id:
            return frozenset()

        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        user = await self.repository.get_user(user_id)
        if not user:
            # Not cached, so a user created later is picked up immediately
            return frozenset()

        if user.get("is_super_admin"):
            names = await self.repository.list_permission_names()
            return self.cache.set(user_id, names)

        permissions = set(await self.repository.get_role_permission_names_for_user(user_id))
        for override in await self.repository.list_overrides(user_id):
            if override["granted"]:
                permissions.add(override["permission_name"])
            else:
                permissions.discard(override["permission_name"])

        return self.cache.set(user_id, permissions)

    async def has_permission(self, user_id: Optional[str], permission: str) -> bool:
        return permission in await self.get_effective_permissions(user_id)

    async def has_any_permission(self, user_id: Optional[str], permissions: Iterable[str]) -> bool:
        effective = await self.get_effective_permissions(user_id)
        return any(p in effective for p in permissions)

    async def has_all_permissions(self, user_id: Optional[str], permissions: Iterable[str]) -> bool:
        effective = await self.get_effective_permissions(user_id)
        return all(p in effective for p in permissions)

    async def check_permission_detailed(self, user_id: Optional[str], permission: str) -> PermissionCheckResult:
        """
        Re-derive why a user does or does not hold a permission.

        Reads the store directly instead of the cache so the reported
        provenance matches the rows as they are now.
        """
        user = await self.repository.get_user(user_id) if user_id else None
        if not user:
            return PermissionCheckResult(allowed=False, reason="no_permission")

        if user.get("is_super_admin"):
            return PermissionCheckResult(allowed=True, reason="super_admin")

        record = await self.repository.get_permission_by_name(permission)
        if not record:
            return PermissionCheckResult(allowed=False, reason="no_permission")

        override = await self.repository.get_override(user_id, record["id"])
        if override is not None:
            if override["granted"]:
                return PermissionCheckResult(allowed=True, reason="user_grant")
            return PermissionCheckResult(allowed=False, reason="user_denial")

        if await self.repository.user_has_role_permission(user_id, record["id"]):
            return PermissionCheckResult(allowed=True, reason="role_permission")

        return PermissionCheckResult(allowed=False, reason="no_permission")

    async def is_super_admin(self, user_id: Optional[str]) -> bool:
        if not user_id:
            return False
        user = await self.repository.get_user(user_id)
        return bool(user and user.get("is_super_admin"))

    async def has_admin_access(self, user_id: Optional[str]) -> bool:
        """Super admins, and anyone holding at least one permission"""
        if await self.is_super_admin(user_id):
            return True
        return len(await self.get_effective_permissions(user_id)) > 0

    async def get_user_permission_context(self, user_id: Optional[str]) -> Optional[UserPermissionContext]:
        if not user_id:
            return None
        user = await self.repository.get_user(user_id)
        if not user:
            return None

        roles = await self.repository.list_user_roles(user_id)
        overrides = await self.repository.list_overrides(user_id)
        effective = await self.get_effective_permissions(user_id)

        return UserPermissionContext(
            user_id=user_id,
            is_super_admin=bool(user.get("is_super_admin")),
            roles=[RoleSummary(**role) for role in roles],
            effective_permissions=sorted(effective),
            overrides=OverrideSummary(
                grants=sorted(o["permission_name"] for o in overrides if o["granted"]),
                denials=sorted(o["permission_name"] for o in overrides if not o["granted"]),
            ),
        )

    def clear_permission_cache(self, user_id: str) -> None:
        self.cache.invalidate(user_id)
        logger.debug("Cleared permission cache for user %s", user_id)

    def clear_all_permission_cache(self) -> None:
        self.cache.clear()
        logger.info("Cleared permission cache for all users")

    async def get_role_permissions(self, role_id: str) -> List[str]:
        return await self.repository.get_role_permission_names(role_id)

    async def get_all_roles_with_permissions(self) -> List[Dict[str, Any]]:
        roles = await self.repository.list_roles()
        result = []
        for role in roles:
            result.append({
                **role,
                "permissions": await self.repository.get_role_permission_names(role["id"]),
            })
        return result
