"""
Bootstrap seeding of the permission catalog and system roles.

auto_seed_if_needed() is called on every protected request. It does real
work at most once per process: after the first successful run an
in-memory flag short-circuits it. Across restarts a non-empty catalog
means only the first-admin promotion is rechecked.

All writes are upserts that skip existing rows, so two concurrent first
requests may both seed without conflict.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from admin_rbac.config.permissions_config import get_all_permissions, get_system_roles
from admin_rbac.core.exceptions import SeedingTransientError
from admin_rbac.modules.rbac.repository import RBACRepository
from admin_rbac.modules.rbac.resolver import PermissionResolver

logger = logging.getLogger(__name__)


@dataclass
class SeedSummary:
    permissions: int = 0
    roles: int = 0
    promoted_user_id: Optional[str] = None


class RBACSeeder:
    def __init__(
        self,
        repository: RBACRepository,
        resolver: Optional[PermissionResolver] = None,
        admin_role_name: str = "admin",
        permissions: Optional[List[Dict]] = None,
        roles: Optional[List[Dict]] = None
    ):
        self.repository = repository
        self.resolver = resolver
        self.admin_role_name = admin_role_name
        self.permissions = permissions if permissions is not None else get_all_permissions()
        self.roles = roles if roles is not None else get_system_roles()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    async def auto_seed_if_needed(self) -> bool:
        """Seed on first use. Never raises; returns True when a full seed ran."""
        if self._done:
            return False
        try:
            if await self.repository.count_permissions() > 0:
                # Catalog predates the super-admin flag on upgraded installs
                await self.promote_first_admin()
                self._done = True
                return False

            logger.info("Permission catalog is empty, seeding RBAC data")
            await self.seed()
            self._done = True
            return True
        except Exception as e:
            error = SeedingTransientError("Automatic RBAC seeding failed, will retry on next request", cause=e)
            logger.exception("%s: %s", error.message, e)
            return False

    async def seed(self) -> SeedSummary:
        """Full idempotent seed; permissions must exist before role links are made"""
        summary = SeedSummary()
        summary.permissions = await self.seed_permissions()
        summary.roles = await self.seed_roles()
        summary.promoted_user_id = await self.promote_first_admin()
        logger.info(
            "RBAC seeding finished: %d permissions, %d roles",
            summary.permissions, summary.roles
        )
        return summary

    async def seed_permissions(self) -> int:
        logger.info("Seeding permissions...")
        for permission in self.permissions:
            await self.repository.upsert_permission(permission)
            logger.debug("Seeded permission %s", permission["name"])
        return len(self.permissions)

    async def seed_roles(self) -> int:
        logger.info("Seeding roles...")
        for role in self.roles:
            stored = await self.repository.upsert_role({
                "name": role["name"],
                "display_name": role["display_name"],
                "description": role.get("description"),
                "is_system": True,
            })
            await self._link_role_permissions(stored, role["permissions"])
        return len(self.roles)

    async def promote_first_admin(self) -> Optional[str]:
        """Mark the earliest legacy admin account as super admin if it is not one yet"""
        admin = await self.repository.get_earliest_user_with_role(self.admin_role_name)
        if not admin or admin.get("is_super_admin"):
            return None
        await self.repository.set_super_admin(admin["id"], True)
        if self.resolver is not None:
            self.resolver.clear_permission_cache(admin["id"])
        logger.info("Promoted user %s to super admin", admin["id"])
        return admin["id"]

    async def _link_role_permissions(self, role: Dict, permission_names: List[str]) -> None:
        records = await self.repository.get_permissions_by_names(permission_names)
        found = {r["name"] for r in records}
        skipped = [name for name in permission_names if name not in found]
        if skipped:
            logger.warning(
                "Role %s: skipping %d unknown permissions: %s",
                role["name"], len(skipped), ", ".join(skipped)
            )
        await self.repository.link_role_permissions(role["id"], [r["id"] for r in records])
        logger.debug("Linked %d permissions to role %s", len(records), role["name"])
