"""Pytest configuration and fixtures for admin_rbac tests."""

import asyncio
import itertools
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional, Set

import pytest
from fastapi.testclient import TestClient

from admin_rbac.config.settings import Settings
from admin_rbac.core.cache import PermissionCache
from admin_rbac.main import create_app
from admin_rbac.modules.rbac.resolver import PermissionResolver
from admin_rbac.modules.rbac.seeder import RBACSeeder


class StoreUnavailable(Exception):
    """Raised by the in-memory store for methods listed in `failing`."""


class InMemoryRBACRepository:
    """
    In-memory stand-in for RBACRepository.

    Same async method signatures. Honours the unique constraints
    (permission name, role name, role/permission pair, user/role pair,
    user/permission override) and the cascades of the relational schema.
    """

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.permissions: Dict[str, Dict[str, Any]] = {}
        self.roles: Dict[str, Dict[str, Any]] = {}
        self.role_permissions: Set[tuple] = set()
        self.user_roles: Dict[tuple, Optional[str]] = {}
        self.overrides: Dict[tuple, Dict[str, Any]] = {}
        self.calls: Counter = Counter()
        self.failing: Set[str] = set()
        self._ids = itertools.count(1)
        self._epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _record(self, name: str) -> None:
        self.calls[name] += 1
        if name in self.failing:
            raise StoreUnavailable(f"{name} failed")

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _now(self) -> datetime:
        return self._epoch + timedelta(seconds=next(self._ids))

    # Test helpers (synchronous)

    def add_user(self, user_id: str, role: str = "user", is_super_admin: bool = False,
                 created_at: Optional[datetime] = None) -> Dict[str, Any]:
        user = {
            "id": user_id,
            "role": role,
            "is_super_admin": is_super_admin,
            "created_at": created_at or self._now(),
        }
        self.users[user_id] = user
        return user

    def delete_user(self, user_id: str) -> None:
        self.users.pop(user_id, None)
        self.user_roles = {k: v for k, v in self.user_roles.items() if k[0] != user_id}
        self.overrides = {k: v for k, v in self.overrides.items() if k[0] != user_id}

    def role_id(self, name: str) -> str:
        return next(r["id"] for r in self.roles.values() if r["name"] == name)

    def permission_id(self, name: str) -> str:
        return next(p["id"] for p in self.permissions.values() if p["name"] == name)

    def grant_role(self, user_id: str, role_name: str) -> None:
        self.user_roles[(user_id, self.role_id(role_name))] = None

    def put_override(self, user_id: str, permission_name: str, granted: bool) -> None:
        self.overrides[(user_id, self.permission_id(permission_name))] = {
            "granted": granted, "assigned_by": None, "created_at": self._now()
        }

    def put_role(self, name: str, permission_names: Iterable[str], is_system: bool = False) -> str:
        for perm_name in permission_names:
            if not any(p["name"] == perm_name for p in self.permissions.values()):
                pid = self._next_id("perm")
                resource, _, action = perm_name.partition(".")
                self.permissions[pid] = {
                    "id": pid, "name": perm_name, "display_name": perm_name,
                    "description": None, "resource": resource, "action": action,
                    "category": resource.title(), "is_sensitive": False,
                }
        rid = self._next_id("role")
        now = self._now()
        self.roles[rid] = {
            "id": rid, "name": name, "display_name": name.title(), "description": None,
            "is_system": is_system, "created_at": now, "updated_at": now,
        }
        for perm_name in permission_names:
            self.role_permissions.add((rid, self.permission_id(perm_name)))
        return rid

    def _permission_name(self, permission_id: str) -> Optional[str]:
        perm = self.permissions.get(permission_id)
        return perm["name"] if perm else None

    # Users

    async def get_user(self, user_id):
        self._record("get_user")
        user = self.users.get(user_id)
        return dict(user) if user else None

    async def get_earliest_user_with_role(self, role):
        self._record("get_earliest_user_with_role")
        candidates = [u for u in self.users.values() if u["role"] == role]
        if not candidates:
            return None
        return dict(min(candidates, key=lambda u: u["created_at"]))

    async def set_super_admin(self, user_id, is_super_admin=True):
        self._record("set_super_admin")
        if user_id in self.users:
            self.users[user_id]["is_super_admin"] = is_super_admin

    # Permissions

    async def count_permissions(self):
        self._record("count_permissions")
        return len(self.permissions)

    async def list_permissions(self):
        self._record("list_permissions")
        return sorted((dict(p) for p in self.permissions.values()), key=lambda p: (p["category"], p["name"]))

    async def list_permission_names(self):
        self._record("list_permission_names")
        return [p["name"] for p in self.permissions.values()]

    async def get_permission_by_name(self, name):
        self._record("get_permission_by_name")
        for perm in self.permissions.values():
            if perm["name"] == name:
                return dict(perm)
        return None

    async def get_permissions_by_names(self, names):
        self._record("get_permissions_by_names")
        wanted = set(names)
        return [{"id": p["id"], "name": p["name"]} for p in self.permissions.values() if p["name"] in wanted]

    async def upsert_permission(self, permission):
        self._record("upsert_permission")
        if any(p["name"] == permission["name"] for p in self.permissions.values()):
            return
        pid = self._next_id("perm")
        self.permissions[pid] = {"id": pid, **permission}

    # Roles

    async def list_roles(self):
        self._record("list_roles")
        return sorted((dict(r) for r in self.roles.values()), key=lambda r: r["created_at"])

    async def get_role(self, role_id):
        self._record("get_role")
        role = self.roles.get(role_id)
        return dict(role) if role else None

    async def get_role_by_name(self, name):
        self._record("get_role_by_name")
        for role in self.roles.values():
            if role["name"] == name:
                return dict(role)
        return None

    async def upsert_role(self, role):
        self._record("upsert_role")
        existing = await self.get_role_by_name(role["name"])
        if existing:
            return existing
        return await self.create_role(role)

    async def create_role(self, role):
        self._record("create_role")
        if any(r["name"] == role["name"] for r in self.roles.values()):
            raise StoreUnavailable("duplicate key value violates unique constraint roles_name_key")
        rid = self._next_id("role")
        now = self._now()
        self.roles[rid] = {"id": rid, "description": None, "is_system": False,
                           "created_at": now, "updated_at": now, **role}
        return dict(self.roles[rid])

    async def update_role(self, role_id, fields):
        self._record("update_role")
        if role_id not in self.roles:
            return None
        self.roles[role_id].update(fields)
        return dict(self.roles[role_id])

    async def delete_role(self, role_id):
        self._record("delete_role")
        if self.roles.pop(role_id, None) is None:
            return False
        self.role_permissions = {rp for rp in self.role_permissions if rp[0] != role_id}
        self.user_roles = {k: v for k, v in self.user_roles.items() if k[1] != role_id}
        return True

    async def get_role_permission_names(self, role_id):
        self._record("get_role_permission_names")
        return sorted(self._permission_name(pid) for rid, pid in self.role_permissions if rid == role_id)

    async def link_role_permissions(self, role_id, permission_ids):
        self._record("link_role_permissions")
        for pid in permission_ids:
            self.role_permissions.add((role_id, pid))

    async def get_role_permission_ids(self, role_id):
        self._record("get_role_permission_ids")
        return [pid for rid, pid in self.role_permissions if rid == role_id]

    async def unlink_role_permissions(self, role_id, permission_ids):
        self._record("unlink_role_permissions")
        stale = set(permission_ids)
        self.role_permissions = {rp for rp in self.role_permissions if not (rp[0] == role_id and rp[1] in stale)}

    async def list_role_user_ids(self, role_id):
        self._record("list_role_user_ids")
        return [uid for uid, rid in self.user_roles if rid == role_id]

    # User roles

    async def list_user_roles(self, user_id):
        self._record("list_user_roles")
        return [
            {"id": rid, "name": self.roles[rid]["name"], "display_name": self.roles[rid]["display_name"]}
            for uid, rid in self.user_roles if uid == user_id and rid in self.roles
        ]

    async def add_user_role(self, user_id, role_id, assigned_by=None):
        self._record("add_user_role")
        if (user_id, role_id) in self.user_roles:
            return False
        self.user_roles[(user_id, role_id)] = assigned_by
        return True

    async def remove_user_role(self, user_id, role_id):
        self._record("remove_user_role")
        return self.user_roles.pop((user_id, role_id), "missing") != "missing"

    async def get_role_permission_names_for_user(self, user_id):
        self._record("get_role_permission_names_for_user")
        role_ids = {rid for uid, rid in self.user_roles if uid == user_id}
        return {self._permission_name(pid) for rid, pid in self.role_permissions if rid in role_ids}

    async def user_has_role_permission(self, user_id, permission_id):
        self._record("user_has_role_permission")
        role_ids = {rid for uid, rid in self.user_roles if uid == user_id}
        return any(rid in role_ids and pid == permission_id for rid, pid in self.role_permissions)

    # Overrides

    async def list_overrides(self, user_id):
        self._record("list_overrides")
        return [
            {
                "permission_id": pid,
                "permission_name": self._permission_name(pid),
                "granted": row["granted"],
                "assigned_by": row["assigned_by"],
                "created_at": row["created_at"],
            }
            for (uid, pid), row in self.overrides.items() if uid == user_id
        ]

    async def get_override(self, user_id, permission_id):
        self._record("get_override")
        row = self.overrides.get((user_id, permission_id))
        return {"permission_id": permission_id, **row} if row else None

    async def upsert_override(self, user_id, permission_id, granted, assigned_by=None):
        self._record("upsert_override")
        self.overrides[(user_id, permission_id)] = {
            "granted": granted, "assigned_by": assigned_by, "created_at": self._now()
        }

    async def delete_override(self, user_id, permission_id):
        self._record("delete_override")
        return self.overrides.pop((user_id, permission_id), None) is not None


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TokenIdentityProvider:
    """The bearer token is the user id."""

    async def get_user_id(self, token: Optional[str]) -> Optional[str]:
        return token or None


@pytest.fixture
def repo():
    return InMemoryRBACRepository()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return PermissionCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def resolver(repo, cache):
    return PermissionResolver(repo, cache)


@pytest.fixture
def seeder(repo, resolver):
    return RBACSeeder(repo, resolver)


@pytest.fixture
def seeded_repo(repo):
    """Catalog and system roles loaded, with one account per system role."""
    repo.add_user("admin-1", role="admin")
    repo.add_user("admin-2", role="admin")
    # Private loop so the current event loop used by async tests is left alone
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(RBACSeeder(repo).seed())
    finally:
        loop.close()
    for user_id, role_name in [
        ("manager-1", "manager"),
        ("rep-1", "sales_rep"),
        ("editor-1", "content_editor"),
        ("specialist-1", "product_specialist"),
    ]:
        repo.add_user(user_id)
        repo.grant_role(user_id, role_name)
    repo.add_user("nobody-1")
    return repo


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        supabase_url="",
        supabase_key="",
        environment="test",
        rate_limit="1000/minute",
    )


@pytest.fixture
def client(seeded_repo, cache, test_settings):
    app = create_app(
        repository=seeded_repo,
        identity_provider=TokenIdentityProvider(),
        app_settings=test_settings,
        cache=cache,
    )
    with TestClient(app) as test_client:
        yield test_client
