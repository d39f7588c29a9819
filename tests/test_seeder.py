import asyncio
import logging

import pytest

from admin_rbac.config.permissions_config import SYSTEM_ROLES, get_all_permissions
from admin_rbac.modules.rbac.seeder import RBACSeeder


def snapshot(repo):
    return (
        len(repo.permissions),
        len(repo.roles),
        len(repo.role_permissions),
        {uid: u["is_super_admin"] for uid, u in repo.users.items()},
    )


class TestSeed:
    @pytest.mark.asyncio
    async def test_full_seed(self, repo, seeder):
        summary = await seeder.seed()
        assert summary.permissions == len(get_all_permissions())
        assert summary.roles == len(SYSTEM_ROLES)
        assert len(repo.permissions) == len(get_all_permissions())
        assert {r["name"] for r in repo.roles.values()} == {r["name"] for r in SYSTEM_ROLES}
        assert all(r["is_system"] for r in repo.roles.values())

    @pytest.mark.asyncio
    async def test_role_links_match_definitions(self, repo, seeder):
        await seeder.seed()
        for role in SYSTEM_ROLES:
            linked = await repo.get_role_permission_names(repo.role_id(role["name"]))
            assert linked == sorted(role["permissions"])

    @pytest.mark.asyncio
    async def test_seeding_twice_is_idempotent(self, repo, seeder):
        repo.add_user("admin-1", role="admin")
        await seeder.seed()
        first = snapshot(repo)
        await seeder.seed()
        assert snapshot(repo) == first

    @pytest.mark.asyncio
    async def test_existing_rows_left_untouched(self, repo, seeder):
        await repo.upsert_permission({
            "name": "orders.view", "display_name": "Custom", "description": None,
            "resource": "orders", "action": "view", "category": "Orders", "is_sensitive": False,
        })
        await seeder.seed()
        assert (await repo.get_permission_by_name("orders.view"))["display_name"] == "Custom"

    @pytest.mark.asyncio
    async def test_unknown_role_permissions_skipped(self, repo, caplog):
        seeder = RBACSeeder(
            repo,
            permissions=[p for p in get_all_permissions() if p["name"] == "orders.view"],
            roles=[{"name": "clerk", "display_name": "Clerk", "description": None,
                    "permissions": ["orders.view", "orders.teleport"]}],
        )
        with caplog.at_level(logging.WARNING):
            await seeder.seed()
        assert await repo.get_role_permission_names(repo.role_id("clerk")) == ["orders.view"]
        assert "orders.teleport" in caplog.text


class TestFirstAdminPromotion:
    @pytest.mark.asyncio
    async def test_earliest_admin_promoted(self, repo, seeder):
        repo.add_user("user-1")
        repo.add_user("admin-old", role="admin")
        repo.add_user("admin-new", role="admin")
        promoted = await seeder.promote_first_admin()
        assert promoted == "admin-old"
        assert repo.users["admin-old"]["is_super_admin"] is True
        assert repo.users["admin-new"]["is_super_admin"] is False

    @pytest.mark.asyncio
    async def test_no_admin_no_promotion(self, repo, seeder):
        repo.add_user("user-1")
        assert await seeder.promote_first_admin() is None
        assert repo.calls["set_super_admin"] == 0

    @pytest.mark.asyncio
    async def test_already_super_admin(self, repo, seeder):
        repo.add_user("admin-1", role="admin", is_super_admin=True)
        assert await seeder.promote_first_admin() is None
        assert repo.calls["set_super_admin"] == 0

    @pytest.mark.asyncio
    async def test_promotion_clears_cached_permissions(self, repo, seeder, resolver):
        await seeder.seed_permissions()
        repo.add_user("admin-1", role="admin")
        assert await resolver.get_effective_permissions("admin-1") == frozenset()
        await seeder.promote_first_admin()
        assert await resolver.has_permission("admin-1", "team.manage_roles")


class TestAutoSeed:
    @pytest.mark.asyncio
    async def test_empty_catalog_seeds_once(self, repo, seeder):
        assert await seeder.auto_seed_if_needed() is True
        assert seeder.done
        assert await seeder.auto_seed_if_needed() is False
        assert repo.calls["count_permissions"] == 1

    @pytest.mark.asyncio
    async def test_repeated_calls_yield_one_row_each(self, repo, seeder):
        for _ in range(5):
            await seeder.auto_seed_if_needed()
        names = [p["name"] for p in repo.permissions.values()]
        assert len(names) == len(set(names)) == len(get_all_permissions())
        assert len(repo.roles) == len(SYSTEM_ROLES)

    @pytest.mark.asyncio
    async def test_concurrent_first_requests_seed_once(self, repo):
        repo.add_user("admin-1", role="admin")
        results = await asyncio.gather(
            RBACSeeder(repo).auto_seed_if_needed(),
            RBACSeeder(repo).auto_seed_if_needed(),
        )
        assert True in results
        names = [p["name"] for p in repo.permissions.values()]
        assert len(names) == len(set(names)) == len(get_all_permissions())
        role_names = [r["name"] for r in repo.roles.values()]
        assert len(role_names) == len(set(role_names)) == len(SYSTEM_ROLES)
        assert repo.users["admin-1"]["is_super_admin"] is True

    @pytest.mark.asyncio
    async def test_separate_processes_do_not_reseed(self, repo):
        await RBACSeeder(repo).auto_seed_if_needed()
        upserts = repo.calls["upsert_permission"]
        assert await RBACSeeder(repo).auto_seed_if_needed() is False
        assert repo.calls["upsert_permission"] == upserts

    @pytest.mark.asyncio
    async def test_non_empty_catalog_still_promotes(self, repo, seeder):
        await RBACSeeder(repo).seed()
        repo.add_user("admin-1", role="admin")
        assert await seeder.auto_seed_if_needed() is False
        assert repo.users["admin-1"]["is_super_admin"] is True
        assert seeder.done

    @pytest.mark.asyncio
    async def test_failure_is_logged_and_retried(self, repo, seeder, caplog):
        repo.failing.add("upsert_permission")
        with caplog.at_level(logging.ERROR):
            assert await seeder.auto_seed_if_needed() is False
        assert not seeder.done
        assert "Automatic RBAC seeding failed" in caplog.text

        repo.failing.clear()
        assert await seeder.auto_seed_if_needed() is True
        assert seeder.done
        assert len(repo.roles) == len(SYSTEM_ROLES)
        assert len(repo.permissions) == len(get_all_permissions())
