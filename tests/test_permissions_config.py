from admin_rbac.config.permissions_config import (
    CATEGORIES,
    PERMISSION_METADATA,
    SYSTEM_ROLES,
    get_all_permission_names,
    get_all_permissions,
    get_permissions_by_category,
    is_sensitive_permission,
)
from admin_rbac.config.route_permissions import API_ROUTE_TABLE, PAGE_ROUTE_TABLE


def test_permission_names_unique():
    names = get_all_permission_names()
    assert len(names) == len(set(names))


def test_dotted_names_split_on_first_dot():
    perm = PERMISSION_METADATA["settings.fraud_checker.edit"]
    assert perm["resource"] == "settings"
    assert perm["action"] == "fraud_checker.edit"
    assert perm["category"] == "Settings"


def test_sensitive_flags():
    assert is_sensitive_permission("products.permanent_delete")
    assert is_sensitive_permission("discounts.view")
    assert is_sensitive_permission("team.manage_roles")
    assert not is_sensitive_permission("orders.view")
    assert not is_sensitive_permission("not.a_permission")


def test_grouping_covers_catalog():
    grouped = get_permissions_by_category()
    assert set(grouped) == set(CATEGORIES)
    assert sum(len(perms) for perms in grouped.values()) == len(get_all_permissions())


def test_route_tables_reference_catalog_only():
    catalog = set(get_all_permission_names())
    assert API_ROUTE_TABLE.permission_names() <= catalog
    assert PAGE_ROUTE_TABLE.permission_names() <= catalog


def test_system_roles_reference_catalog_only():
    catalog = set(get_all_permission_names())
    for role in SYSTEM_ROLES:
        assert set(role["permissions"]) <= catalog, role["name"]


def test_super_admin_role_has_everything():
    roles = {role["name"]: role for role in SYSTEM_ROLES}
    assert set(roles["super_admin"]["permissions"]) == set(get_all_permission_names())


def test_manager_excludes_sensitive_management():
    manager = set(next(r for r in SYSTEM_ROLES if r["name"] == "manager")["permissions"])
    assert "orders.delete" in manager
    assert "team.view" in manager
    assert "team.manage_roles" not in manager
    assert "settings.fraud_checker.edit" not in manager
    assert not any("permanent_delete" in name for name in manager)
