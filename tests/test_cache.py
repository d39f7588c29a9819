from admin_rbac.core.cache import PermissionCache


def test_get_returns_stored_permissions(cache):
    cache.set("user-1", ["orders.view", "orders.edit"])
    assert cache.get("user-1") == frozenset({"orders.view", "orders.edit"})


def test_miss_for_unknown_key(cache):
    assert cache.get("user-1") is None
    assert "user-1" not in cache


def test_entry_expires_at_ttl(cache, clock):
    cache.set("user-1", {"orders.view"})
    clock.advance(299.9)
    assert cache.get("user-1") == frozenset({"orders.view"})
    clock.advance(0.1)
    assert cache.get("user-1") is None


def test_empty_set_is_cached():
    cache = PermissionCache(ttl_seconds=10, clock=lambda: 0.0)
    cache.set("user-1", [])
    assert cache.get("user-1") == frozenset()


def test_invalidate_removes_only_that_key(cache):
    cache.set("user-1", {"a.view"})
    cache.set("user-2", {"b.view"})
    cache.invalidate("user-1")
    assert cache.get("user-1") is None
    assert cache.get("user-2") == frozenset({"b.view"})


def test_invalidate_unknown_key_is_noop(cache):
    cache.invalidate("missing")
    assert len(cache) == 0


def test_clear(cache):
    cache.set("user-1", {"a.view"})
    cache.set("user-2", {"b.view"})
    cache.clear()
    assert len(cache) == 0


def test_set_returns_frozen_copy(cache):
    source = {"a.view"}
    stored = cache.set("user-1", source)
    source.add("a.edit")
    assert stored == frozenset({"a.view"})
    assert cache.get("user-1") == frozenset({"a.view"})
