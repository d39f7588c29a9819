from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from admin_rbac.modules.auth.service import AuthService


def make_supabase(get_user):
    supabase = MagicMock()
    supabase.auth.get_user = get_user
    return supabase


@pytest.mark.asyncio
async def test_token_resolves_to_user_id():
    get_user = AsyncMock(return_value=SimpleNamespace(user=SimpleNamespace(id="user-1")))
    service = AuthService(make_supabase(get_user))
    assert await service.get_user_id("token-abc") == "user-1"
    get_user.assert_awaited_once_with(jwt="token-abc")


@pytest.mark.asyncio
async def test_repeated_token_is_cached():
    get_user = AsyncMock(return_value=SimpleNamespace(user=SimpleNamespace(id="user-1")))
    service = AuthService(make_supabase(get_user))
    await service.get_user_id("token-abc")
    await service.get_user_id("token-abc")
    assert get_user.await_count == 1


@pytest.mark.asyncio
async def test_missing_token_is_anonymous():
    get_user = AsyncMock()
    service = AuthService(make_supabase(get_user))
    assert await service.get_user_id(None) is None
    assert await service.get_user_id("") is None
    get_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_rejected_token_is_anonymous():
    get_user = AsyncMock(side_effect=Exception("invalid JWT: token is expired"))
    service = AuthService(make_supabase(get_user))
    assert await service.get_user_id("expired") is None


@pytest.mark.asyncio
async def test_empty_user_response_is_anonymous():
    get_user = AsyncMock(return_value=SimpleNamespace(user=None))
    service = AuthService(make_supabase(get_user))
    assert await service.get_user_id("token") is None
