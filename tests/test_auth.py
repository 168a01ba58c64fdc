import asyncio
import json

import pytest

from tcrs.core.auth import TokenStore
from tcrs.core.errors import ApiError, AuthenticationError
from tcrs.services.alert_service import STATISTICS_PATH, AlertService
from tcrs.services.auth_service import AuthService


def test_token_store_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "tokens.json"
    store = TokenStore(path)
    assert store.access_token is None

    store.set_tokens("a", "r", {"email": "someone@example.com"})

    reloaded = TokenStore(path)
    assert reloaded.access_token == "a"
    assert reloaded.refresh_token == "r"
    assert reloaded.user == {"email": "someone@example.com"}


def test_token_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text("{not json", encoding="utf-8")

    store = TokenStore(path)

    assert store.access_token is None


def test_token_store_clear_removes_file(tmp_path):
    path = tmp_path / "tokens.json"
    store = TokenStore(path)
    store.set_tokens("a", "r")

    store.clear()

    assert not path.exists()
    assert store.refresh_token is None


def test_expired_token_is_refreshed_and_request_replayed(backend, make_client, token_store):
    backend.seed_alerts(3)
    backend.expire_access_tokens()

    async def scenario():
        async with make_client() as client:
            return await AlertService(client).fetch_statistics()

    stats = asyncio.run(scenario())

    assert stats.total_alerts == 3
    assert backend.refresh_calls == 1
    assert token_store.access_token == "access-2"
    # the refresh response carried no new refresh token, so the old one is kept
    assert token_store.refresh_token == "refresh-1"
    assert backend.count("GET", STATISTICS_PATH) == 2


def test_concurrent_401s_share_one_refresh(backend, make_client):
    backend.seed_alerts(3)
    backend.expire_access_tokens()

    async def scenario():
        async with make_client() as client:
            service = AlertService(client)
            return await asyncio.gather(service.fetch_statistics(), service.fetch_alerts())

    stats, page = asyncio.run(scenario())

    assert stats.total_alerts == 3
    assert len(page.items) == 3
    assert backend.refresh_calls == 1


def test_rejected_refresh_clears_session(backend, make_client, token_store):
    backend.expire_access_tokens()
    backend.refresh_token = "rotated-elsewhere"

    async def scenario():
        async with make_client() as client:
            await AlertService(client).fetch_statistics()

    with pytest.raises(AuthenticationError) as exc_info:
        asyncio.run(scenario())

    assert exc_info.value.status_code == 401
    assert token_store.access_token is None
    assert token_store.refresh_token is None


def test_login_stores_tokens(backend, make_client, token_store):
    token_store.clear()

    async def scenario():
        async with make_client() as client:
            return await AuthService(client).login("analyst@example.com", "secret")

    data = asyncio.run(scenario())

    assert data["user"]["firstName"] == "Ada"
    assert token_store.access_token == "access-2"
    assert json.loads(token_store.path.read_text())["refresh_token"] == "refresh-1"


def test_login_with_bad_credentials(backend, make_client, token_store):
    token_store.clear()

    async def scenario():
        async with make_client() as client:
            await AuthService(client).login("analyst@example.com", "wrong")

    with pytest.raises(ApiError, match="Invalid email or password"):
        asyncio.run(scenario())
    assert token_store.access_token is None


def test_logout_revokes_and_clears(backend, make_client, token_store):
    async def scenario():
        async with make_client() as client:
            await AuthService(client).logout()

    asyncio.run(scenario())

    assert backend.logout_calls == 1
    assert token_store.access_token is None
    assert not token_store.path.exists()
