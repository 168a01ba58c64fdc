"""
Auth token storage and bearer authentication for outgoing requests.

Tokens live in a small JSON file that is written only by the login and
refresh flows; every request reads the current access token from it.
A 401 response triggers one refresh attempt and a single replay.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Generator, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)


class TokenStore:
    """
    File-backed storage for the access/refresh token pair and the user record.
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            self._data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable token store", path=str(self.path), error=str(e))
            self._data = {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(self._data), encoding="utf-8")
        os.replace(tmp_path, self.path)

    @property
    def access_token(self) -> Optional[str]:
        return self._data.get("access_token")

    @property
    def refresh_token(self) -> Optional[str]:
        return self._data.get("refresh_token")

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._data.get("user")

    def set_tokens(self, access_token: str, refresh_token: Optional[str], user: Optional[Dict[str, Any]] = None) -> None:
        """Persist a fresh token pair (login or refresh)."""
        self._data["access_token"] = access_token
        self._data["refresh_token"] = refresh_token
        if user is not None:
            self._data["user"] = user
        self._save()
        logger.info("Stored auth tokens", path=str(self.path))

    def clear(self) -> None:
        """Forget all stored credentials."""
        self._data = {}
        if self.path.exists():
            self.path.unlink()
        logger.info("Cleared auth tokens", path=str(self.path))


class BearerAuth(httpx.Auth):
    """
    httpx auth flow: attach the bearer token, refresh once on 401.

    Refreshes are serialised with a lock; a caller that waited on the lock
    and finds the token already rotated just replays with the new token.
    """

    def __init__(self, store: TokenStore, refresh_url: str):
        self.store = store
        self.refresh_url = refresh_url
        self._refresh_lock: Optional[asyncio.Lock] = None

    def _authorize(self, request: httpx.Request) -> Optional[str]:
        token = self.store.access_token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        return token

    def _build_refresh_request(self) -> httpx.Request:
        return httpx.Request("POST", self.refresh_url, json={"refreshToken": self.store.refresh_token})

    def _handle_refresh_response(self, response: httpx.Response) -> bool:
        if response.status_code != 200:
            logger.warning("Token refresh rejected", status_code=response.status_code)
            self.store.clear()
            return False
        try:
            data = response.json().get("data") or {}
        except ValueError:
            data = {}
        access_token = data.get("accessToken")
        if not access_token:
            logger.warning("Token refresh returned no access token")
            self.store.clear()
            return False
        self.store.set_tokens(access_token, data.get("refreshToken") or self.store.refresh_token, data.get("user"))
        logger.info("Access token refreshed")
        return True

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self._authorize(request)
        response = yield request
        if response.status_code != 401 or not self.store.refresh_token:
            return
        refresh_response = yield self._build_refresh_request()
        refresh_response.read()
        if self._handle_refresh_response(refresh_response):
            self._authorize(request)
            yield request

    async def async_auth_flow(self, request: httpx.Request) -> AsyncGenerator[httpx.Request, httpx.Response]:
        sent_token = self._authorize(request)
        response = yield request
        if response.status_code != 401 or not self.store.refresh_token:
            return

        if self._refresh_lock is None:
            self._refresh_lock = asyncio.Lock()

        async with self._refresh_lock:
            if self.store.access_token and self.store.access_token != sent_token:
                refreshed = True
            else:
                refresh_response = yield self._build_refresh_request()
                await refresh_response.aread()
                refreshed = self._handle_refresh_response(refresh_response)

        if refreshed:
            self._authorize(request)
            yield request
