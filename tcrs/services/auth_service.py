"""
Login / logout against the auth endpoints.
"""

from typing import Any, Dict

import structlog

from tcrs.core.errors import ApiError, TcrsError
from tcrs.services.api_client import ApiClient

logger = structlog.get_logger(__name__)


class AuthService:

    def __init__(self, client: ApiClient):
        self.client = client

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Exchange credentials for a token pair and persist it."""
        data = await self.client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
            failure_message="Login failed",
        )
        if not isinstance(data, dict) or not data.get("accessToken"):
            raise ApiError("Login failed")

        self.client.token_store.set_tokens(data["accessToken"], data.get("refreshToken"), data.get("user"))
        logger.info("Logged in", email=email)
        return data

    async def logout(self) -> None:
        """Revoke the refresh token server-side when possible; always clear locally."""
        refresh_token = self.client.token_store.refresh_token
        try:
            if refresh_token:
                await self.client.post("/api/auth/logout", json={"refreshToken": refresh_token})
        except TcrsError as e:
            logger.warning("Logout call failed, clearing tokens anyway", error=e.message)
        finally:
            self.client.token_store.clear()
