"""
Envelope-aware HTTP client for the Trade Credit Reference System API.

Every response arrives as {success, message, data, timestamp}. This module
unwraps the envelope and turns transport failures and failure envelopes into
the client error taxonomy. No call is retried automatically.
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from tcrs.core.auth import BearerAuth, TokenStore
from tcrs.core.config import Settings, settings as default_settings
from tcrs.core.errors import (
    ApiError,
    NetworkError,
    error_for_status,
    extract_server_message,
)

logger = structlog.get_logger(__name__)

DEFAULT_FAILURE_MESSAGE = "An error occurred"


class ApiClient:
    """
    Thin wrapper around httpx.AsyncClient.

    Args:
        settings: Client settings (base URL, timeout, token store path)
        token_store: Where bearer tokens are read from; built from settings if omitted
        transport: Optional httpx transport (tests route this to an in-process app)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or default_settings
        self.token_store = token_store or TokenStore(self.settings.TOKEN_STORE_PATH)
        base_url = self.settings.API_BASE_URL
        self._http = httpx.AsyncClient(
            base_url=base_url,
            auth=BearerAuth(self.token_store, f"{base_url}/api/auth/refresh"),
            timeout=self.settings.request_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
    ) -> Any:
        """
        Send one request and return the envelope's data field.

        Raises:
            NetworkError: The request never got a response
            ApiError: Error status or success=false envelope (ConflictError on 409,
                AuthenticationError on 401)
        """
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.RequestError as e:
            logger.warning(
                "Request failed before a response arrived",
                method=method,
                path=path,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise NetworkError() from e

        body = self._decode(response)

        if response.is_error:
            message = extract_server_message(body, failure_message)
            logger.warning(
                "API returned an error status",
                method=method,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            raise error_for_status(response.status_code, message)

        if not isinstance(body, dict):
            logger.error("API response is not an envelope", method=method, path=path)
            raise ApiError(failure_message, status_code=response.status_code)

        if body.get("success") is False:
            message = extract_server_message(body, failure_message)
            logger.warning("API returned a failure envelope", method=method, path=path, message=message)
            raise ApiError(message, status_code=response.status_code)

        logger.debug("API call succeeded", method=method, path=path, status_code=response.status_code)
        return body.get("data")

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json: Optional[Any] = None, **kwargs) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Optional[Any] = None, **kwargs) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)
