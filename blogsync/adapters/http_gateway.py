"""
HTTP gateway to the blog API, built on httpx.

Implements GatewayPort. Every request goes through `send`, which:
- attaches `Authorization: Bearer <token>` when a credential is stored
- unwraps the service's `{success, data, message}` envelope
- on 401 clears the stored credential, navigates to the login route and
  notifies unauthorized-listeners, whichever component issued the call
- maps every other failure to HttpError without retrying
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from blogsync.ports.gateway import HttpError, HttpMethod
from blogsync.ports.navigation import NavigatorPort
from blogsync.ports.storage import CredentialStoreError, CredentialStorePort

logger = logging.getLogger(__name__)


def clean_query(query: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop unset filter values so they are not sent as empty parameters."""
    if not query:
        return {}
    return {k: v for k, v in query.items() if v is not None and v != ""}


def error_message(response: httpx.Response) -> str:
    """Best human-readable message for a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or f"Request failed with status {response.status_code}"


class ApiGateway:
    """Async client for the blog REST API."""

    def __init__(
        self,
        base_url: str,
        store: CredentialStorePort,
        navigator: NavigatorPort,
        *,
        login_route: str = "/login",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.navigator = navigator
        self.login_route = login_route
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._unauthorized_listeners: list[Callable[[], None]] = []

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def add_unauthorized_listener(self, listener: Callable[[], None]) -> None:
        self._unauthorized_listeners.append(listener)

    def _auth_headers(self) -> dict[str, str]:
        credential = self.store.load()
        if credential is None:
            return {}
        return {"Authorization": f"Bearer {credential.token}"}

    def _force_logout(self) -> None:
        logger.warning("Session rejected by server; signing out")
        try:
            self.store.clear()
        except CredentialStoreError as e:
            logger.error("Could not remove stored session: %s", e)
        self.navigator.go(self.login_route)
        for listener in list(self._unauthorized_listeners):
            listener()

    async def send(
        self,
        method: HttpMethod,
        path: str,
        body: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        client = await self._get_client()
        url = path if path.startswith("/") else f"/{path}"
        logger.debug("%s %s", method, url)

        try:
            response = await client.request(
                method,
                url,
                json=dict(body) if body is not None else None,
                params=clean_query(query),
                headers=self._auth_headers(),
            )
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out", method, url)
            raise HttpError(0, "Request timed out") from e
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise HttpError(0, f"Network error: {e}") from e

        if response.status_code == 401:
            self._force_logout()
            raise HttpError(401, error_message(response))

        if response.is_error:
            message = error_message(response)
            logger.warning("%s %s -> %s %s", method, url, response.status_code, message)
            raise HttpError(response.status_code, message)

        return self._payload(response)

    @staticmethod
    def _payload(response: httpx.Response) -> dict[str, Any]:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise HttpError(response.status_code, "Malformed response from server") from e
        if not isinstance(body, dict):
            raise HttpError(response.status_code, "Unexpected response shape")
        data = body.get("data")
        if isinstance(data, dict):
            return data
        return body
