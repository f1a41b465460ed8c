"""
API gateway port.

The single outbound surface to the blog API. Implementations attach the
session credential to every request and escalate 401 responses globally.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Literal, Protocol

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]


class GatewayPort(Protocol):
    """Port for talking to the remote blog API."""

    async def send(
        self,
        method: HttpMethod,
        path: str,
        body: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Issue one request and return its payload.

        Args:
            method: HTTP verb
            path: Path relative to the API base URL (e.g. "/blogs/42")
            body: Optional JSON body
            query: Optional query parameters; None values are dropped

        Returns:
            The response payload (the envelope's `data` member when present)

        Raises:
            HttpError: For any non-2xx response or transport failure
        """
        ...

    def add_unauthorized_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback fired after a 401 forced the session out."""
        ...


class HttpError(Exception):
    """A failed gateway call. status 0 means the request never got an answer."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    def __repr__(self) -> str:
        return f"HttpError(status={self.status}, message={self.message!r})"
