from typing import Protocol

from blogsync.domain.entities import UserSummary


class SessionReaderPort(Protocol):
    """Read-only view of the signed-in identity, for components that don't own it."""

    @property
    def user(self) -> UserSummary | None: ...
