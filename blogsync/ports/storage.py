"""
Credential storage port.

Holds the one durable client record: the bearer token together with the
user summary it belongs to. Token and user are saved and cleared as a unit.
"""

from __future__ import annotations

from typing import Protocol

from blogsync.domain.entities import SessionCredential


class CredentialStorePort(Protocol):
    """Port for the persisted session credential."""

    def load(self) -> SessionCredential | None:
        """Return the stored credential, or None when nobody is signed in."""
        ...

    def save(self, credential: SessionCredential) -> None:
        """Replace the stored credential (token and user together)."""
        ...

    def clear(self) -> None:
        """Remove the stored credential. Clearing an empty store is a no-op."""
        ...


class CredentialStoreError(Exception):
    """The credential record could not be read or written."""
