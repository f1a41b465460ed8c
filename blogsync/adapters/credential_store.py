"""
Credential store adapters.

Implements CredentialStorePort. The JSON file store is the durable record
that survives restarts; the in-memory store backs tests and throwaway
sessions.

Invariants:
- Token and user summary are written in one record and removed together
- A write either fully replaces the previous record or leaves it untouched
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from blogsync.domain.entities import SessionCredential
from blogsync.ports.storage import CredentialStoreError

logger = logging.getLogger(__name__)


class JsonFileCredentialStore:
    """Stores the credential as a single JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> SessionCredential | None:
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
            return SessionCredential.model_validate_json(raw)
        except (OSError, ValidationError) as e:
            # A half-written or hand-edited record is not a session.
            logger.warning("Discarding unreadable credential at %s: %s", self.path, e)
            try:
                self.clear()
            except CredentialStoreError as clear_error:
                logger.error("Could not discard credential at %s: %s", self.path, clear_error)
            return None

    def save(self, credential: SessionCredential) -> None:
        payload = credential.model_dump_json(by_alias=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".credential-")
        except OSError as e:
            raise CredentialStoreError(f"Could not write credential: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise CredentialStoreError(f"Could not write credential: {e}") from e

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise CredentialStoreError(f"Could not remove credential: {e}") from e


class InMemoryCredentialStore:
    """In-process credential storage - lost when the process exits."""

    def __init__(self, credential: SessionCredential | None = None) -> None:
        self._credential = credential

    def load(self) -> SessionCredential | None:
        return self._credential

    def save(self, credential: SessionCredential) -> None:
        self._credential = credential

    def clear(self) -> None:
        self._credential = None
