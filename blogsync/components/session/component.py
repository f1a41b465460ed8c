"""
Session component - Identity lifecycle of the signed-in user.

Phases:
- anonymous → authenticating (login / register)
- authenticating → authenticated | auth_failed
- authenticated → anonymous (logout, or a 401 from any gateway call)

Invariants:
- The persisted credential and the in-memory user summary are either both
  present or both absent
- id and role of the user summary never change through a profile update
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from blogsync.domain.entities import SessionCredential, UserSummary
from blogsync.domain.state import IDLE, PENDING, SUCCEEDED, Observable, OperationState, failed

from .models import (
    LoginInput,
    RegisterInput,
    SessionOutput,
    SessionPhase,
    UpdateProfileInput,
)
from .ports import CredentialStoreError, CredentialStorePort, GatewayPort, HttpError

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD_MIN_LENGTH = 6


# --- Validation Functions ---


def validate_login(inp: LoginInput) -> str | None:
    if not inp.email.strip() or not inp.password:
        return "Please enter email and password"
    return None


def validate_registration(
    inp: RegisterInput, min_length: int = DEFAULT_PASSWORD_MIN_LENGTH
) -> str | None:
    if not inp.username.strip() or not inp.email.strip() or not inp.password:
        return "Username, email and password are required"
    if inp.confirm_password is not None and inp.password != inp.confirm_password:
        return "Passwords do not match"
    if len(inp.password) < min_length:
        return f"Password must be at least {min_length} characters"
    return None


def parse_credential(payload: dict[str, Any]) -> SessionCredential:
    """Build a credential from a `{token, user}` auth response."""
    return SessionCredential.model_validate(
        {"token": payload.get("token"), "user": payload.get("user")}
    )


# --- Component ---


class SessionManager(Observable):
    """Owns who is signed in, backed by the persisted credential."""

    def __init__(
        self,
        gateway: GatewayPort,
        store: CredentialStorePort,
        *,
        password_min_length: int = DEFAULT_PASSWORD_MIN_LENGTH,
    ) -> None:
        super().__init__()
        self.gateway = gateway
        self.store = store
        self.password_min_length = password_min_length
        self.phase: SessionPhase = "anonymous"
        self.operation: OperationState = IDLE
        self._user: UserSummary | None = None
        gateway.add_unauthorized_listener(self._on_unauthorized)

    @property
    def user(self) -> UserSummary | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self.phase == "authenticated" and self._user is not None

    # --- Transitions ---

    def _set(self, phase: SessionPhase, operation: OperationState) -> None:
        self.phase = phase
        self.operation = operation
        self._notify()

    def _persist(self, credential: SessionCredential) -> None:
        # Disk first: if the write fails memory still matches the old record.
        self.store.save(credential)
        self._user = credential.user

    def _drop(self) -> None:
        try:
            self.store.clear()
        except CredentialStoreError as e:
            logger.error("Could not remove stored session: %s", e)
        self._user = None

    def _on_unauthorized(self) -> None:
        # The gateway already cleared the stored credential.
        self._user = None
        self._set("anonymous", IDLE)

    def _fail_auth(self, message: str) -> SessionOutput:
        self._user = None
        self._set("auth_failed", failed(message))
        return SessionOutput(success=False, error=message)

    # --- Operations ---

    async def bootstrap(self) -> SessionOutput:
        """Resume a stored session optimistically, then confirm it with the server."""
        credential = self.store.load()
        if credential is None:
            self._user = None
            self._set("anonymous", IDLE)
            return SessionOutput(success=False, error=None)

        self._user = credential.user
        self._set("authenticated", IDLE)
        return await self.validate()

    async def validate(self) -> SessionOutput:
        """Refresh the user summary from `GET /auth/me`."""
        if self._user is None:
            return SessionOutput(success=False, error="Authentication required")

        try:
            payload = await self.gateway.send("GET", "/auth/me")
            user = UserSummary.model_validate(payload.get("user"))
        except HttpError as e:
            if not e.is_unauthorized:
                logger.warning("Session validation failed, keeping cached user: %s", e.message)
            return SessionOutput(user=self._user, success=False, error=e.message)
        except ValidationError:
            logger.warning("Session validation returned no usable user")
            return SessionOutput(user=self._user, success=False, error="Malformed user record")

        credential = self.store.load()
        if credential is None or self._user is None or credential.user.id != user.id:
            # Signed out (or switched user) while the call was in flight.
            return SessionOutput(success=False, error="Session changed during validation")

        try:
            self._persist(SessionCredential(token=credential.token, user=user))
        except CredentialStoreError as e:
            logger.error("Could not persist refreshed user: %s", e)
            return SessionOutput(user=self._user, success=False, error="Could not save session")
        self._notify()
        return SessionOutput(user=user, success=True)

    async def login(self, inp: LoginInput) -> SessionOutput:
        self._drop()
        error = validate_login(inp)
        if error:
            return self._fail_auth(error)

        self._set("authenticating", PENDING)
        body = {"email": inp.email.strip(), "password": inp.password}
        return await self._authenticate("/auth/login", body)

    async def register(self, inp: RegisterInput) -> SessionOutput:
        self._drop()
        error = validate_registration(inp, self.password_min_length)
        if error:
            return self._fail_auth(error)

        self._set("authenticating", PENDING)
        body = {
            "username": inp.username.strip(),
            "email": inp.email.strip(),
            "password": inp.password,
            "role": inp.role,
        }
        return await self._authenticate("/auth/register", body)

    async def _authenticate(self, path: str, body: dict[str, Any]) -> SessionOutput:
        try:
            payload = await self.gateway.send("POST", path, body)
            credential = parse_credential(payload)
            self._persist(credential)
        except HttpError as e:
            return self._fail_auth(e.message)
        except ValidationError:
            return self._fail_auth("Malformed authentication response")
        except CredentialStoreError as e:
            logger.error("Could not persist session: %s", e)
            return self._fail_auth("Could not save session")

        logger.info("Signed in as %s (%s)", credential.user.username, credential.user.role)
        self._set("authenticated", SUCCEEDED)
        return SessionOutput(user=credential.user, success=True)

    async def update_profile(self, inp: UpdateProfileInput) -> SessionOutput:
        current = self._user
        if current is None:
            self.operation = failed("Authentication required")
            self._notify()
            return SessionOutput(success=False, error="Authentication required")

        changes = inp.to_payload()
        if not changes:
            self.operation = failed("No profile changes to save")
            self._notify()
            return SessionOutput(user=current, success=False, error="No profile changes to save")

        self.operation = PENDING
        self._notify()
        try:
            payload = await self.gateway.send("PUT", "/auth/update", changes)
            returned = UserSummary.model_validate(payload.get("user"))
        except HttpError as e:
            return self._fail_operation(e.message)
        except ValidationError:
            return self._fail_operation("Malformed user record")

        credential = self.store.load()
        if credential is None or credential.user.id != current.id:
            return self._fail_operation("Session changed during profile update")

        updated = returned.model_copy(update={"id": current.id, "role": current.role})
        try:
            self._persist(SessionCredential(token=credential.token, user=updated))
        except CredentialStoreError as e:
            logger.error("Could not persist profile: %s", e)
            return self._fail_operation("Could not save profile")

        self.operation = SUCCEEDED
        self._notify()
        return SessionOutput(user=updated, success=True)

    def _fail_operation(self, message: str) -> SessionOutput:
        self.operation = failed(message)
        self._notify()
        return SessionOutput(user=self._user, success=False, error=message)

    def logout(self) -> None:
        self._drop()
        self._set("anonymous", IDLE)

    def reset_status(self) -> None:
        phase: SessionPhase = "anonymous" if self.phase == "auth_failed" else self.phase
        self._set(phase, IDLE)
