from dataclasses import dataclass
from typing import Any, Literal

from blogsync.domain.entities import RoleType, UserSummary

SessionPhase = Literal["anonymous", "authenticating", "authenticated", "auth_failed"]


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class RegisterInput:
    username: str
    email: str
    password: str
    role: RoleType = "reader"
    confirm_password: str | None = None


@dataclass
class UpdateProfileInput:
    """Profile changes. Only these three fields may be sent to the server."""

    username: str | None = None
    bio: str | None = None
    avatar: str | None = None

    def to_payload(self) -> dict[str, Any]:
        fields = {"username": self.username, "bio": self.bio, "avatar": self.avatar}
        return {k: v for k, v in fields.items() if v is not None}


@dataclass
class SessionOutput:
    user: UserSummary | None = None
    success: bool = False
    error: str | None = None
