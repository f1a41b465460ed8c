"""
Admin component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from blogsync.domain.entities import Blog, DashboardStats, ManagedUser, Pagination, RoleType


@dataclass(frozen=True)
class UserChanges:
    """Role and activation changes an admin may apply to an account."""

    role: RoleType | None = None
    is_active: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        fields: dict[str, Any] = {"role": self.role, "isActive": self.is_active}
        return {k: v for k, v in fields.items() if v is not None}


@dataclass
class DashboardOutput:
    stats: DashboardStats | None = None
    success: bool = False
    error: str | None = None
    stale: bool = False


@dataclass
class UserListOutput:
    users: list[ManagedUser] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    stale: bool = False


@dataclass
class UserOutput:
    user: ManagedUser | None = None
    success: bool = False
    error: str | None = None


@dataclass
class ModerationListOutput:
    blogs: list[Blog] = field(default_factory=list)
    pagination: Pagination | None = None
    success: bool = False
    error: str | None = None
    stale: bool = False


@dataclass
class RemovalOutput:
    target_id: str
    success: bool = False
    error: str | None = None
