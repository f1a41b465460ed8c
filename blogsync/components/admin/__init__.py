"""
Admin component - Dashboard statistics, account management and moderation.

Available to admins only; moderation removals propagate to the resource store.
"""

from .component import AdminConsole, admin_error
from .models import (
    DashboardOutput,
    ModerationListOutput,
    RemovalOutput,
    UserChanges,
    UserListOutput,
    UserOutput,
)
from .ports import GatewayPort, PostCachePort, SessionReaderPort

__all__ = [
    # Component
    "AdminConsole",
    # Pure functions
    "admin_error",
    # Models
    "DashboardOutput",
    "ModerationListOutput",
    "RemovalOutput",
    "UserChanges",
    "UserListOutput",
    "UserOutput",
    # Ports
    "GatewayPort",
    "PostCachePort",
    "SessionReaderPort",
]
