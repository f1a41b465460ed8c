"""
Engagement component - Likes and comments of the post being viewed.
"""

from .component import (
    EngagementTracker,
    newest_first,
    validate_comment,
)
from .models import (
    CommentOutput,
    CommentsOutput,
    EngagementOutput,
)
from .ports import GatewayPort, SessionReaderPort

__all__ = [
    # Component
    "EngagementTracker",
    # Pure functions
    "newest_first",
    "validate_comment",
    # Models
    "CommentOutput",
    "CommentsOutput",
    "EngagementOutput",
    # Ports
    "GatewayPort",
    "SessionReaderPort",
]
