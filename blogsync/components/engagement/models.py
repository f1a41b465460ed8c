"""
Engagement component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from blogsync.domain.entities import Comment, EngagementStatus


@dataclass
class CommentsOutput:
    comments: list[Comment] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    stale: bool = False


@dataclass
class CommentOutput:
    comment: Comment | None = None
    success: bool = False
    error: str | None = None


@dataclass
class EngagementOutput:
    status: EngagementStatus | None = None
    success: bool = False
    error: str | None = None
    stale: bool = False
