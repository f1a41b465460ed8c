"""
Engagement component - Likes and comment threads of the viewed post.

Scoped to one focused post at a time. Focusing another post discards the
thread and the engagement status of the previous one.

Invariants:
- At most one EngagementStatus exists, for the focused post and signed-in user
- Like state and like count are taken whole from the server response,
  never adjusted locally
- Comments appear only after the server confirmed them (no placeholders)
- Liking and commenting without a signed-in user never reach the network
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from blogsync.domain.entities import Comment, EngagementStatus, LikeType
from blogsync.domain.state import (
    IDLE,
    PENDING,
    SUCCEEDED,
    Observable,
    OperationState,
    RequestSequence,
    failed,
)

from .models import CommentOutput, CommentsOutput, EngagementOutput
from .ports import GatewayPort, HttpError, SessionReaderPort

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_MAX_LENGTH = 1000

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


# --- Pure Functions ---


def newest_first(comments: list[Comment]) -> list[Comment]:
    """Order a thread by recency; comments without a timestamp sink to the end."""

    def key(comment: Comment) -> datetime:
        created = comment.created_at
        if created is None:
            return _EPOCH
        if created.tzinfo is None:
            return created.replace(tzinfo=timezone.utc)
        return created

    return sorted(comments, key=key, reverse=True)


def validate_comment(
    content: str, max_length: int = DEFAULT_COMMENT_MAX_LENGTH
) -> str | None:
    if not content.strip():
        return "Comment cannot be empty"
    if len(content.strip()) > max_length:
        return f"Comment cannot exceed {max_length} characters"
    return None


# --- Component ---


class EngagementTracker(Observable):
    """Owns the comment thread and like state of the focused post."""

    def __init__(
        self,
        gateway: GatewayPort,
        session: SessionReaderPort,
        *,
        comment_max_length: int = DEFAULT_COMMENT_MAX_LENGTH,
    ) -> None:
        super().__init__()
        self.gateway = gateway
        self.session = session
        self.comment_max_length = comment_max_length

        self.blog_id: str | None = None
        self.comments: list[Comment] = []
        self.status: EngagementStatus | None = None

        self.thread: OperationState = IDLE
        self.reaction: OperationState = IDLE
        self.posting: OperationState = IDLE

        self._comments_seq = RequestSequence()
        self._status_seq = RequestSequence()
        # Bumped whenever held state is thrown away; in-flight calls from an
        # older scope never write back.
        self._scope = 0
        # Bumped whenever a toggle response sets the like count.
        self._count_epoch = 0

    # --- Focus ---

    def _clear(self) -> None:
        self.comments = []
        self.status = None
        self.thread = IDLE
        self.reaction = IDLE
        self.posting = IDLE
        self._scope += 1

    def _focus(self, blog_id: str) -> None:
        if blog_id != self.blog_id:
            self.blog_id = blog_id
            self._clear()

    def _is_focused(self, blog_id: str) -> bool:
        return self.blog_id == blog_id

    def _user_id(self) -> str | None:
        user = self.session.user
        return user.id if user is not None else None

    def discard(self) -> None:
        """Drop everything held for the focused post (e.g. after the user changed)."""
        self.blog_id = None
        self._clear()
        self._comments_seq.next()
        self._status_seq.next()
        self._notify()

    # --- Comments ---

    async def load_comments(self, blog_id: str) -> CommentsOutput:
        self._focus(blog_id)
        ticket = self._comments_seq.next()
        self.thread = PENDING
        self._notify()

        try:
            payload = await self.gateway.send("GET", f"/comments/blog/{blog_id}")
            comments = [Comment.model_validate(c) for c in payload.get("comments") or []]
        except (HttpError, ValidationError) as e:
            message = e.message if isinstance(e, HttpError) else "Malformed comment list"
            if not (self._comments_seq.is_latest(ticket) and self._is_focused(blog_id)):
                return CommentsOutput(success=False, error=message, stale=True)
            self.thread = failed(message)
            self._notify()
            return CommentsOutput(success=False, error=message)

        comments = newest_first(comments)
        if not (self._comments_seq.is_latest(ticket) and self._is_focused(blog_id)):
            logger.debug("Discarding stale comments for %s", blog_id)
            return CommentsOutput(comments=comments, success=True, stale=True)

        self.comments = comments
        self.thread = SUCCEEDED
        self._notify()
        return CommentsOutput(comments=comments, success=True)

    async def post_comment(self, blog_id: str, content: str) -> CommentOutput:
        if self.session.user is None:
            return CommentOutput(success=False, error="Please log in to comment")
        error = validate_comment(content, self.comment_max_length)
        if error:
            return CommentOutput(success=False, error=error)

        self._focus(blog_id)
        scope = self._scope
        self.posting = PENDING
        self._notify()
        try:
            payload = await self.gateway.send(
                "POST", "/comments", {"content": content.strip(), "blog": blog_id}
            )
            comment = Comment.model_validate(payload.get("comment"))
        except (HttpError, ValidationError) as e:
            message = e.message if isinstance(e, HttpError) else "Malformed comment"
            if self._scope == scope:
                self.posting = failed(message)
                self._notify()
            return CommentOutput(success=False, error=message)

        if self._scope == scope:
            self.comments = [comment] + [c for c in self.comments if c.id != comment.id]
            self.posting = SUCCEEDED
            self._notify()
        return CommentOutput(comment=comment, success=True)

    # --- Likes ---

    async def load_engagement_status(
        self, blog_id: str, like_count: int | None = None
    ) -> EngagementOutput:
        """
        Load the signed-in user's reaction to a post.

        Args:
            blog_id: Post to focus
            like_count: Known like count of the post (e.g. `len(blog.likes)`)

        Without a signed-in user the status defaults to "no reaction" and
        no request is made. The status endpoint reports no count; unless a
        toggle answered in the meantime, `like_count` (or the count already
        held) is kept.
        """
        self._focus(blog_id)
        ticket = self._status_seq.next()

        user_id = self._user_id()
        if user_id is None:
            count = like_count if like_count is not None else self._known_count()
            self.status = EngagementStatus(is_liked=False, like_type="none", like_count=count)
            self.reaction = SUCCEEDED
            self._notify()
            return EngagementOutput(status=self.status, success=True)

        scope, epoch = self._scope, self._count_epoch
        self.reaction = PENDING
        self._notify()

        try:
            payload = await self.gateway.send("GET", f"/likes/blog/{blog_id}/status")
            if "likeCount" not in payload:
                if like_count is not None and self._count_epoch == epoch:
                    count = like_count
                else:
                    count = self._known_count()
                payload = {**payload, "likeCount": count}
            fetched = EngagementStatus.model_validate(payload)
        except (HttpError, ValidationError) as e:
            message = e.message if isinstance(e, HttpError) else "Malformed like status"
            if not self._may_apply(ticket, scope, user_id):
                return EngagementOutput(success=False, error=message, stale=True)
            self.reaction = failed(message)
            self._notify()
            return EngagementOutput(success=False, error=message)

        if not self._may_apply(ticket, scope, user_id):
            logger.debug("Discarding stale like status for %s", blog_id)
            return EngagementOutput(status=fetched, success=True, stale=True)

        self.status = fetched
        self.reaction = SUCCEEDED
        self._notify()
        return EngagementOutput(status=fetched, success=True)

    def _known_count(self) -> int:
        return self.status.like_count if self.status is not None else 0

    def _may_apply(self, ticket: int, scope: int, user_id: str) -> bool:
        return (
            self._status_seq.is_latest(ticket)
            and self._scope == scope
            and self._user_id() == user_id
        )

    async def toggle_like(self, blog_id: str, like_type: LikeType = "like") -> EngagementOutput:
        """
        React to a post.

        Sending the reaction the user already has removes it; sending the
        other one switches to it. The server decides; the response replaces
        the whole status. Status loads issued before the toggle are dropped
        when they land; the toggle itself is applied in completion order
        unless the post or the user changed meanwhile.
        """
        user_id = self._user_id()
        if user_id is None:
            return EngagementOutput(
                status=self.status, success=False, error="Please log in to like posts"
            )

        self._focus(blog_id)
        self._status_seq.next()
        scope = self._scope
        self.reaction = PENDING
        self._notify()

        try:
            payload = await self.gateway.send(
                "POST", "/likes", {"blog": blog_id, "type": like_type}
            )
            status = EngagementStatus.model_validate(payload)
        except (HttpError, ValidationError) as e:
            message = e.message if isinstance(e, HttpError) else "Malformed like response"
            if self._scope == scope and self._user_id() == user_id:
                self.reaction = failed(message)
                self._notify()
            return EngagementOutput(status=self.status, success=False, error=message)

        if self._scope != scope or self._user_id() != user_id:
            logger.debug("Discarding like response for %s after focus or user change", blog_id)
            return EngagementOutput(status=status, success=True, stale=True)

        self.status = status
        self._count_epoch += 1
        self.reaction = SUCCEEDED
        self._notify()
        return EngagementOutput(status=status, success=True)
