"""
Admin component - Site statistics, account management and post moderation.

Every operation requires a signed-in user whose role is admin; anyone else
is turned away before a request is made.

Invariants:
- Moderation deletes also leave All items and Owned items of the resource
  store, so a removed post is not served from any list
- Deleting an account removes its posts from every list, since the service
  deletes them with the account
- Only the newest request of the dashboard, user and moderation views may
  write into that view
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from blogsync.components.resources.models import BlogFilter
from blogsync.domain.entities import (
    BlogPage,
    DashboardStats,
    ManagedUser,
    Pagination,
    RoleType,
)
from blogsync.domain.state import (
    IDLE,
    PENDING,
    SUCCEEDED,
    Observable,
    OperationState,
    RequestSequence,
    failed,
)

from .models import (
    DashboardOutput,
    ModerationListOutput,
    RemovalOutput,
    UserChanges,
    UserListOutput,
    UserOutput,
)
from .ports import GatewayPort, HttpError, PostCachePort, SessionReaderPort

logger = logging.getLogger(__name__)


def admin_error(session: SessionReaderPort) -> str | None:
    user = session.user
    if user is None:
        return "Authentication required"
    if user.role != "admin":
        return "Admin access required"
    return None


class AdminConsole(Observable):
    """Owns the admin dashboard, the user roster and the moderation list."""

    def __init__(
        self,
        gateway: GatewayPort,
        session: SessionReaderPort,
        posts: PostCachePort,
        *,
        default_limit: int = 10,
    ) -> None:
        super().__init__()
        self.gateway = gateway
        self.session = session
        self.posts = posts
        self.default_limit = default_limit

        self.stats: DashboardStats | None = None
        self.users: list[ManagedUser] = []
        self.blogs = BlogPage(pagination=Pagination(limit=default_limit))

        self.dashboard: OperationState = IDLE
        self.roster: OperationState = IDLE
        self.moderation: OperationState = IDLE
        self.action: OperationState = IDLE

        self._stats_seq = RequestSequence()
        self._users_seq = RequestSequence()
        self._blogs_seq = RequestSequence()

    def _deny(self) -> str | None:
        error = admin_error(self.session)
        if error:
            self.action = failed(error)
            self._notify()
        return error

    # --- Dashboard ---

    async def load_dashboard(self) -> DashboardOutput:
        error = self._deny()
        if error:
            return DashboardOutput(success=False, error=error)

        ticket = self._stats_seq.next()
        self.dashboard = PENDING
        self._notify()
        try:
            payload = await self.gateway.send("GET", "/admin/dashboard/stats")
            stats = DashboardStats.model_validate(payload)
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to fetch dashboard stats")
            if not self._stats_seq.is_latest(ticket):
                return DashboardOutput(success=False, error=message, stale=True)
            self.dashboard = failed(message)
            self._notify()
            return DashboardOutput(success=False, error=message)

        if not self._stats_seq.is_latest(ticket):
            return DashboardOutput(stats=stats, success=True, stale=True)

        self.stats = stats
        self.dashboard = SUCCEEDED
        self._notify()
        return DashboardOutput(stats=stats, success=True)

    # --- Users ---

    async def list_users(self) -> UserListOutput:
        error = self._deny()
        if error:
            return UserListOutput(success=False, error=error)

        ticket = self._users_seq.next()
        self.roster = PENDING
        self._notify()
        try:
            payload = await self.gateway.send("GET", "/admin/users")
            users = [ManagedUser.model_validate(u) for u in payload.get("users") or []]
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to fetch users")
            if not self._users_seq.is_latest(ticket):
                return UserListOutput(success=False, error=message, stale=True)
            self.roster = failed(message)
            self._notify()
            return UserListOutput(success=False, error=message)

        if not self._users_seq.is_latest(ticket):
            return UserListOutput(users=users, success=True, stale=True)

        self.users = users
        self.roster = SUCCEEDED
        self._notify()
        return UserListOutput(users=users, success=True)

    async def get_user(self, user_id: str) -> UserOutput:
        error = self._deny()
        if error:
            return UserOutput(success=False, error=error)
        try:
            payload = await self.gateway.send("GET", f"/admin/users/{user_id}")
            user = ManagedUser.model_validate(payload.get("user"))
        except (HttpError, ValidationError) as e:
            return UserOutput(success=False, error=_message(e, "User not found"))
        self._replace_user(user)
        return UserOutput(user=user, success=True)

    def _replace_user(self, user: ManagedUser) -> None:
        if any(u.id == user.id for u in self.users):
            self.users = [user if u.id == user.id else u for u in self.users]
            self._notify()

    async def change_role(self, user_id: str, role: RoleType) -> UserOutput:
        return await self._update_user(user_id, UserChanges(role=role))

    async def set_active(self, user_id: str, active: bool) -> UserOutput:
        return await self._update_user(user_id, UserChanges(is_active=active))

    async def _update_user(self, user_id: str, changes: UserChanges) -> UserOutput:
        error = self._deny()
        if error:
            return UserOutput(success=False, error=error)

        self.action = PENDING
        self._notify()
        try:
            payload = await self.gateway.send(
                "PUT", f"/admin/users/{user_id}", changes.to_payload()
            )
            user = ManagedUser.model_validate(payload.get("user"))
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to update user")
            self.action = failed(message)
            self._notify()
            return UserOutput(success=False, error=message)

        self.action = SUCCEEDED
        self._replace_user(user)
        self._notify()
        logger.info("Updated user %s: %s", user_id, changes.to_payload())
        return UserOutput(user=user, success=True)

    async def delete_user(self, user_id: str) -> RemovalOutput:
        error = self._deny()
        if error:
            return RemovalOutput(target_id=user_id, success=False, error=error)

        self.action = PENDING
        self._notify()
        try:
            await self.gateway.send("DELETE", f"/admin/users/{user_id}")
        except HttpError as e:
            self.action = failed(e.message)
            self._notify()
            return RemovalOutput(target_id=user_id, success=False, error=e.message)

        # The service deletes the account's posts along with it.
        self.users = [u for u in self.users if u.id != user_id]
        self.blogs = self.blogs.model_copy(
            update={"blogs": [b for b in self.blogs.blogs if b.author_id != user_id]}
        )
        self.posts.evict_author(user_id)
        self.action = SUCCEEDED
        self._notify()
        logger.info("Deleted user %s", user_id)
        return RemovalOutput(target_id=user_id, success=True)

    # --- Moderation ---

    async def list_blogs(self, flt: BlogFilter | None = None) -> ModerationListOutput:
        """Load one page of every post on the site, drafts included."""
        error = self._deny()
        if error:
            return ModerationListOutput(success=False, error=error)

        flt = flt or BlogFilter(limit=self.default_limit)
        ticket = self._blogs_seq.next()
        self.moderation = PENDING
        self._notify()
        try:
            payload = await self.gateway.send("GET", "/admin/blogs", query=flt.to_query())
            page = BlogPage.model_validate(payload)
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to fetch blogs")
            if not self._blogs_seq.is_latest(ticket):
                return ModerationListOutput(success=False, error=message, stale=True)
            self.moderation = failed(message)
            self._notify()
            return ModerationListOutput(success=False, error=message)

        if not self._blogs_seq.is_latest(ticket):
            return ModerationListOutput(
                blogs=page.blogs, pagination=page.pagination, success=True, stale=True
            )

        self.blogs = page
        self.moderation = SUCCEEDED
        self._notify()
        return ModerationListOutput(blogs=page.blogs, pagination=page.pagination, success=True)

    async def delete_blog(self, blog_id: str) -> RemovalOutput:
        error = self._deny()
        if error:
            return RemovalOutput(target_id=blog_id, success=False, error=error)

        self.action = PENDING
        self._notify()
        try:
            await self.gateway.send("DELETE", f"/admin/blogs/{blog_id}")
        except HttpError as e:
            self.action = failed(e.message)
            self._notify()
            return RemovalOutput(target_id=blog_id, success=False, error=e.message)

        self.blogs = self.blogs.model_copy(
            update={"blogs": [b for b in self.blogs.blogs if b.id != blog_id]}
        )
        self.posts.evict(blog_id)
        self.action = SUCCEEDED
        self._notify()
        logger.info("Removed blog %s", blog_id)
        return RemovalOutput(target_id=blog_id, success=True)

    # --- Status ---

    def discard(self) -> None:
        """Forget everything loaded; used when the signed-in user changes."""
        self._stats_seq.next()
        self._users_seq.next()
        self._blogs_seq.next()
        self.stats = None
        self.users = []
        self.blogs = BlogPage(pagination=Pagination(limit=self.default_limit))
        self.reset_status()

    def reset_status(self) -> None:
        self.dashboard = IDLE
        self.roster = IDLE
        self.moderation = IDLE
        self.action = IDLE
        self._notify()


def _message(error: Exception, fallback: str) -> str:
    if isinstance(error, HttpError):
        return error.message or fallback
    return fallback
