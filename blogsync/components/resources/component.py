"""
Resources component - Client-side views over blog posts.

Views held at the same time:
- All items: filtered, paginated listing (`items`, `pagination`)
- Current item: one post shown in detail (`current`)
- Owned items: the signed-in user's posts (`mine`, `mine_pagination`)

Invariants:
- Every view resolves ids through one identity map, so a given id has
  exactly one record no matter how many views show it
- Only the newest request of a view may write into that view; older
  responses are discarded when they land
- A failed refresh leaves loaded data intact, except `get_by_id`, which
  clears the current item so a not-found state can render
- Delete removes the id from All items and Owned items together and
  leaves the current item alone
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from blogsync.domain.entities import Blog, BlogPage, Category, Pagination
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
    BlogChanges,
    BlogDraft,
    BlogFilter,
    BlogListOutput,
    BlogOutput,
    CategoryListOutput,
    DeleteOutput,
)
from .ports import GatewayPort, HttpError, SessionReaderPort

logger = logging.getLogger(__name__)

AUTH_REQUIRED = "Authentication required"


# --- Pure Functions ---


def validate_draft(draft: BlogDraft) -> str | None:
    if not draft.title.strip() or not draft.content.strip() or not draft.category:
        return "Please fill in all required fields"
    return None


def merge_record(existing: Blog | None, incoming: Blog) -> Blog:
    """
    Fold a server record into the one already held for the same id.

    Fields present in the response win; fields the response left out (for
    example a listing that omits `content`) keep their known value.
    """
    if existing is None or existing.id != incoming.id:
        return incoming
    updates = {name: getattr(incoming, name) for name in incoming.model_fields_set}
    return existing.model_copy(update=updates)


def unique_ids(blogs: list[Blog]) -> list[str]:
    seen: set[str] = set()
    ids: list[str] = []
    for blog in blogs:
        if blog.id not in seen:
            seen.add(blog.id)
            ids.append(blog.id)
    return ids


# --- Component ---


class ResourceStore(Observable):
    """Owns every blog post the client has loaded."""

    def __init__(
        self,
        gateway: GatewayPort,
        session: SessionReaderPort,
        *,
        default_limit: int = 10,
    ) -> None:
        super().__init__()
        self.gateway = gateway
        self.session = session
        self.default_limit = default_limit

        self._records: dict[str, Blog] = {}
        self._item_ids: list[str] = []
        self._mine_ids: list[str] = []
        self._current_id: str | None = None

        self.pagination = Pagination(limit=default_limit)
        self.mine_pagination = Pagination(limit=default_limit)
        self.filter = BlogFilter(limit=default_limit)
        self.mine_filter = BlogFilter(limit=default_limit)
        self.categories: list[Category] = []

        self.listing: OperationState = IDLE
        self.detail: OperationState = IDLE
        self.owned: OperationState = IDLE
        self.mutation: OperationState = IDLE
        self.taxonomy: OperationState = IDLE

        self._list_seq = RequestSequence()
        self._mine_seq = RequestSequence()
        self._detail_seq = RequestSequence()
        self._category_seq = RequestSequence()

    # --- Views ---

    @property
    def items(self) -> list[Blog]:
        return [self._records[i] for i in self._item_ids]

    @property
    def mine(self) -> list[Blog]:
        return [self._records[i] for i in self._mine_ids]

    @property
    def current(self) -> Blog | None:
        if self._current_id is None:
            return None
        return self._records.get(self._current_id)

    # --- Identity map ---

    def _remember(self, blog: Blog) -> Blog:
        merged = merge_record(self._records.get(blog.id), blog)
        self._records[blog.id] = merged
        return merged

    def _prune(self) -> None:
        referenced = set(self._item_ids) | set(self._mine_ids)
        if self._current_id is not None:
            referenced.add(self._current_id)
        self._records = {k: v for k, v in self._records.items() if k in referenced}

    def _require_user(self) -> str | None:
        return None if self.session.user is not None else AUTH_REQUIRED

    # --- Listings ---

    async def list_blogs(self, flt: BlogFilter | None = None) -> BlogListOutput:
        """Load one page of All items for the given filter."""
        flt = flt or BlogFilter(limit=self.default_limit)
        ticket = self._list_seq.next()
        self.filter = flt
        self.listing = PENDING
        self._notify()

        try:
            page = await self._fetch_page("/blogs", flt.to_query())
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to fetch blogs")
            if not self._list_seq.is_latest(ticket):
                return BlogListOutput(success=False, error=message, stale=True)
            self.listing = failed(message)
            self._notify()
            return BlogListOutput(success=False, error=message)

        if not self._list_seq.is_latest(ticket):
            logger.debug("Discarding stale blog listing for %s", flt)
            return BlogListOutput(
                blogs=page.blogs, pagination=page.pagination, success=True, stale=True
            )

        for blog in page.blogs:
            self._remember(blog)
        self._item_ids = unique_ids(page.blogs)
        self.pagination = page.pagination
        self.listing = SUCCEEDED
        self._prune()
        self._notify()
        return BlogListOutput(blogs=self.items, pagination=page.pagination, success=True)

    async def get_mine(self, flt: BlogFilter | None = None) -> BlogListOutput:
        """Load one page of Owned items for the signed-in user."""
        error = self._require_user()
        if error:
            self.owned = failed(error)
            self._notify()
            return BlogListOutput(success=False, error=error)

        flt = flt or BlogFilter(limit=self.default_limit)
        ticket = self._mine_seq.next()
        self.mine_filter = flt
        self.owned = PENDING
        self._notify()

        query = {"page": flt.page, "limit": flt.limit}
        try:
            page = await self._fetch_page("/blogs/my", query)
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to fetch my blogs")
            if not self._mine_seq.is_latest(ticket):
                return BlogListOutput(success=False, error=message, stale=True)
            self.owned = failed(message)
            self._notify()
            return BlogListOutput(success=False, error=message)

        if not self._mine_seq.is_latest(ticket):
            logger.debug("Discarding stale owned listing for %s", flt)
            return BlogListOutput(
                blogs=page.blogs, pagination=page.pagination, success=True, stale=True
            )

        for blog in page.blogs:
            self._remember(blog)
        self._mine_ids = unique_ids(page.blogs)
        self.mine_pagination = page.pagination
        self.owned = SUCCEEDED
        self._prune()
        self._notify()
        return BlogListOutput(blogs=self.mine, pagination=page.pagination, success=True)

    def forget_owned(self) -> None:
        """Drop the Owned items view; its posts belong to the previous user."""
        self._mine_seq.next()
        self._mine_ids = []
        self.mine_pagination = Pagination(limit=self.default_limit)
        self.mine_filter = BlogFilter(limit=self.default_limit)
        self.owned = IDLE
        self._prune()
        self._notify()

    async def _fetch_page(self, path: str, query: dict[str, Any]) -> BlogPage:
        payload = await self.gateway.send("GET", path, query=query)
        return BlogPage.model_validate(payload)

    # --- Single item ---

    async def get_by_id(self, blog_id: str) -> BlogOutput:
        ticket = self._detail_seq.next()
        self.detail = PENDING
        self._notify()

        try:
            payload = await self.gateway.send("GET", f"/blogs/{blog_id}")
            blog = Blog.model_validate(payload.get("blog"))
        except (HttpError, ValidationError) as e:
            message = _message(e, "Blog post not found")
            if not self._detail_seq.is_latest(ticket):
                return BlogOutput(success=False, error=message, stale=True)
            self._current_id = None
            self.detail = failed(message)
            self._prune()
            self._notify()
            return BlogOutput(success=False, error=message)

        if not self._detail_seq.is_latest(ticket):
            logger.debug("Discarding stale detail for %s", blog_id)
            return BlogOutput(blog=blog, success=True, stale=True)

        blog = self._remember(blog)
        self._current_id = blog.id
        self.detail = SUCCEEDED
        self._prune()
        self._notify()
        return BlogOutput(blog=blog, success=True)

    def clear_current(self) -> None:
        self._current_id = None
        self._prune()
        self._notify()

    # --- Mutations ---

    def _reject(self, message: str) -> None:
        self.mutation = failed(message)
        self._notify()

    async def create(self, draft: BlogDraft) -> BlogOutput:
        error = self._require_user() or validate_draft(draft)
        if error:
            self._reject(error)
            return BlogOutput(success=False, error=error)

        self.mutation = PENDING
        self._notify()
        try:
            payload = await self.gateway.send("POST", "/blogs", draft.to_payload())
            blog = Blog.model_validate(payload.get("blog"))
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to create blog")
            self._reject(message)
            return BlogOutput(success=False, error=message)

        blog = self._remember(blog)
        self._item_ids = [blog.id] + [i for i in self._item_ids if i != blog.id]
        self.mutation = SUCCEEDED
        self._notify()
        logger.info("Created blog %s", blog.id)
        return BlogOutput(blog=blog, success=True)

    async def update(self, blog_id: str, changes: BlogChanges) -> BlogOutput:
        error = self._require_user()
        body = changes.to_payload()
        if not error and not body:
            error = "No changes to save"
        if error:
            self._reject(error)
            return BlogOutput(success=False, error=error)

        self.mutation = PENDING
        self._notify()
        try:
            payload = await self.gateway.send("PUT", f"/blogs/{blog_id}", body)
            blog = Blog.model_validate(payload.get("blog"))
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to update blog")
            self._reject(message)
            return BlogOutput(success=False, error=message)

        # One record per id: every view holding it sees the new version.
        blog = self._remember(blog)
        self.mutation = SUCCEEDED
        self._prune()
        self._notify()
        return BlogOutput(blog=blog, success=True)

    async def delete(self, blog_id: str) -> DeleteOutput:
        error = self._require_user()
        if error:
            self._reject(error)
            return DeleteOutput(blog_id=blog_id, success=False, error=error)

        self.mutation = PENDING
        self._notify()
        try:
            await self.gateway.send("DELETE", f"/blogs/{blog_id}")
        except HttpError as e:
            self._reject(e.message)
            return DeleteOutput(blog_id=blog_id, success=False, error=e.message)

        self.mutation = SUCCEEDED
        self.evict(blog_id)
        logger.info("Deleted blog %s", blog_id)
        return DeleteOutput(blog_id=blog_id, success=True)

    def evict(self, *blog_ids: str) -> None:
        """Remove deleted posts from All items and Owned items; the current item stays."""
        gone = set(blog_ids)
        self._item_ids = [i for i in self._item_ids if i not in gone]
        self._mine_ids = [i for i in self._mine_ids if i not in gone]
        self._prune()
        self._notify()

    def evict_author(self, author_id: str) -> None:
        """Remove every held post written by a deleted user."""
        self.evict(*[b.id for b in self._records.values() if b.author_id == author_id])

    # --- Categories ---

    async def load_categories(self) -> CategoryListOutput:
        ticket = self._category_seq.next()
        self.taxonomy = PENDING
        self._notify()

        try:
            payload = await self.gateway.send("GET", "/categories")
            categories = [Category.model_validate(c) for c in payload.get("categories") or []]
        except (HttpError, ValidationError) as e:
            message = _message(e, "Failed to fetch categories")
            if not self._category_seq.is_latest(ticket):
                return CategoryListOutput(success=False, error=message, stale=True)
            self.taxonomy = failed(message)
            self._notify()
            return CategoryListOutput(success=False, error=message)

        if not self._category_seq.is_latest(ticket):
            return CategoryListOutput(categories=categories, success=True, stale=True)

        self.categories = categories
        self.taxonomy = SUCCEEDED
        self._notify()
        return CategoryListOutput(categories=categories, success=True)

    # --- Status ---

    def reset_status(self) -> None:
        """Forget pending/failed markers without touching loaded data."""
        self.listing = IDLE
        self.detail = IDLE
        self.owned = IDLE
        self.mutation = IDLE
        self.taxonomy = IDLE
        self._notify()


def _message(error: Exception, fallback: str) -> str:
    if isinstance(error, HttpError):
        return error.message or fallback
    return fallback
