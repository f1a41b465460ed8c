"""
Resource store input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from blogsync.domain.entities import Blog, BlogStatus, Category, Pagination

# --- Input Models ---


@dataclass(frozen=True)
class BlogFilter:
    """Query for a paginated blog view. Unset values are not sent."""

    search: str | None = None
    category: str | None = None
    page: int = 1
    limit: int = 10

    def to_query(self) -> dict[str, Any]:
        return {
            "search": self.search,
            "category": self.category,
            "page": self.page,
            "limit": self.limit,
        }


@dataclass(frozen=True)
class BlogDraft:
    """Fields for creating a blog post."""

    title: str
    content: str
    category: str
    excerpt: str = ""
    tags: tuple[str, ...] = ()
    featured_image: str = ""
    status: BlogStatus = "draft"

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title.strip(),
            "content": self.content,
            "excerpt": self.excerpt,
            "category": self.category,
            "tags": list(self.tags),
            "featuredImage": self.featured_image,
            "status": self.status,
        }


@dataclass(frozen=True)
class BlogChanges:
    """Changed fields for a blog update. Only set fields are sent."""

    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    category: str | None = None
    tags: tuple[str, ...] | None = None
    featured_image: str | None = None
    status: BlogStatus | None = None

    def to_payload(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "category": self.category,
            "tags": list(self.tags) if self.tags is not None else None,
            "featuredImage": self.featured_image,
            "status": self.status,
        }
        return {k: v for k, v in fields.items() if v is not None}


# --- Output Models ---


@dataclass
class BlogListOutput:
    blogs: list[Blog] = field(default_factory=list)
    pagination: Pagination | None = None
    success: bool = False
    error: str | None = None
    stale: bool = False  # Superseded by a newer request; view not updated


@dataclass
class BlogOutput:
    blog: Blog | None = None
    success: bool = False
    error: str | None = None
    stale: bool = False


@dataclass
class DeleteOutput:
    blog_id: str
    success: bool = False
    error: str | None = None


@dataclass
class CategoryListOutput:
    categories: list[Category] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    stale: bool = False
