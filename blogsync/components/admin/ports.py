"""
Admin component ports.
"""

from __future__ import annotations

from typing import Protocol

from blogsync.ports.gateway import GatewayPort, HttpError
from blogsync.ports.session import SessionReaderPort


class PostCachePort(Protocol):
    """Views of posts held elsewhere that must forget moderated posts."""

    def evict(self, *blog_ids: str) -> None: ...

    def evict_author(self, author_id: str) -> None: ...


__all__ = ["GatewayPort", "HttpError", "PostCachePort", "SessionReaderPort"]
