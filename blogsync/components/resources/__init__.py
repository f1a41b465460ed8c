"""
Resources component - Blog listings, detail record and owned posts.

Keeps the All items, Current item and Owned items views consistent under
concurrent fetches and create/update/delete.
"""

from .component import (
    ResourceStore,
    merge_record,
    unique_ids,
    validate_draft,
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
from .ports import GatewayPort, SessionReaderPort

__all__ = [
    # Component
    "ResourceStore",
    # Pure functions
    "merge_record",
    "unique_ids",
    "validate_draft",
    # Models
    "BlogChanges",
    "BlogDraft",
    "BlogFilter",
    "BlogListOutput",
    "BlogOutput",
    "CategoryListOutput",
    "DeleteOutput",
    # Ports
    "GatewayPort",
    "SessionReaderPort",
]
