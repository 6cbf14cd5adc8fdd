"""File service: browse object stores and relational sources, import into local storage."""

from .base import (
    BaseObjectStore,
    BaseRelationalClient,
    FolderSummary,
    ListingResult,
    ListPage,
    ObjectEntry,
    ObjectStat,
    TableData,
)

__version__ = "1.0.0"

__all__ = [
    "BaseObjectStore",
    "BaseRelationalClient",
    "FolderSummary",
    "ListingResult",
    "ListPage",
    "ObjectEntry",
    "ObjectStat",
    "TableData",
]
