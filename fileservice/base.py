"""Base classes and interfaces for the file service."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class ObjectEntry:
    """One object-store item."""

    key: str
    size: int


@dataclass
class ListPage:
    """One page of an object-store listing.

    ``prefixes`` is only populated for delimiter listings. A ``next_token`` of
    None means the store has no more pages.
    """

    objects: list[ObjectEntry] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    next_token: Optional[str] = None


@dataclass
class ObjectStat:
    """Metadata of a single stored object."""

    size: int
    last_modified: Optional[datetime]
    content_type: Optional[str]
    etag: Optional[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "lastModified": self.last_modified.isoformat() if self.last_modified else None,
            "contentType": self.content_type,
            "etag": self.etag,
        }


@dataclass(frozen=True)
class FolderSummary:
    """File count of one immediate child folder."""

    prefix: str
    file_count: int
    count_is_capped: bool = False


@dataclass
class ListingResult:
    """Result of listing one directory level."""

    files: list[ObjectEntry] = field(default_factory=list)
    folders: list[FolderSummary] = field(default_factory=list)

    @property
    def total_recursive_file_count(self) -> int:
        # Derived from the capped folder counts, never from a second walk.
        return len(self.files) + sum(folder.file_count for folder in self.folders)

    def __repr__(self) -> str:
        return (
            f"ListingResult(files={len(self.files)}, folders={len(self.folders)}, "
            f"total={self.total_recursive_file_count})"
        )


@dataclass
class TableData:
    """Column names and rows fetched from a relational table."""

    table: str
    columns: list[str]
    rows: list[tuple[Any, ...]] = field(default_factory=list)


class BaseObjectStore(ABC):
    """Remote object-store client. One instance per browse or import call."""

    @abstractmethod
    def list_page(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
    ) -> ListPage:
        """List one page of objects under ``prefix``."""
        pass

    @abstractmethod
    def get_object(self, bucket: str, key: str) -> bytes:
        """Fetch an object's bytes."""
        pass

    @abstractmethod
    def stat_object(self, bucket: str, key: str) -> ObjectStat:
        """Fetch an object's metadata."""
        pass

    def close(self) -> None:
        """Release the underlying connection."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class BaseRelationalClient(ABC):
    """Relational data source client. One instance per browse or import call."""

    @abstractmethod
    def query(self, sql: str, params: Optional[dict[str, Any]] = None) -> tuple[list[str], list[tuple[Any, ...]]]:
        """Run a SELECT-style query.

        Returns:
            Tuple of (column names, rows)
        """
        pass

    def close(self) -> None:
        """Release the underlying connection."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
