"""Object-store browsing: one-level listings with bounded folder counts.

A listing of one level issues one delimiter listing (possibly several pages)
plus, for every child folder, a recursive count that stops at
``FOLDER_COUNT_CAP`` objects. The total recursive count is the sum of those
numbers, so it is only as exact as the capped folder counts.
"""
import logging
from typing import Iterator, Optional, Union

from ...base import BaseObjectStore, FolderSummary, ListingResult, ListPage, ObjectEntry, ObjectStat
from ..config import settings

logger = logging.getLogger(__name__)

FOLDER_COUNT_CAP = 1000
DELIMITER = "/"


def normalize_prefix(path: Optional[str]) -> str:
    """Folder prefix for a user-supplied path: no leading "/", one trailing "/"."""
    prefix = (path or "").strip().lstrip("/")
    if prefix and not prefix.endswith(DELIMITER):
        prefix += DELIMITER
    return prefix


class S3Browser:
    """Browse one bucket through an object-store client owned by the caller."""

    def __init__(self, store: BaseObjectStore, folder_count_cap: Optional[int] = None):
        self.store = store
        self.folder_count_cap = folder_count_cap or settings.FOLDER_COUNT_CAP or FOLDER_COUNT_CAP

    def _pages(self, bucket: str, prefix: str, delimiter: Optional[str] = None) -> Iterator[ListPage]:
        """Yield listing pages until the store stops returning a continuation token."""
        token = None
        while True:
            page = self.store.list_page(bucket, prefix=prefix, delimiter=delimiter, continuation_token=token)
            yield page
            token = page.next_token
            if not token:
                return

    def list_level(self, bucket: str, prefix: str = "") -> ListingResult:
        """
        List the immediate children of ``prefix``

        Args:
            bucket: Bucket name
            prefix: Folder prefix ("" for the bucket root)

        Returns:
            ListingResult with files at this level and counted child folders
        """
        prefix = prefix or ""
        files: list[ObjectEntry] = []
        folder_prefixes: list[str] = []
        seen_prefixes = set()

        for page in self._pages(bucket, prefix, delimiter=DELIMITER):
            files.extend(entry for entry in page.objects if entry.key != prefix)
            for folder in page.prefixes:
                if folder != prefix and folder not in seen_prefixes:
                    seen_prefixes.add(folder)
                    folder_prefixes.append(folder)

        folders = [self.count_folder(bucket, folder) for folder in folder_prefixes]
        result = ListingResult(files=files, folders=folders)

        logger.info(
            f"Listed s3://{bucket}/{prefix}: {len(files)} file(s), {len(folders)} folder(s), "
            f"{result.total_recursive_file_count} file(s) recursively"
        )
        return result

    def count_folder(self, bucket: str, folder_prefix: str) -> FolderSummary:
        """
        Count the objects under a folder, stopping at the configured cap

        Returns:
            FolderSummary whose count is exact unless ``count_is_capped`` is set
        """
        count = 0
        for page in self._pages(bucket, folder_prefix):
            count += sum(1 for entry in page.objects if entry.key != folder_prefix)
            if count >= self.folder_count_cap:
                logger.debug(f"Folder count for {folder_prefix} capped at {self.folder_count_cap}")
                return FolderSummary(prefix=folder_prefix, file_count=self.folder_count_cap, count_is_capped=True)
        return FolderSummary(prefix=folder_prefix, file_count=count, count_is_capped=False)

    def list_all(self, bucket: str, prefix: str = "") -> list[ObjectEntry]:
        """
        List every object under ``prefix`` recursively, without a cap

        Returns:
            All entries, each key exactly once, in listing order
        """
        prefix = prefix or ""
        entries: list[ObjectEntry] = []
        seen = set()
        for page in self._pages(bucket, prefix):
            for entry in page.objects:
                if entry.key == prefix or entry.key in seen:
                    continue
                seen.add(entry.key)
                entries.append(entry)

        logger.info(f"Listed {len(entries)} object(s) under s3://{bucket}/{prefix}")
        return entries

    def fetch_metadata(self, bucket: str, keys: list[str]) -> dict[str, Union[ObjectStat, str]]:
        """
        Look up metadata for each key independently

        Returns:
            Mapping of key to ObjectStat, or to an "Error: <text>" string for
            keys whose lookup failed
        """
        metadata: dict[str, Union[ObjectStat, str]] = {}
        for key in keys:
            try:
                metadata[key] = self.store.stat_object(bucket, key)
            except Exception as e:
                logger.warning(f"Failed to get metadata for s3://{bucket}/{key}: {e}")
                metadata[key] = f"Error: {e}"
        return metadata
