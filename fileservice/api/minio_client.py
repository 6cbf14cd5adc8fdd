import logging
from typing import Optional

import urllib3
from minio import Minio

from ..base import BaseObjectStore, ListPage, ObjectEntry, ObjectStat
from .config import settings

logger = logging.getLogger(__name__)

# Appended to a folder prefix so that ``start_after`` skips every key under it.
_PREFIX_SKIP_SUFFIX = "\U0010ffff"


def _is_common_prefix(obj, delimiter: Optional[str]) -> bool:
    """True for a rolled-up folder entry, False for a stored object.

    minio sets ``is_dir`` for any name ending in "/", including zero-length
    folder marker objects. Only delimiter listings return common prefixes, and
    those carry no ETag or modification time.
    """
    return delimiter is not None and obj.is_dir and obj.etag is None and obj.last_modified is None


class MinIOClient(BaseObjectStore):
    """
    S3-compatible object store client (AWS S3, MinIO) scoped to one request.

    MinIO's SDK paginates internally and does not expose continuation tokens,
    so pages are cut at ``page_size`` entries and the token handed back is the
    ``start_after`` marker for the next request.
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        region: Optional[str] = None,
        endpoint: Optional[str] = None,
        secure: Optional[bool] = None,
        page_size: Optional[int] = None,
    ):
        """
        Initialize MinIO client

        Args:
            access_key: Access key id
            secret_key: Secret access key
            region: Bucket region (defaults to S3_DEFAULT_REGION)
            endpoint: Server endpoint, e.g. "s3.amazonaws.com" or "localhost:9000"
            secure: Use HTTPS if True
            page_size: Maximum number of entries per listing page
        """
        region = (region or "").strip() or settings.S3_DEFAULT_REGION
        endpoint = (endpoint or "").strip() or settings.S3_DEFAULT_ENDPOINT
        secure = settings.S3_SECURE if secure is None else secure
        if endpoint.startswith(("http://", "https://")):
            secure = endpoint.startswith("https://")
            endpoint = endpoint.split("://", 1)[1]
        endpoint = endpoint.rstrip("/")

        logger.debug(
            f"Creating object store client for {endpoint} (region: {region}, "
            f"access key: {access_key[:4]}...)"
        )

        self._http = urllib3.PoolManager(
            timeout=urllib3.Timeout(connect=10, read=60),
            retries=urllib3.Retry(total=3, backoff_factor=0.2, status_forcelist=[500, 502, 503, 504]),
        )
        self.client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            region=region,
            secure=secure,
            http_client=self._http,
        )
        self.page_size = page_size or settings.LIST_PAGE_SIZE

    def list_page(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
    ) -> ListPage:
        """
        List one page of objects

        Args:
            bucket: Bucket name
            prefix: Key prefix to list under
            delimiter: "/" to collapse keys into folders, None to list recursively
            continuation_token: Token returned by the previous page

        Returns:
            ListPage with next_token set when more entries may follow
        """
        objects = self.client.list_objects(
            bucket,
            prefix=prefix or None,
            recursive=delimiter is None,
            start_after=continuation_token,
        )

        page = ListPage()
        last_name = None
        last_is_prefix = False
        for obj in objects:
            is_prefix = _is_common_prefix(obj, delimiter)
            if is_prefix:
                page.prefixes.append(obj.object_name)
            else:
                page.objects.append(ObjectEntry(key=obj.object_name, size=obj.size or 0))
            last_name = obj.object_name
            last_is_prefix = is_prefix
            if len(page.objects) + len(page.prefixes) >= self.page_size:
                break
        else:
            return page

        page.next_token = last_name + _PREFIX_SKIP_SUFFIX if last_is_prefix else last_name
        return page

    def get_object(self, bucket: str, key: str) -> bytes:
        """Download an object's content"""
        response = self.client.get_object(bucket, key)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def stat_object(self, bucket: str, key: str) -> ObjectStat:
        """Get size, last modified time, content type and ETag of an object"""
        stat = self.client.stat_object(bucket, key)
        return ObjectStat(
            size=stat.size or 0,
            last_modified=stat.last_modified,
            content_type=stat.content_type,
            etag=stat.etag.strip('"') if stat.etag else None,
        )

    def close(self) -> None:
        self._http.clear()
