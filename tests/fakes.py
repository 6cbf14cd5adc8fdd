"""In-memory stand-ins for the object store and the relational client."""
import re
import threading
from typing import Any, Optional

from fileservice.base import BaseObjectStore, BaseRelationalClient, ListPage, ObjectEntry, ObjectStat


class FakeS3Error(Exception):
    """Carries an S3-style error code like minio's S3Error."""

    def __init__(self, code: str, message: str = ""):
        self.code = code
        super().__init__(f"{code}: {message or code}")


class FakeObjectStore(BaseObjectStore):
    """Paginating object store backed by a dict of key -> bytes.

    Continuation tokens are opaque offsets into the sorted listing.
    """

    def __init__(
        self,
        objects: Optional[dict[str, bytes]] = None,
        bucket: str = "test-bucket",
        page_size: int = 2,
        failing_keys: Optional[dict[str, Exception]] = None,
    ):
        self.objects = dict(objects or {})
        self.bucket = bucket
        self.page_size = page_size
        self.failing_keys = dict(failing_keys or {})
        self.list_calls: list[dict[str, Any]] = []
        self.closed = False
        self._lock = threading.Lock()

    def _check_bucket(self, bucket: str) -> None:
        if bucket != self.bucket:
            raise FakeS3Error("NoSuchBucket", f"The specified bucket does not exist: {bucket}")

    def _entries(self, prefix: str, delimiter: Optional[str]) -> list[tuple[str, bool, int]]:
        entries: dict[str, tuple[str, bool, int]] = {}
        for key, data in self.objects.items():
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                folder = prefix + rest.split(delimiter, 1)[0] + delimiter
                entries[folder] = (folder, True, 0)
            else:
                entries[key] = (key, False, len(data))
        return [entries[name] for name in sorted(entries)]

    def list_page(self, bucket, prefix="", delimiter=None, continuation_token=None) -> ListPage:
        self._check_bucket(bucket)
        with self._lock:
            self.list_calls.append({"prefix": prefix, "delimiter": delimiter, "token": continuation_token})

        entries = self._entries(prefix or "", delimiter)
        start = int(continuation_token) if continuation_token else 0
        chunk = entries[start:start + self.page_size]

        page = ListPage()
        for name, is_dir, size in chunk:
            if is_dir:
                page.prefixes.append(name)
            else:
                page.objects.append(ObjectEntry(key=name, size=size))
        if start + self.page_size < len(entries):
            page.next_token = str(start + self.page_size)
        return page

    def get_object(self, bucket: str, key: str) -> bytes:
        self._check_bucket(bucket)
        if key in self.failing_keys:
            raise self.failing_keys[key]
        if key not in self.objects:
            raise FakeS3Error("NoSuchKey", f"The specified key does not exist: {key}")
        return self.objects[key]

    def stat_object(self, bucket: str, key: str) -> ObjectStat:
        self._check_bucket(bucket)
        if key in self.failing_keys:
            raise self.failing_keys[key]
        if key not in self.objects:
            raise FakeS3Error("NoSuchKey", f"The specified key does not exist: {key}")
        return ObjectStat(size=len(self.objects[key]), last_modified=None, content_type="text/plain", etag="abc123")

    def close(self) -> None:
        self.closed = True


_SELECT_ALL = re.compile(r'FROM "((?:[^"]|"")*)"\."((?:[^"]|"")*)" LIMIT', re.IGNORECASE)


class FakeRelationalClient(BaseRelationalClient):
    """Relational client answering the browser's catalog queries from dicts.

    ``tables`` maps "schema.table" to (columns, rows).
    """

    def __init__(
        self,
        tables: Optional[dict[str, tuple[list[str], list[tuple]]]] = None,
        views: Optional[dict[str, list[str]]] = None,
        failing_tables: Optional[dict[str, Exception]] = None,
    ):
        self.tables = dict(tables or {})
        self.views = dict(views or {})
        self.failing_tables = dict(failing_tables or {})
        self.queries: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    def _schemas(self) -> list[str]:
        names = {name.split(".", 1)[0] for name in self.tables} | set(self.views)
        return sorted(names)

    def query(self, sql, params=None):
        params = params or {}
        self.queries.append((sql, params))

        if "information_schema.schemata" in sql:
            return ["schema_name"], [(schema,) for schema in self._schemas()]

        if "information_schema.tables" in sql:
            schema = params["schema"]
            names = sorted(name.split(".", 1)[1] for name in self.tables if name.split(".", 1)[0] == schema)
            return ["table_name"], [(name,) for name in names]

        if "information_schema.views" in sql:
            return ["table_name"], [(name,) for name in sorted(self.views.get(params["schema"], []))]

        if "information_schema.columns" in sql:
            key = f"{params['schema']}.{params['table']}"
            columns = self.tables[key][0] if key in self.tables else []
            if "data_type" in sql:
                return (
                    ["column_name", "data_type", "is_nullable", "column_default", "character_maximum_length"],
                    [(column, "text", "YES", None, None) for column in columns],
                )
            return ["column_name"], [(column,) for column in columns]

        match = _SELECT_ALL.search(sql)
        if match:
            schema, table = (part.replace('""', '"') for part in match.groups())
            key = f"{schema}.{table}"
            if key in self.failing_tables:
                raise self.failing_tables[key]
            columns, rows = self.tables[key]
            return list(columns), list(rows)[: params.get("limit", len(rows))]

        raise AssertionError(f"Unexpected query: {sql}")

    def close(self) -> None:
        self.closed = True
