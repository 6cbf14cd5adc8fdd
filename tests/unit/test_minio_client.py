"""Tests for MinIOClient paging and metadata."""
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from minio.datatypes import Object

from fileservice.api.minio_client import MinIOClient
from fileservice.api.services.s3_browser import S3Browser

MODIFIED = datetime(2024, 5, 1, tzinfo=timezone.utc)


def obj(name, size=1):
    """A stored object, as minio parses it from <Contents>."""
    return Object("bucket", name, last_modified=MODIFIED, etag="e-" + name, size=size)


def common_prefix(name):
    """A rolled-up folder, as minio parses it from <CommonPrefixes>."""
    return Object("bucket", name)


def fake_listing(keys):
    """list_objects stand-in that answers like S3 for a fixed set of keys."""
    def list_objects(bucket, prefix=None, recursive=False, start_after=None):
        prefix = prefix or ""
        entries = {}
        for key in sorted(keys):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if not recursive and "/" in rest:
                folder = prefix + rest.split("/", 1)[0] + "/"
                entries[folder] = common_prefix(folder)
            else:
                entries[key] = obj(key, size=0 if key.endswith("/") else 1)
        return iter([entries[name] for name in sorted(entries) if start_after is None or name > start_after])
    return list_objects


@pytest.fixture
def mock_minio():
    with patch("fileservice.api.minio_client.Minio") as m:
        yield m


@pytest.fixture
def client(mock_minio) -> MinIOClient:
    mock_minio.return_value = MagicMock()
    return MinIOClient(access_key="AKIAEXAMPLE", secret_key="secret", page_size=2)


class TestConstruction:
    def test_defaults(self, mock_minio, client):
        kwargs = mock_minio.call_args.kwargs
        assert kwargs["endpoint"] == "s3.amazonaws.com"
        assert kwargs["region"] == "eu-central-1"

    def test_endpoint_scheme_sets_security(self, mock_minio):
        MinIOClient(access_key="k", secret_key="s", endpoint="http://localhost:9000/")

        kwargs = mock_minio.call_args.kwargs
        assert kwargs["endpoint"] == "localhost:9000"
        assert kwargs["secure"] is False


class TestListPage:
    def test_last_page_has_no_token(self, client):
        client.client.list_objects.return_value = iter([obj("a.txt")])

        page = client.list_page("bucket")

        assert [entry.key for entry in page.objects] == ["a.txt"]
        assert page.next_token is None

    def test_full_page_returns_start_after_token(self, client):
        client.client.list_objects.return_value = iter([obj("a.txt"), obj("b.txt"), obj("c.txt")])

        page = client.list_page("bucket")

        assert [entry.key for entry in page.objects] == ["a.txt", "b.txt"]
        assert page.next_token == "b.txt"

    def test_token_is_passed_as_start_after(self, client):
        client.client.list_objects.return_value = iter([])

        client.list_page("bucket", prefix="p/", continuation_token="p/b.txt")

        client.client.list_objects.assert_called_once_with(
            "bucket", prefix="p/", recursive=True, start_after="p/b.txt"
        )

    def test_delimiter_listing_collects_prefixes(self, client):
        client.client.list_objects.return_value = iter([obj("a.txt"), common_prefix("dir/"), obj("z.txt")])

        page = client.list_page("bucket", delimiter="/")

        assert page.prefixes == ["dir/"]
        assert client.client.list_objects.call_args.kwargs["recursive"] is False
        # A folder token skips every key under the folder.
        assert page.next_token.startswith("dir/")
        assert page.next_token > "dir/zzzz"


class TestObjects:
    def test_get_object_releases_connection(self, client):
        response = MagicMock()
        response.read.return_value = b"content"
        client.client.get_object.return_value = response

        assert client.get_object("bucket", "a.txt") == b"content"
        response.close.assert_called_once()
        response.release_conn.assert_called_once()

    def test_stat_object(self, client):
        modified = datetime(2024, 5, 1, tzinfo=timezone.utc)
        client.client.stat_object.return_value = SimpleNamespace(
            size=42, last_modified=modified, content_type="text/csv", etag='"abc"'
        )

        stat = client.stat_object("bucket", "a.csv")

        assert stat.to_dict() == {
            "size": 42,
            "lastModified": modified.isoformat(),
            "contentType": "text/csv",
            "etag": "abc",
        }


class TestFolderMarkers:
    MARKER_KEYS = ["dir/", "dir/a.txt", "dir/b.txt", "dir/sub/", "dir/sub/c.txt"]

    def test_marker_in_delimiter_listing_is_an_object(self, client):
        client.client.list_objects.return_value = iter([obj("dir/", size=0), obj("dir/a.txt"), common_prefix("dir/sub/")])
        client.page_size = 10

        page = client.list_page("bucket", prefix="dir/", delimiter="/")

        assert [entry.key for entry in page.objects] == ["dir/", "dir/a.txt"]
        assert page.prefixes == ["dir/sub/"]

    def test_recursive_listing_never_yields_prefixes(self, client):
        client.client.list_objects.return_value = iter([obj("dir/sub/", size=0), obj("dir/sub/c.txt")])

        page = client.list_page("bucket", prefix="dir/")

        assert page.prefixes == []
        assert [entry.key for entry in page.objects] == ["dir/sub/", "dir/sub/c.txt"]

    def test_marker_token_does_not_skip_folder_contents(self, client):
        client.client.list_objects.return_value = iter([obj("a/"), obj("a/x.txt"), obj("b.txt")])
        client.page_size = 1

        page = client.list_page("bucket")

        assert page.next_token == "a/"

    def test_list_level_excludes_prefix_marker(self, client):
        client.client.list_objects.side_effect = fake_listing(self.MARKER_KEYS)

        result = S3Browser(client).list_level("bucket", "dir/")

        assert [entry.key for entry in result.files] == ["dir/a.txt", "dir/b.txt"]
        assert [folder.prefix for folder in result.folders] == ["dir/sub/"]
        assert result.folders[0].file_count == 1
        assert result.total_recursive_file_count == 3

    def test_list_level_across_pages(self, client):
        client.client.list_objects.side_effect = fake_listing(self.MARKER_KEYS)
        client.page_size = 1

        result = S3Browser(client).list_level("bucket", "dir/")

        assert [entry.key for entry in result.files] == ["dir/a.txt", "dir/b.txt"]
        assert [folder.prefix for folder in result.folders] == ["dir/sub/"]

    def test_list_all_keeps_nested_markers(self, client):
        client.client.list_objects.side_effect = fake_listing(self.MARKER_KEYS)

        entries = S3Browser(client).list_all("bucket", "dir/")

        assert [entry.key for entry in entries] == ["dir/a.txt", "dir/b.txt", "dir/sub/", "dir/sub/c.txt"]
