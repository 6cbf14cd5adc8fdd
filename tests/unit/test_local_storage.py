"""Tests for LocalFileStore and file name validation."""
import pytest

from fileservice.api.exceptions import InvalidFileNameError
from fileservice.api.local_storage import LocalFileStore, is_valid_file_name


class TestIsValidFileName:
    @pytest.mark.parametrize("name", ["report.csv", "dir/sub/file.txt", "public.users.csv", "a b.txt", ".hidden"])
    def test_valid(self, name):
        assert is_valid_file_name(name)

    @pytest.mark.parametrize(
        "name",
        [
            "",
            "../etc/passwd",
            "dir/../../x",
            "..\\windows",
            "%2e%2e/secret",
            "/etc/passwd",
            "\\server\\share",
            "C:\\temp\\x",
            "bad\x00name",
            "tab\tname",
            "what?.txt",
            "a<b>.txt",
            'quote".txt',
            "pipe|.txt",
            "star*.txt",
            "colon:name",
            "CON",
            "dir/nul.txt",
            "com1",
            "LPT9.log",
        ],
    )
    def test_invalid(self, name):
        assert not is_valid_file_name(name)


class TestLocalFileStore:
    def test_store_and_retrieve(self, local_store: LocalFileStore):
        assert local_store.store("hello.txt", b"hi") == "hello.txt"
        assert local_store.retrieve("hello.txt") == b"hi"

    def test_store_creates_folders(self, local_store: LocalFileStore):
        local_store.store("a/b/c.txt", b"deep")
        assert (local_store.root / "a" / "b" / "c.txt").read_bytes() == b"deep"

    def test_store_overwrites(self, local_store: LocalFileStore):
        local_store.store("x.txt", b"1")
        local_store.store("x.txt", b"2")
        assert local_store.retrieve("x.txt") == b"2"

    def test_retrieve_missing(self, local_store: LocalFileStore):
        with pytest.raises(FileNotFoundError):
            local_store.retrieve("nope.txt")

    def test_rejects_traversal(self, local_store: LocalFileStore):
        with pytest.raises(InvalidFileNameError):
            local_store.store("../escape.txt", b"x")
        assert not (local_store.root.parent / "escape.txt").exists()

    def test_delete(self, local_store: LocalFileStore):
        local_store.store("gone.txt", b"x")
        assert local_store.delete("gone.txt") is True
        assert local_store.delete("gone.txt") is False
        assert not local_store.exists("gone.txt")

    def test_list_is_sorted_and_relative(self, local_store: LocalFileStore):
        local_store.store("b.txt", b"")
        local_store.store("a/z.txt", b"")
        local_store.store("a.txt", b"")

        assert local_store.list() == ["a.txt", "a/z.txt", "b.txt"]

    def test_list_empty(self, local_store: LocalFileStore):
        assert local_store.list() == []
