"""Local file storage for imported and uploaded files."""
import logging
import os
from pathlib import Path
from typing import Union

from .exceptions import InvalidFileNameError

logger = logging.getLogger(__name__)

# Directory traversal patterns, plain and encoded.
TRAVERSAL_PATTERNS = (
    "..",
    "%2e%2e",
    "%252e%252e",
    "..%2f",
    "..%5c",
    "..\\",
    "..%c0%af",
    "..%c1%9c",
    "..%ef%bc%8f",
    "..%c0%2f",
    "..%c0%5c",
    "..%00",
)

WINDOWS_RESERVED_CHARS = ("<", ">", ":", '"', "|", "?", "*")

WINDOWS_RESERVED_NAMES = {
    "CON", "PRN", "AUX", "NUL",
    *(f"COM{i}" for i in range(1, 10)),
    *(f"LPT{i}" for i in range(1, 10)),
}


def is_valid_file_name(file_name: str) -> bool:
    """Check a relative storage name for traversal and platform-reserved parts.

    Args:
        file_name: Name relative to the storage root, "/" separated

    Returns:
        True if the name is safe to use
    """
    if not file_name:
        return False

    normalized = file_name.replace("\\", "/").lower()
    if any(pattern in normalized for pattern in TRAVERSAL_PATTERNS):
        return False

    if file_name.startswith(("/", "\\")) or (len(file_name) > 2 and file_name[1] == ":"):
        return False

    if any(ord(c) < 32 or ord(c) == 127 for c in file_name):
        return False

    if any(c in file_name for c in WINDOWS_RESERVED_CHARS):
        return False

    for part in normalized.split("/"):
        stem = part.split(".", 1)[0] if "." in part[1:] else part
        if stem.upper() in WINDOWS_RESERVED_NAMES:
            return False

    return True


class LocalFileStore:
    """
    Stores files under a root directory, preserving "/" separated folder structure
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, name: str) -> Path:
        if not is_valid_file_name(name):
            raise InvalidFileNameError(name)

        target = (self.root / name).resolve()
        if target != self.root and self.root not in target.parents:
            raise InvalidFileNameError(name, reason="Path traversal attack detected")
        return target

    def store(self, name: str, data: bytes) -> str:
        """
        Write bytes under the given name

        Returns:
            The stored name
        """
        target = self._resolve(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info(f"Stored file: {name} ({len(data)} bytes)")
        return name

    def retrieve(self, name: str) -> bytes:
        """
        Read a stored file

        Raises:
            FileNotFoundError: If nothing is stored under the name
        """
        target = self._resolve(name)
        if not target.is_file():
            raise FileNotFoundError(f"File not found: {name}")
        return target.read_bytes()

    def exists(self, name: str) -> bool:
        return self._resolve(name).is_file()

    def delete(self, name: str) -> bool:
        """Delete a stored file. Returns False if it did not exist."""
        target = self._resolve(name)
        if not target.is_file():
            return False
        target.unlink()
        logger.info(f"Deleted file: {name}")
        return True

    def list(self) -> list[str]:
        """List stored files relative to the root, "/" separated"""
        names = []
        for dirpath, _, filenames in os.walk(self.root):
            for filename in filenames:
                full = Path(dirpath) / filename
                names.append(full.relative_to(self.root).as_posix())
        return sorted(names)
