"""Classify data-source connection failures into stable error categories.

Relational failures are matched on their message text. Patterns are tried in a
fixed order and the first hit wins, because one message can mention several
things (e.g. ``role "database" does not exist``).
"""
import logging
import re
from typing import Optional, Pattern, Type

from ..exceptions import (
    AuthError,
    DataSourceError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnavailableError,
)

logger = logging.getLogger(__name__)


# Order matters: first match wins.
RELATIONAL_ERROR_RULES: list[tuple[Pattern[str], Type[DataSourceError], str]] = [
    (re.compile(r"authentication failed"),
     AuthError, "Authentication failed: invalid username or password"),
    (re.compile(r'(role|user) "[^"]*" does not exist'),
     AuthError, "Authentication failed: unknown role"),
    (re.compile(r'database "[^"]*" does not exist'),
     NotFoundError, "Database not found"),
    (re.compile(r"connection refused|timeout|timed out|could not connect|"
                r"could not translate host name|network is unreachable"),
     UnavailableError, "Database server unavailable"),
    (re.compile(r"permission denied"),
     ForbiddenError, "Permission denied"),
]


# Error codes reported by S3-compatible stores.
STORAGE_ERROR_CODES: dict[str, Type[DataSourceError]] = {
    "InvalidAccessKeyId": AuthError,
    "SignatureDoesNotMatch": AuthError,
    "InvalidToken": AuthError,
    "ExpiredToken": AuthError,
    "NoSuchBucket": NotFoundError,
    "NoSuchKey": NotFoundError,
    "AccessDenied": ForbiddenError,
    "AllAccessDisabled": ForbiddenError,
}


def classify_relational_message(message: Optional[str]) -> Type[DataSourceError]:
    """Map a relational failure message to its error category class."""
    text = (message or "").lower()
    for pattern, error_cls, _ in RELATIONAL_ERROR_RULES:
        if pattern.search(text):
            return error_cls
    return InternalError


def classify_relational_error(exc: BaseException) -> DataSourceError:
    """Wrap a relational connection/query failure in its classified error."""
    if isinstance(exc, DataSourceError):
        return exc

    text = str(exc)
    lowered = text.lower()
    for pattern, error_cls, summary in RELATIONAL_ERROR_RULES:
        if pattern.search(lowered):
            return error_cls(summary, detail=text)
    return InternalError("Database error", detail=text)


def classify_storage_error(exc: BaseException) -> DataSourceError:
    """Wrap an object-store failure in its classified error."""
    if isinstance(exc, DataSourceError):
        return exc

    code = getattr(exc, "code", None)
    text = str(exc)
    error_cls = STORAGE_ERROR_CODES.get(code) if code else None
    if error_cls is not None:
        return error_cls(f"Object store error: {code}", detail=text)

    if isinstance(exc, (ConnectionError, TimeoutError)) or "max retries exceeded" in text.lower():
        return UnavailableError("Object store unavailable", detail=text)

    logger.debug(f"Unclassified object store error ({type(exc).__name__}): {text}")
    return InternalError("Object store error", detail=text)
