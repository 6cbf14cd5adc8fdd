"""Exceptions raised by the file service."""
from typing import Optional


class FileServiceError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(FileServiceError):
    """Bad or missing request field, rejected before any I/O."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400)


class JobConflictError(FileServiceError):
    def __init__(self, job_id: str):
        super().__init__(f"Job '{job_id}' already exists", code="CONFLICT", status_code=409)


class JobStateError(FileServiceError):
    """A job update would break the job's progress invariants."""

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_JOB_STATE", status_code=409)


class InvalidFileNameError(FileServiceError):
    def __init__(self, filename: str, reason: str = "Invalid file path"):
        super().__init__(f"{reason}: {filename}", code="INVALID_FILE_NAME", status_code=400)


class DataSourceError(FileServiceError):
    """Classified failure of an external data source (object store or database).

    ``detail`` keeps the original error text for diagnostics.
    """

    category = "InternalError"
    default_status = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message, code=self.category, status_code=self.default_status)
        self.detail = detail or message


class AuthError(DataSourceError):
    category = "AuthError"
    default_status = 401


class NotFoundError(DataSourceError):
    category = "NotFoundError"
    default_status = 404


class UnavailableError(DataSourceError):
    category = "UnavailableError"
    default_status = 503


class ForbiddenError(DataSourceError):
    category = "ForbiddenError"
    default_status = 403


class InternalError(DataSourceError):
    category = "InternalError"
    default_status = 500
