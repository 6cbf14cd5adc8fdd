import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .exceptions import DataSourceError, FileServiceError

logger = logging.getLogger(__name__)


async def data_source_error_handler(request: Request, exc: DataSourceError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} failed with {exc.category}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.category, "message": exc.message, "detail": exc.detail},
    )


async def file_service_error_handler(request: Request, exc: FileServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


def register_exception_handlers(app):
    app.add_exception_handler(DataSourceError, data_source_error_handler)
    app.add_exception_handler(FileServiceError, file_service_error_handler)
