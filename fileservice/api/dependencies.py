"""Application-scoped services and per-request client factories.

The job registry, import worker and local store are created once per
application in the lifespan and kept on ``app.state``. Data-source clients are
created per call through factories so that tests can override them.
"""
import logging
from typing import Callable

from fastapi import FastAPI, Request

from ..base import BaseObjectStore, BaseRelationalClient
from .config import settings
from .import_progress import ImportJobRegistry
from .local_storage import LocalFileStore
from .minio_client import MinIOClient
from .models import PostgresRequest, S3Request
from .postgres_client import PostgresClient
from .services.import_worker import ImportWorker

logger = logging.getLogger(__name__)

ObjectStoreFactory = Callable[[S3Request], BaseObjectStore]
RelationalClientFactory = Callable[[PostgresRequest], BaseRelationalClient]


def initialize_services(app: FastAPI) -> None:
    registry = ImportJobRegistry(retention_seconds=settings.JOB_RETENTION_SECONDS)
    app.state.job_registry = registry
    app.state.import_worker = ImportWorker(registry, max_workers=settings.IMPORT_MAX_WORKERS)
    app.state.local_store = LocalFileStore(settings.upload_path)
    logger.info(
        f"✓ Services initialized (storage: {settings.upload_path}, "
        f"import workers: {settings.IMPORT_MAX_WORKERS})"
    )


def cleanup_services(app: FastAPI) -> None:
    worker = getattr(app.state, "import_worker", None)
    if worker is not None:
        worker.shutdown(wait=False)
    logger.info("✓ Services shut down")


def create_object_store(request: S3Request) -> BaseObjectStore:
    return MinIOClient(
        access_key=request.accessKey,
        secret_key=request.secretKey,
        region=request.region,
        endpoint=request.endpoint,
    )


def create_relational_client(request: PostgresRequest) -> BaseRelationalClient:
    return PostgresClient(
        host=request.host,
        port=request.port,
        database=request.database,
        username=request.username,
        password=request.password,
    )


def get_object_store_factory() -> ObjectStoreFactory:
    return create_object_store


def get_relational_client_factory() -> RelationalClientFactory:
    return create_relational_client


def get_job_registry(request: Request) -> ImportJobRegistry:
    return request.app.state.job_registry


def get_import_worker(request: Request) -> ImportWorker:
    return request.app.state.import_worker


def get_local_store(request: Request) -> LocalFileStore:
    return request.app.state.local_store
