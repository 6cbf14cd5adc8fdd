import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import settings
from ..dependencies import (
    RelationalClientFactory,
    get_import_worker,
    get_job_registry,
    get_local_store,
    get_relational_client_factory,
)
from ..exceptions import FileServiceError, ValidationError
from ..import_progress import ImportJobRegistry
from ..local_storage import LocalFileStore
from ..models import (
    ImportJobResponse,
    PostgresAllResponse,
    PostgresListResponse,
    PostgresRequest,
    TableSampleResponse,
    TableSchemaResponse,
)
from ..services.error_classifier import classify_relational_error
from ..services.import_worker import ImportWorker, make_table_transfer
from ..services.postgres_browser import PostgresBrowser, split_table_name

logger = logging.getLogger(__name__)
router = APIRouter()


def _describe(request: PostgresRequest) -> str:
    return f"{request.username}@{request.host}:{request.port}/{request.database}"


@router.post("/list-postgres", response_model=PostgresListResponse)
def list_postgres(
    request: PostgresRequest,
    client_factory: RelationalClientFactory = Depends(get_relational_client_factory),
):
    """List user schemas and their tables and views"""
    try:
        with client_factory(request) as client:
            return PostgresBrowser(client).list_contents()

    except (HTTPException, FileServiceError):
        raise
    except Exception as e:
        logger.error(f"List PostgreSQL error for {_describe(request)}: {str(e)}", exc_info=True)
        raise classify_relational_error(e) from e


@router.post("/list-postgres-all", response_model=PostgresAllResponse)
def list_postgres_all(
    request: PostgresRequest,
    client_factory: RelationalClientFactory = Depends(get_relational_client_factory),
):
    """List tables and views of the requested schema, or of every user schema"""
    schema = (request.schema_name or "").strip()
    try:
        with client_factory(request) as client:
            browser = PostgresBrowser(client)
            files = browser.get_database_objects([schema] if schema else None)
        return {"files": files}

    except (HTTPException, FileServiceError):
        raise
    except Exception as e:
        logger.error(f"List all PostgreSQL objects error for {_describe(request)}: {str(e)}", exc_info=True)
        raise classify_relational_error(e) from e


@router.post("/postgres-table-schema", response_model=TableSchemaResponse)
def postgres_table_schema(
    request: PostgresRequest,
    client_factory: RelationalClientFactory = Depends(get_relational_client_factory),
):
    """Get column metadata of one table"""
    schema, table = split_table_name(request.table or "", request.schema_name)
    try:
        with client_factory(request) as client:
            return PostgresBrowser(client).get_table_schema(schema, table)

    except (HTTPException, FileServiceError):
        raise
    except Exception as e:
        logger.error(f"Table schema error for {schema}.{table}: {str(e)}", exc_info=True)
        raise classify_relational_error(e) from e


@router.post("/postgres-table-sample", response_model=TableSampleResponse)
def postgres_table_sample(
    request: PostgresRequest,
    limit: Optional[int] = Query(default=None, ge=1),
    client_factory: RelationalClientFactory = Depends(get_relational_client_factory),
):
    """Get the column names and the first ``limit`` rows of one table"""
    schema, table = split_table_name(request.table or "", request.schema_name)
    limit = min(limit or settings.TABLE_SAMPLE_DEFAULT_LIMIT, settings.TABLE_EXPORT_ROW_LIMIT)
    try:
        with client_factory(request) as client:
            return PostgresBrowser(client).get_table_sample(schema, table, limit)

    except (HTTPException, FileServiceError):
        raise
    except Exception as e:
        logger.error(f"Table sample error for {schema}.{table}: {str(e)}", exc_info=True)
        raise classify_relational_error(e) from e


@router.post("/load-postgres-progress", status_code=202, response_model=ImportJobResponse)
def load_postgres_progress(
    request: PostgresRequest,
    registry: ImportJobRegistry = Depends(get_job_registry),
    worker: ImportWorker = Depends(get_import_worker),
    local_store: LocalFileStore = Depends(get_local_store),
    client_factory: RelationalClientFactory = Depends(get_relational_client_factory),
):
    """
    Export the selected tables to local CSV files in the background

    Each table is stored as "<schema>.<table>.csv" with at most
    TABLE_EXPORT_ROW_LIMIT rows. Returns the job ID immediately.
    """
    items = list(request.tables)
    if not items:
        raise ValidationError("No tables selected for import")
    for item in items:
        split_table_name(item, request.schema_name)

    job_id = registry.create(len(items), job_id=request.jobId)
    worker.submit(
        job_id,
        items,
        open_source=lambda: client_factory(request),
        transfer=make_table_transfer(local_store, request.schema_name, settings.TABLE_EXPORT_ROW_LIMIT),
    )
    logger.info(f"Started PostgreSQL import job {job_id[:8]}: {len(items)} table(s) from {_describe(request)}")
    return {"jobId": job_id, "total": len(items), "message": "Import started"}
