import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import (
    ObjectStoreFactory,
    get_import_worker,
    get_job_registry,
    get_local_store,
    get_object_store_factory,
)
from ..exceptions import FileServiceError, ValidationError
from ..import_progress import ImportJobRegistry
from ..local_storage import LocalFileStore
from ..models import ImportJobResponse, S3AllFilesResponse, S3ListResponse, S3Request
from ..services.error_classifier import classify_storage_error
from ..services.import_worker import ImportWorker, make_s3_transfer
from ..services.s3_browser import S3Browser, normalize_prefix

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_bucket(request: S3Request) -> str:
    bucket = (request.bucket or "").strip()
    if not bucket:
        raise ValidationError("Bucket name is required")
    return bucket


@router.post("/list-s3", response_model=S3ListResponse)
def list_s3(request: S3Request, store_factory: ObjectStoreFactory = Depends(get_object_store_factory)):
    """
    List one level of a bucket with per-folder file counts

    Folder counts stop at FOLDER_COUNT_CAP; ``folderCountCapped`` marks the
    folders whose count is a lower bound.
    """
    bucket = _require_bucket(request)
    prefix = normalize_prefix(request.path)
    try:
        with store_factory(request) as store:
            result = S3Browser(store).list_level(bucket, prefix)

        return {
            "files": [entry.key for entry in result.files],
            "folders": [folder.prefix for folder in result.folders],
            "fileSizes": {entry.key: entry.size for entry in result.files},
            "folderFileCounts": {folder.prefix: folder.file_count for folder in result.folders},
            "folderCountCapped": {folder.prefix: folder.count_is_capped for folder in result.folders},
            "recursiveFileCount": result.total_recursive_file_count,
        }

    except (HTTPException, FileServiceError):
        raise
    except Exception as e:
        logger.error(f"List S3 error for s3://{bucket}/{prefix}: {str(e)}", exc_info=True)
        raise classify_storage_error(e) from e


@router.post("/list-s3-all-files", response_model=S3AllFilesResponse)
def list_s3_all_files(request: S3Request, store_factory: ObjectStoreFactory = Depends(get_object_store_factory)):
    """List every object under the path recursively"""
    bucket = _require_bucket(request)
    prefix = normalize_prefix(request.path)
    try:
        with store_factory(request) as store:
            entries = S3Browser(store).list_all(bucket, prefix)
        return {"files": [entry.key for entry in entries]}

    except (HTTPException, FileServiceError):
        raise
    except Exception as e:
        logger.error(f"List all S3 files error for s3://{bucket}/{prefix}: {str(e)}", exc_info=True)
        raise classify_storage_error(e) from e


@router.post("/s3-metadata")
def s3_metadata(request: S3Request, store_factory: ObjectStoreFactory = Depends(get_object_store_factory)) -> Dict[str, Any]:
    """
    Get metadata of the selected objects

    A failed lookup only affects its own key, which maps to "Error: <text>".
    """
    bucket = _require_bucket(request)
    try:
        with store_factory(request) as store:
            metadata = S3Browser(store).fetch_metadata(bucket, request.files)
        return {
            key: value if isinstance(value, str) else value.to_dict()
            for key, value in metadata.items()
        }

    except (HTTPException, FileServiceError):
        raise
    except Exception as e:
        logger.error(f"S3 metadata error for bucket {bucket}: {str(e)}", exc_info=True)
        raise classify_storage_error(e) from e


@router.post("/load-s3-progress", status_code=202, response_model=ImportJobResponse)
def load_s3_progress(
    request: S3Request,
    registry: ImportJobRegistry = Depends(get_job_registry),
    worker: ImportWorker = Depends(get_import_worker),
    local_store: LocalFileStore = Depends(get_local_store),
    store_factory: ObjectStoreFactory = Depends(get_object_store_factory),
):
    """
    Import the selected objects into local storage in the background

    Returns the job ID immediately; poll /import-progress/{jobId} for status.
    """
    bucket = _require_bucket(request)
    items = list(request.files)
    if not items:
        raise ValidationError("No files selected for import")

    job_id = registry.create(len(items), job_id=request.jobId)
    worker.submit(
        job_id,
        items,
        open_source=lambda: store_factory(request),
        transfer=make_s3_transfer(bucket, local_store),
    )
    logger.info(f"Started S3 import job {job_id[:8]}: {len(items)} file(s) from bucket {bucket}")
    return {"jobId": job_id, "total": len(items), "message": "Import started"}
