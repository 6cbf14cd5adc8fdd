import logging

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_job_registry
from ..import_progress import ImportJobRegistry
from ..models import ActiveImportsResponse, ImportProgressResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/import-progress/{job_id}", response_model=ImportProgressResponse)
def get_import_progress(job_id: str, registry: ImportJobRegistry = Depends(get_job_registry)):
    """
    Get the progress of an import job

    Args:
        job_id: ID returned when the import was submitted

    Returns:
        Snapshot with processed/total counts, status and message
    """
    job = registry.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Import job not found: {job_id}")
    return job.to_dict()


@router.post("/import-progress/{job_id}/cancel", response_model=ImportProgressResponse)
def cancel_import(job_id: str, registry: ImportJobRegistry = Depends(get_job_registry)):
    """
    Ask an import job to stop before its next item

    Pending jobs are cancelled immediately; finished jobs are returned as-is.
    """
    job = registry.request_cancel(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Import job not found: {job_id}")
    return job.to_dict()


@router.get("/active-imports", response_model=ActiveImportsResponse)
def get_active_imports(registry: ImportJobRegistry = Depends(get_job_registry)):
    """List import jobs that are still pending or in progress"""
    try:
        active_jobs = [job.to_dict() for job in registry.list_active()]
        logger.info(f"Found {len(active_jobs)} active import job(s)")
        return {"activeJobs": active_jobs, "total": len(active_jobs)}

    except Exception as e:
        logger.error(f"Get active imports error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
