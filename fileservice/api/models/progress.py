"""Models related to import job progress"""
from typing import Optional
from pydantic import BaseModel


class ImportJobResponse(BaseModel):
    """Response to submitting an import job"""
    jobId: str
    total: int
    message: str = "Import started"


class ImportProgressResponse(BaseModel):
    """Snapshot of one import job"""
    jobId: str
    processed: int
    total: int
    status: str  # pending, in_progress, done, error, cancelled
    message: str
    failedItems: list[str] = []
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class ActiveImportsResponse(BaseModel):
    activeJobs: list[ImportProgressResponse]
    total: int
