"""Pydantic models"""
from .s3 import S3Request, S3ListResponse, S3AllFilesResponse
from .postgres import PostgresRequest, PostgresListResponse, PostgresAllResponse, TableSchemaResponse, TableSampleResponse
from .progress import ImportJobResponse, ImportProgressResponse, ActiveImportsResponse

__all__ = [
    "S3Request",
    "S3ListResponse",
    "S3AllFilesResponse",
    "PostgresRequest",
    "PostgresListResponse",
    "PostgresAllResponse",
    "TableSchemaResponse",
    "TableSampleResponse",
    "ImportJobResponse",
    "ImportProgressResponse",
    "ActiveImportsResponse",
]
