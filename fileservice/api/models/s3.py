"""Models related to S3 browsing and imports"""
from typing import Optional
from pydantic import BaseModel


class S3Request(BaseModel):
    """S3 connection, location and selection"""
    accessKey: str
    secretKey: str
    bucket: str = ""
    path: Optional[str] = None
    files: list[str] = []
    region: Optional[str] = None
    endpoint: Optional[str] = None
    jobId: Optional[str] = None


class S3ListResponse(BaseModel):
    """One directory level of a bucket"""
    files: list[str]
    folders: list[str]
    fileSizes: dict[str, int]
    folderFileCounts: dict[str, int]
    folderCountCapped: dict[str, bool]
    recursiveFileCount: int


class S3AllFilesResponse(BaseModel):
    files: list[str]
