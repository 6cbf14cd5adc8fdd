"""Router modules"""
from .s3 import router as s3_router
from .postgres import router as postgres_router
from .progress import router as progress_router
from .files import router as files_router

__all__ = [
    "s3_router",
    "postgres_router",
    "progress_router",
    "files_router",
]
