"""
File service API module.

This module provides the FastAPI application for browsing S3 buckets and
PostgreSQL databases and importing their data into local storage.

Usage:
    # Method 1: Direct uvicorn
    uvicorn fileservice.api.main:app --port 8080

    # Method 2: Module execution
    python -m fileservice.api
"""


def get_app():
    """Deferred import to avoid initialization order issues"""
    from .main import app
    return app


def __getattr__(name):
    if name == "app":
        from .main import app
        return app
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ["get_app"]
