"""Application configurations."""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


project_root = Path(__file__).parent.parent.parent
env_path = project_root / ".env"
load_dotenv(env_path)


class Settings(BaseSettings):
    """Settings of the file service API."""
    APP_TITLE: str = "File Service - Data Import API"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Browse S3 buckets and PostgreSQL databases and import data into local storage"
    PROJECT_ROOT: Path = project_root
    SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
    SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8080"))
    CORS_ORIGINS: list = ["http://localhost:3000"]
    LOG_LEVEL: str = os.getenv("FILESERVICE_LOG_LEVEL", "INFO")

    # Local storage
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")

    # Object store
    S3_DEFAULT_REGION: str = os.getenv("S3_DEFAULT_REGION", "eu-central-1")
    S3_DEFAULT_ENDPOINT: str = os.getenv("S3_DEFAULT_ENDPOINT", "s3.amazonaws.com")
    S3_SECURE: bool = os.getenv("S3_SECURE", "true").lower() == "true"
    FOLDER_COUNT_CAP: int = int(os.getenv("FOLDER_COUNT_CAP", "1000"))
    LIST_PAGE_SIZE: int = int(os.getenv("LIST_PAGE_SIZE", "1000"))

    # Relational source
    POSTGRES_CONNECT_TIMEOUT: int = int(os.getenv("POSTGRES_CONNECT_TIMEOUT", "10"))
    TABLE_EXPORT_ROW_LIMIT: int = int(os.getenv("TABLE_EXPORT_ROW_LIMIT", "10000"))
    TABLE_SAMPLE_DEFAULT_LIMIT: int = int(os.getenv("TABLE_SAMPLE_DEFAULT_LIMIT", "100"))

    # Import jobs
    IMPORT_MAX_WORKERS: int = int(os.getenv("IMPORT_MAX_WORKERS", "4"))
    # Unset keeps finished jobs for the lifetime of the process.
    JOB_RETENTION_SECONDS: Optional[float] = None

    @property
    def upload_path(self) -> Path:
        """Absolute local storage root."""
        path = Path(self.UPLOAD_DIR)
        if not path.is_absolute():
            path = self.PROJECT_ROOT / path
        return path

    class Config:
        env_file = str(env_path)
        case_sensitive = True
        extra = "ignore"


settings = Settings()
