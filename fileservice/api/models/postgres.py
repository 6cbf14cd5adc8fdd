"""Models related to PostgreSQL browsing and imports"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class PostgresRequest(BaseModel):
    """PostgreSQL connection and selection"""
    model_config = ConfigDict(populate_by_name=True)

    host: str
    port: int = 5432
    database: str
    username: str
    password: Optional[str] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")
    table: Optional[str] = None
    tables: list[str] = []
    jobId: Optional[str] = None


class PostgresListResponse(BaseModel):
    schemas: list[str]
    files: list[str]
    totalObjects: int


class PostgresAllResponse(BaseModel):
    files: list[str]


class ColumnInfo(BaseModel):
    name: str
    type: str
    nullable: str
    default: Optional[str] = None
    maxLength: Optional[str] = None


class TableSchemaResponse(BaseModel):
    table: str
    columns: list[ColumnInfo]


class TableSampleResponse(BaseModel):
    table: str
    columns: list[str]
    rows: list[dict[str, Any]]
    limit: int
