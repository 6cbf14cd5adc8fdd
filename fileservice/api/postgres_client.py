"""PostgreSQL client used for browsing and table imports.

⚠️ SQL Injection Prevention:
- Values are always passed as bound parameters
- Identifiers (schema/table names) are quoted with ``quote_identifier``, never
  concatenated raw
"""
import logging
from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.pool import NullPool

from ..base import BaseRelationalClient
from .config import settings

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier, doubling embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


class PostgresClient(BaseRelationalClient):
    """Single-connection PostgreSQL client, opened on construction."""

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        username: str,
        password: Optional[str] = None,
        connect_timeout: Optional[int] = None,
    ):
        url = URL.create(
            "postgresql+psycopg2",
            username=username,
            password=password or None,
            host=host,
            port=port,
            database=database,
        )
        self.engine: Engine = create_engine(
            url,
            poolclass=NullPool,
            connect_args={"connect_timeout": connect_timeout or settings.POSTGRES_CONNECT_TIMEOUT},
        )
        self.connection: Optional[Connection] = None
        try:
            self.connection = self.engine.connect()
        except Exception:
            self.engine.dispose()
            raise
        logger.debug(f"Connected to PostgreSQL {host}:{port}/{database} as {username}")

    def query(self, sql: str, params: Optional[dict[str, Any]] = None) -> tuple[list[str], list[tuple[Any, ...]]]:
        result = self.connection.execute(text(sql), params or {})
        columns = list(result.keys())
        rows = [tuple(row) for row in result.fetchall()]
        return columns, rows

    def close(self) -> None:
        """Close database connection."""
        if self.connection is not None:
            try:
                self.connection.close()
            except Exception as e:
                logger.warning(f"Error closing PostgreSQL connection: {str(e)}")
            finally:
                self.connection = None
        self.engine.dispose()
