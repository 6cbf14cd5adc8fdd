"""PostgreSQL browsing: schemas, tables, views, column metadata and samples."""
import logging
from typing import Any, Optional

from ...base import BaseRelationalClient, TableData
from ..exceptions import NotFoundError, ValidationError
from ..postgres_client import quote_identifier
from .table_export import format_value

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "public"

EXCLUDED_SCHEMAS = ("information_schema", "pg_catalog", "pg_toast")

# System, extension and platform schemas hidden from browsing.
EXCLUDED_SCHEMA_PREFIXES = (
    "pg_", "temp", "tmp", "pgagent", "information_schema", "cron", "extensions",
    "realtime", "supabase", "auth", "storage", "vault", "graphql", "net",
    "tiger", "topology", "analytics",
)

EXCLUDED_TABLE_PREFIXES = ("pg_", "sql_", "temp", "tmp")

EXCLUDED_TABLES = (
    "schema_migrations", "ar_internal_metadata", "sessions", "pg_stat_statements",
    "pg_stat_activity", "pg_stat_database", "pg_stat_user_tables",
    "pg_stat_user_indexes", "pg_stat_user_functions",
)


def _like_escape(prefix: str) -> str:
    return prefix.replace("\\", "\\\\").replace("_", "\\_").replace("%", "\\%") + "%"


def _not_like_clause(column: str, prefixes: tuple[str, ...], params: dict[str, Any], tag: str) -> str:
    clauses = []
    for i, prefix in enumerate(prefixes):
        name = f"{tag}{i}"
        params[name] = _like_escape(prefix)
        clauses.append(f"{column} NOT LIKE :{name}")
    return " AND ".join(clauses)


def _not_in_clause(column: str, values: tuple[str, ...], params: dict[str, Any], tag: str) -> str:
    names = []
    for i, value in enumerate(values):
        name = f"{tag}{i}"
        params[name] = value
        names.append(f":{name}")
    return f"{column} NOT IN ({', '.join(names)})"


def _json_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return format_value(value)


def split_table_name(item: str, default_schema: Optional[str] = None) -> tuple[str, str]:
    """Split "schema.table" into its parts, falling back to the default schema."""
    item = (item or "").strip()
    if not item:
        raise ValidationError("Table name must not be empty")

    if "." in item:
        schema, table = item.split(".", 1)
    else:
        schema, table = "", item
    schema = schema.strip() or (default_schema or "").strip() or DEFAULT_SCHEMA
    table = table.strip()
    if not table:
        raise ValidationError(f"Table name must not be empty: '{item}'")
    return schema, table


class PostgresBrowser:
    """Browse a PostgreSQL database through a client owned by the caller."""

    def __init__(self, client: BaseRelationalClient):
        self.client = client

    def get_schemas(self) -> list[str]:
        """Get all user-defined schemas"""
        params: dict[str, Any] = {}
        sql = (
            "SELECT schema_name FROM information_schema.schemata "
            f"WHERE {_not_in_clause('schema_name', EXCLUDED_SCHEMAS, params, 'xs')} "
            f"AND {_not_like_clause('schema_name', EXCLUDED_SCHEMA_PREFIXES, params, 'ps')} "
            "ORDER BY schema_name"
        )
        _, rows = self.client.query(sql, params)
        return [row[0] for row in rows]

    def get_tables(self, schema: str) -> list[str]:
        """Get user-defined base tables in a schema"""
        params: dict[str, Any] = {"schema": schema}
        sql = (
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = :schema AND table_type = 'BASE TABLE' "
            f"AND {_not_like_clause('table_name', EXCLUDED_TABLE_PREFIXES, params, 'pt')} "
            f"AND {_not_in_clause('table_name', EXCLUDED_TABLES, params, 'xt')} "
            "ORDER BY table_name"
        )
        _, rows = self.client.query(sql, params)
        return [row[0] for row in rows]

    def get_views(self, schema: str) -> list[str]:
        """Get user-defined views in a schema"""
        params: dict[str, Any] = {"schema": schema}
        sql = (
            "SELECT table_name FROM information_schema.views "
            "WHERE table_schema = :schema "
            f"AND {_not_like_clause('table_name', EXCLUDED_TABLE_PREFIXES, params, 'pv')} "
            "ORDER BY table_name"
        )
        _, rows = self.client.query(sql, params)
        return [row[0] for row in rows]

    def get_database_objects(self, schemas: Optional[list[str]] = None) -> list[str]:
        """Tables and views of the given (or all user) schemas as "schema.name"."""
        objects = []
        for schema in schemas if schemas is not None else self.get_schemas():
            objects.extend(f"{schema}.{table}" for table in self.get_tables(schema))
            objects.extend(f"{schema}.{view}" for view in self.get_views(schema))
        return objects

    def list_contents(self) -> dict[str, Any]:
        schemas = self.get_schemas()
        objects = self.get_database_objects(schemas)
        logger.info(f"Listed {len(objects)} table(s)/view(s) in {len(schemas)} schema(s)")
        return {"schemas": schemas, "files": objects, "totalObjects": len(objects)}

    def get_table_schema(self, schema: str, table: str) -> dict[str, Any]:
        """Column metadata of a table, in ordinal order"""
        _, rows = self.client.query(
            "SELECT column_name, data_type, is_nullable, column_default, character_maximum_length "
            "FROM information_schema.columns "
            "WHERE table_schema = :schema AND table_name = :table "
            "ORDER BY ordinal_position",
            {"schema": schema, "table": table},
        )
        columns = [
            {
                "name": name,
                "type": data_type,
                "nullable": nullable,
                "default": None if default is None else str(default),
                "maxLength": None if max_length is None else str(max_length),
            }
            for name, data_type, nullable, default, max_length in rows
        ]
        return {"table": f"{schema}.{table}", "columns": columns}

    def get_column_names(self, schema: str, table: str) -> list[str]:
        _, rows = self.client.query(
            "SELECT column_name FROM information_schema.columns "
            "WHERE table_schema = :schema AND table_name = :table "
            "ORDER BY ordinal_position",
            {"schema": schema, "table": table},
        )
        return [row[0] for row in rows]

    def fetch_table(self, schema: str, table: str, limit: int) -> TableData:
        """
        Fetch column names and up to ``limit`` rows of a table

        Raises:
            NotFoundError: If the table has no visible columns
        """
        columns = self.get_column_names(schema, table)
        if not columns:
            raise NotFoundError(f"Table not found: {schema}.{table}")

        _, rows = self.client.query(
            f"SELECT * FROM {quote_identifier(schema)}.{quote_identifier(table)} LIMIT :limit",
            {"limit": int(limit)},
        )
        return TableData(table=f"{schema}.{table}", columns=columns, rows=rows)

    def get_table_sample(self, schema: str, table: str, limit: int) -> dict[str, Any]:
        data = self.fetch_table(schema, table, limit)
        rows = [
            {column: _json_value(value) for column, value in zip(data.columns, row)}
            for row in data.rows
        ]
        return {"table": data.table, "columns": data.columns, "rows": rows, "limit": limit}
