"""Serialize table data as delimited text."""
import csv
import io
from typing import Any, Iterable, Sequence

DEFAULT_DELIMITER = ","


def format_value(value: Any) -> str:
    """Textual form of a cell. NULL becomes an empty field."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.hex()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def serialize_table(
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    delimiter: str = DEFAULT_DELIMITER,
) -> str:
    """
    Render a header row and data rows as delimited text.

    A field is wrapped in quotes when it contains the delimiter, a quote or a
    line break, with embedded quotes doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, quotechar='"', quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow([str(column) for column in columns])
    for row in rows:
        writer.writerow([format_value(value) for value in row])
    return buffer.getvalue()
