"""Exporting query results

The ``COPY ... TO`` statement writes the result of a query
to a file, in one of the formats that DuckDB is also able to read::

    COPY (SELECT * FROM sales WHERE Quantity > 5) TO 'big_sales.parquet' (FORMAT PARQUET)

:func:`export_query` builds the statement guessing the format
from the file extension and translating keyword arguments
into the statement options:

>>> export_sql("SELECT * FROM sales", "out/sales.csv", delimiter=";")
"COPY (SELECT * FROM sales) TO 'out/sales.csv' (FORMAT CSV, HEADER true, DELIMITER ';')"
"""

import os
from typing import Any

from ..utils.logging import get_logger
from .connection import Database
from .quoting import quote_identifier, quote_literal

log = get_logger(__name__)

FORMATS_BY_EXTENSION = {
    ".csv": "csv",
    ".tsv": "csv",
    ".parquet": "parquet",
    ".pq": "parquet",
    ".json": "json",
    ".jsonl": "json",
    ".ndjson": "json",
}


def guess_format(path: str | os.PathLike) -> str:
    """Guess the export format from the file extension.

    >>> guess_format("report.PARQUET")
    'parquet'
    """
    _, ext = os.path.splitext(os.fspath(path).lower())
    try:
        return FORMATS_BY_EXTENSION[ext]
    except KeyError:
        raise ValueError(f"Unable to detect the export format of {path}") from None


def export_sql(
    query: str, path: str | os.PathLike, format: str | None = None, **options: Any
) -> str:
    """Build the ``COPY`` statement exporting ``query`` to ``path``.

    Options are rendered as ``NAME value`` pairs, booleans
    and numbers as they are and strings as quoted literals.
    CSV files get a header unless ``header=False`` is provided.

    :param query: The query whose result has to be exported.
    :param path: The destination file.
    :param format: One of ``csv``, ``parquet``, ``json``.
                   Guessed from the extension when not provided.
    :param options: Additional options, like ``compression="zstd"``.
    """
    path = os.fspath(path)
    format = (format or guess_format(path)).lower()
    if format not in ("csv", "parquet", "json"):
        raise ValueError(f"Unsupported export format: {format}")

    copy_options: dict[str, Any] = {}
    if format == "csv":
        copy_options["header"] = True
        if path.lower().endswith(".tsv"):
            copy_options["delimiter"] = "\t"
    copy_options.update(options)

    clauses = [f"FORMAT {format.upper()}"]
    for name, value in copy_options.items():
        clauses.append(f"{name.upper()} {_render_option(value)}")
    return f"COPY ({query}) TO {quote_literal(path)} ({', '.join(clauses)})"


def export_query(
    db: Database,
    query: str,
    path: str | os.PathLike,
    format: str | None = None,
    **options: Any,
) -> str:
    """Write the result of a query to a file, and return the file path.

    :param db: The database running the query.
    :param query: The query whose result has to be exported.
    :param path: The destination file.
    :param format: One of ``csv``, ``parquet``, ``json``.
                   Guessed from the extension when not provided.
    :param options: Additional ``COPY`` options.
    """
    path = os.fspath(path)
    db.execute(export_sql(query, path, format, **options))
    log.info("exported", path=path)
    return path


def export_table(
    db: Database,
    name: str,
    path: str | os.PathLike,
    format: str | None = None,
    **options: Any,
) -> str:
    """Write all the content of a table to a file, and return the file path."""
    return export_query(
        db, f"SELECT * FROM {quote_identifier(name)}", path, format, **options
    )


def _render_option(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, (int, float)):
        return str(value)
    return quote_literal(str(value))
