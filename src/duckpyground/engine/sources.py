"""Querying flat files

DuckDB can run SQL directly over CSV, Parquet and JSON files
without importing them first. The file is read through a
table function, like ``read_csv_auto('sales.csv')``, which can
be used anywhere a table name would be accepted::

    SELECT Product, SUM(Quantity) FROM read_csv_auto('sales.csv') GROUP BY Product

The source classes in this module know how to build
the table function call for each file format, taking
care of quoting the file path and providing format options.
Paths can also be glob patterns, like ``'data/*.parquet'``,
in which case all the matching files are read as one table.

>>> source = source_for_path("data/sales.csv")
>>> source
CSVSource(data/sales.csv, header=True, delimiter=None)
>>> source.scan_sql()
"read_csv_auto('data/sales.csv', header=true)"
"""

import abc
import os

import duckdb
import pyarrow as pa

from .connection import Database, DatabaseError
from .quoting import quote_literal, validate_name


class FileSource(abc.ABC):
    """Base class for files that can be queried by DuckDB."""

    def __init__(self, path: str | os.PathLike) -> None:
        """
        :param path: The path of the file, or a glob pattern.
        """
        self.path = os.fspath(path)

    @abc.abstractmethod
    def scan_sql(self) -> str:
        """The SQL table function call that reads the file."""
        ...

    def relation(self, db: Database) -> duckdb.DuckDBPyRelation:
        """Get a lazy relation over the content of the file."""
        return db.sql(f"SELECT * FROM {self.scan_sql()}")

    def poll_schema(self, db: Database) -> pa.Schema:
        """Poll the schema of the file without loading its content."""
        return db.fetch_arrow(f"SELECT * FROM {self.scan_sql()} LIMIT 0").schema

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path})"


class CSVSource(FileSource):
    """Read data from CSV files.

    The dialect, column names and types are detected
    by DuckDB sniffing the file content.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        header: bool = True,
        delimiter: str | None = None,
    ) -> None:
        """
        :param path: The path of the file, or a glob pattern.
        :param header: If the first line contains the column names.
        :param delimiter: The column separator, guessed when not provided.
        """
        super().__init__(path)
        self.header = header
        self.delimiter = delimiter

    def __repr__(self) -> str:
        return f"CSVSource({self.path}, header={self.header}, delimiter={self.delimiter!r})"

    def scan_sql(self) -> str:
        options = [f"header={'true' if self.header else 'false'}"]
        if self.delimiter is not None:
            options.append(f"delim={quote_literal(self.delimiter)}")
        return f"read_csv_auto({quote_literal(self.path)}, {', '.join(options)})"


class ParquetSource(FileSource):
    """Read data from Parquet files.

    Parquet files carry their schema, so no options are required
    and DuckDB only reads the columns and row groups that are
    actually needed by the query.
    """

    def scan_sql(self) -> str:
        return f"read_parquet({quote_literal(self.path)})"


class JSONSource(FileSource):
    """Read data from JSON files.

    Both files containing a JSON array of objects
    and newline delimited JSON files are supported.
    """

    FORMATS = ("auto", "array", "newline_delimited")

    def __init__(self, path: str | os.PathLike, format: str = "auto") -> None:
        """
        :param path: The path of the file, or a glob pattern.
        :param format: One of ``auto``, ``array`` or ``newline_delimited``.
        """
        if format not in self.FORMATS:
            raise ValueError(f"Unsupported JSON format: {format}")
        super().__init__(path)
        self.format = format

    def __repr__(self) -> str:
        return f"JSONSource({self.path}, format={self.format})"

    def scan_sql(self) -> str:
        return (
            f"read_json_auto({quote_literal(self.path)}, format={quote_literal(self.format)})"
        )


def source_for_path(path: str | os.PathLike) -> FileSource:
    """Pick the source to read a file based on its extension.

    >>> source_for_path("events.ndjson")
    JSONSource(events.ndjson, format=newline_delimited)

    :param path: The path of the file, or a glob pattern.
    """
    path = os.fspath(path)
    _, ext = os.path.splitext(path.lower())
    if ext == ".csv":
        return CSVSource(path)
    elif ext == ".tsv":
        return CSVSource(path, delimiter="\t")
    elif ext in (".parquet", ".pq"):
        return ParquetSource(path)
    elif ext == ".json":
        return JSONSource(path)
    elif ext in (".jsonl", ".ndjson"):
        return JSONSource(path, format="newline_delimited")
    raise ValueError(f"Unable to detect the format of {path}")


def query_file(
    db: Database, path: str | os.PathLike | FileSource, query: str, table: str = "data"
) -> pa.Table:
    """Run a query over a file, where the file is exposed as ``table``.

    >>> from duckpyground.engine import connect
    >>> import tempfile, os
    >>> with tempfile.TemporaryDirectory() as tmpdir:
    ...     path = os.path.join(tmpdir, "users.csv")
    ...     with open(path, "w") as f:
    ...         _ = f.write("id,name,age\\n1,Alice,30\\n2,Bob,17\\n")
    ...     with connect() as db:
    ...         query_file(db, path, "SELECT name FROM data WHERE age >= 18").to_pydict()
    {'name': ['Alice']}

    :param db: The database running the query.
    :param path: The file to query, or an already built source.
    :param query: The SQL query to run.
    :param table: The name used to refer to the file within the query.
    """
    name = validate_name(table)
    source = path if isinstance(path, FileSource) else source_for_path(path)
    relation = source.relation(db)
    try:
        return relation.query(name, query).to_arrow_table()
    except duckdb.Error as e:
        raise DatabaseError(str(e), sql=query) from e
