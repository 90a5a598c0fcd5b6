"""Connecting to DuckDB.

DuckDB is an embedded database: there is no server to start,
the whole engine runs inside the Python process and the database
is either a single file on disk or lives in memory only.

The :class:`Database` class wraps a ``duckdb`` connection
to provide a consistent error reporting (every failure
becomes a :class:`DatabaseError` which knows the SQL that caused it)
and logging of the executed statements.

>>> with connect() as db:
...     db.fetch_all("SELECT 40 + 2 AS answer")
[(42,)]

Parameters can be provided positionally, using ``?`` placeholders,
or by name, using ``$name`` placeholders:

>>> with connect() as db:
...     db.fetch_one("SELECT $greeting || ', ' || $name", {"greeting": "Hello", "name": "World"})
('Hello, World',)
"""

from typing import Any, Iterable, Self, Sequence

import duckdb
import pandas as pd
import pyarrow as pa

from ..settings import Settings
from ..utils.logging import get_logger

log = get_logger(__name__)

Parameters = Sequence[Any] | dict[str, Any] | None


class DatabaseError(Exception):
    """An error reported by DuckDB while running a statement.

    The SQL of the failing statement is available as ``sql``
    while the original DuckDB exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql

    def __str__(self) -> str:
        message = super().__str__()
        if self.sql:
            return f"{message}\nSQL: {self.sql}"
        return message


class Database:
    """A connection to a DuckDB database.

    Databases are usually created through :func:`connect`
    and should be closed when done with them, the suggested
    way is to use them as context managers.
    """

    def __init__(
        self,
        path: str = ":memory:",
        read_only: bool = False,
        config: dict[str, Any] | None = None,
    ) -> None:
        """
        :param path: The database file, ``":memory:"`` for a transient
                     in memory database.
        :param read_only: Open the database file in read only mode,
                          the file must already exist.
        :param config: DuckDB configuration options,
                       like ``{"threads": 4, "memory_limit": "1GB"}``.
        """
        self.path = path
        self.read_only = read_only
        self.config = dict(config or {})
        try:
            self._conn: duckdb.DuckDBPyConnection | None = duckdb.connect(
                database=path, read_only=read_only, config=self.config
            )
        except duckdb.Error as e:
            raise DatabaseError(f"Unable to open database {path}: {e}") from e
        log.debug("connected", database=path, read_only=read_only)

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        """Open the database configured in the provided settings."""
        return cls(
            settings.database,
            read_only=settings.read_only,
            config=settings.duckdb_config(),
        )

    def __str__(self) -> str:
        return f"Database({self.path}, read_only={self.read_only})"

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        """If the database was already closed."""
        return self._conn is None

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """The underlying ``duckdb`` connection."""
        if self._conn is None:
            raise DatabaseError(f"Database {self.path} is closed")
        return self._conn

    def close(self) -> None:
        """Close the database, closing more than once is allowed."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            log.debug("closed", database=self.path)

    def execute(self, sql: str, params: Parameters = None) -> Self:
        """Execute a statement.

        The results of the statement, if any, can be
        fetched with the ``connection`` methods,
        but usually it's more convenient to use
        one of the ``fetch_*`` methods.
        """
        self._run(lambda conn: conn.execute(sql, params), sql)
        return self

    def executemany(self, sql: str, rows: Iterable[Sequence[Any]]) -> Self:
        """Execute the same statement once for each set of parameters."""
        rows = list(rows)
        self._run(lambda conn: conn.executemany(sql, rows), sql)
        return self

    def sql(self, query: str) -> duckdb.DuckDBPyRelation:
        """Get a lazy relation for the query.

        Relations are not executed until their data is requested,
        and can be further refined with more SQL or with
        the relational API (``.filter()``, ``.aggregate()``, ...)
        """
        return self._run(lambda conn: conn.sql(query), query)

    def run(self, query: str) -> pa.Table | None:
        """Run any statement, returning the rows of those that produce any.

        Statements like ``CREATE TABLE`` return ``None``,
        queries return a :class:`pyarrow.Table`.
        """

        def action(conn):
            relation = conn.sql(query)
            return None if relation is None else relation.to_arrow_table()

        return self._run(action, query)

    def fetch_arrow(self, query: str, params: Parameters = None) -> pa.Table:
        """Run the query and return the result as a :class:`pyarrow.Table`."""
        return self._run(
            lambda conn: conn.execute(query, params).to_arrow_table(), query
        )

    def fetch_df(self, query: str, params: Parameters = None) -> pd.DataFrame:
        """Run the query and return the result as a :class:`pandas.DataFrame`."""
        return self._run(lambda conn: conn.execute(query, params).fetchdf(), query)

    def fetch_record_batches(
        self, query: str, batch_size: int, params: Parameters = None
    ) -> pa.RecordBatchReader:
        """Run the query and get a reader streaming the result in batches of rows."""
        return self._run(
            lambda conn: conn.execute(query, params).to_arrow_reader(batch_size),
            query,
        )

    def fetch_all(self, query: str, params: Parameters = None) -> list[tuple]:
        """Run the query and return all the rows as tuples."""
        return self._run(lambda conn: conn.execute(query, params).fetchall(), query)

    def fetch_one(self, query: str, params: Parameters = None) -> tuple | None:
        """Run the query and return the first row, or None when there are no rows."""
        return self._run(lambda conn: conn.execute(query, params).fetchone(), query)

    def parse(self, sql: str) -> list:
        """Parse one or more statements without executing them.

        Returns the parsed statements, invalid SQL raises
        a :class:`DatabaseError` with the parser message.
        """
        return self._run(lambda conn: conn.extract_statements(sql), sql)

    def register(self, name: str, obj: pd.DataFrame | pa.Table) -> Self:
        """Expose an in-memory DataFrame or Arrow table as a view named ``name``."""
        self._run(lambda conn: conn.register(name, obj), f"-- register {name}")
        return self

    def unregister(self, name: str) -> Self:
        """Remove a view created by :meth:`register`."""
        self._run(lambda conn: conn.unregister(name), f"-- unregister {name}")
        return self

    def _run(self, action, sql: str):
        conn = self.connection
        log.debug("executing", database=self.path, sql=sql)
        try:
            return action(conn)
        except duckdb.Error as e:
            raise DatabaseError(str(e), sql=sql) from e


def connect(
    database: str = ":memory:",
    read_only: bool = False,
    config: dict[str, Any] | None = None,
) -> Database:
    """Connect to a DuckDB database.

    Without arguments a new in-memory database is created,
    providing a file path will open that file, creating it
    when it doesn't exist yet.

    :param database: The database file or ``":memory:"``.
    :param read_only: Open the file in read only mode.
    :param config: DuckDB configuration options.
    """
    return Database(database, read_only=read_only, config=config)
