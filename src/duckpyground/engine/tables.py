"""Creating and populating tables

Even though DuckDB shines at querying data where it already lives,
it is a complete database, so data can be stored in its own tables.
Tables stored in a database file persist across sessions,
while tables in an in-memory database go away with the connection.

Tables are described by a list of :class:`Column`:

>>> from duckpyground.engine import connect
>>> with connect() as db:
...     create_table(db, "users", [
...         Column("id", "INTEGER", primary_key=True),
...         Column("name", "VARCHAR", nullable=False),
...         Column("age", "INTEGER"),
...     ])
...     insert_rows(db, "users", [(1, "Alice", 30), (2, "Bob", 25)])
...     db.fetch_all("SELECT name FROM users WHERE age > 26")
2
[('Alice',)]

Tables can also be created from the result of a query,
which is the most convenient way to import a file::

    create_table_as(db, "sales", "SELECT * FROM read_csv_auto('sales.csv')")
"""

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import pandas as pd
import pyarrow as pa

from ..utils.logging import get_logger
from .connection import Database
from .quoting import quote_identifier

log = get_logger(__name__)


@dataclass(frozen=True)
class Column:
    """Definition of a table column."""

    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    default: str | None = None

    def to_sql(self, inline_primary_key: bool = True) -> str:
        """The column definition as it appears in ``CREATE TABLE``.

        >>> Column("id", "INTEGER", primary_key=True).to_sql()
        '"id" INTEGER PRIMARY KEY'
        >>> Column("created", "TIMESTAMP", nullable=False, default="now()").to_sql()
        '"created" TIMESTAMP NOT NULL DEFAULT now()'

        :param inline_primary_key: Render the primary key constraint
                                   as part of the column, disable it when
                                   the key is declared at the table level.
        """
        parts = [quote_identifier(self.name), self.type]
        if self.primary_key and inline_primary_key:
            parts.append("PRIMARY KEY")
        elif not self.nullable:
            parts.append("NOT NULL")
        if self.default is not None:
            parts.append(f"DEFAULT {self.default}")
        return " ".join(parts)


def create_table(
    db: Database,
    name: str,
    columns: Sequence[Column],
    if_not_exists: bool = False,
    replace: bool = False,
) -> None:
    """Create a new empty table.

    When more than one column is part of the primary key,
    the key is declared as a table constraint.

    :param db: The database where to create the table.
    :param name: The name of the table.
    :param columns: The definition of the table columns.
    :param if_not_exists: Do nothing if the table already exists.
    :param replace: Replace the table if it already exists.
    """
    if if_not_exists and replace:
        raise ValueError("if_not_exists and replace can't be used together")
    if not columns:
        raise ValueError(f"Table {name} must have at least one column")

    primary_key = [c.name for c in columns if c.primary_key]
    inline_primary_key = len(primary_key) == 1
    definitions = [c.to_sql(inline_primary_key=inline_primary_key) for c in columns]
    if len(primary_key) > 1:
        definitions.append(
            f"PRIMARY KEY ({', '.join(quote_identifier(c) for c in primary_key)})"
        )

    db.execute(
        f"{_create_clause(replace)} {'IF NOT EXISTS ' if if_not_exists else ''}"
        f"{quote_identifier(name)} ({', '.join(definitions)})"
    )
    log.info("table created", table=name, columns=[c.name for c in columns])


def create_table_as(db: Database, name: str, query: str, replace: bool = False) -> None:
    """Create a table with the schema and content of a query result.

    :param db: The database where to create the table.
    :param name: The name of the table.
    :param query: The query providing the data.
    :param replace: Replace the table if it already exists.
    """
    db.execute(f"{_create_clause(replace)} {quote_identifier(name)} AS {query}")
    log.info("table created", table=name)


def insert_rows(
    db: Database,
    name: str,
    rows: Iterable[Sequence[Any]],
    columns: Sequence[str] | None = None,
) -> int:
    """Insert rows in a table, returns how many rows were inserted.

    Values are always provided as statement parameters,
    so they don't need any escaping.

    :param db: The database containing the table.
    :param name: The name of the table.
    :param rows: The rows to insert, each one a sequence of values.
    :param columns: The columns the values refer to, in order.
                    When not provided the values must match all the
                    columns of the table.
    """
    rows = [tuple(row) for row in rows]
    if not rows:
        return 0

    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise ValueError("All rows must have the same number of values")
    if columns is not None and len(columns) != width:
        raise ValueError(f"Rows have {width} values but {len(columns)} columns were given")

    target = quote_identifier(name)
    if columns is not None:
        target += f" ({', '.join(quote_identifier(c) for c in columns)})"
    placeholders = ", ".join("?" * width)
    db.executemany(f"INSERT INTO {target} VALUES ({placeholders})", rows)
    log.debug("rows inserted", table=name, count=len(rows))
    return len(rows)


def insert_from(db: Database, name: str, data: pd.DataFrame | pa.Table) -> int:
    """Insert the content of a DataFrame or Arrow table in a table.

    Columns are matched by name, so the data can provide them in any order.
    Returns how many rows were inserted.
    """
    view = "__duckpyground_insert"
    db.register(view, data)
    try:
        db.execute(f"INSERT INTO {quote_identifier(name)} BY NAME SELECT * FROM {view}")
    finally:
        db.unregister(view)
    count = len(data) if isinstance(data, pd.DataFrame) else data.num_rows
    log.debug("rows inserted", table=name, count=count)
    return count


def describe(db: Database, name: str) -> list[Column]:
    """Get the definition of the columns of a table.

    Primary key information is not reported, as DuckDB
    exposes it separately from the columns.
    """
    rows = db.fetch_all(
        "SELECT column_name, data_type, is_nullable, column_default "
        "FROM information_schema.columns WHERE table_name = ? ORDER BY ordinal_position",
        [name],
    )
    if not rows:
        raise KeyError(f"Table {name} does not exist")
    return [
        Column(colname, coltype, nullable=(nullable == "YES"), default=default)
        for colname, coltype, nullable, default in rows
    ]


def drop_table(db: Database, name: str, if_exists: bool = True) -> None:
    """Remove a table and all its data."""
    db.execute(f"DROP TABLE {'IF EXISTS ' if if_exists else ''}{quote_identifier(name)}")
    log.info("table dropped", table=name)


def _create_clause(replace: bool) -> str:
    return "CREATE OR REPLACE TABLE" if replace else "CREATE TABLE"
