"""Aggregations, joins and window functions.

Frequently when analysing data is necessary
to compute statistics like the min, max, average, etc...
of the data stored in datasets, to combine
multiple datasets together or to compare each row with
the other rows of the same group.

The functions in this module build the SQL for
those common analyses, so that they can be
inspected, tweaked and executed by DuckDB.

Aggregations
============

Given the following data::

    city, shop, n_employees
    New York, Shop A, 10
    New York, Shop B, 15
    Los Angeles, Shop C, 8
    Los Angeles, Shop D, 12
    New York, Shop E, 20

We could group by city and compute the sum of the employees
to get::

    city, total_employees
    Los Angeles, 20
    New York, 45

>>> aggregate("shops", ["city"], {"total_employees": SumAggregation("n_employees")})
'SELECT "city", SUM("n_employees") AS "total_employees" FROM "shops" GROUP BY "city" ORDER BY "city"'

Joins
=====

Rows of two tables can be combined when they share a key,
the key can have the same name in both tables:

>>> join("users", "orders", on="user_id")
'SELECT * FROM "users" INNER JOIN "orders" USING ("user_id")'

or a different one:

>>> join("users", "orders", on=("id", "user_id"), how="left")
'SELECT * FROM "users" AS l LEFT JOIN "orders" AS r ON l."id" = r."user_id"'

Window Functions
================

Window functions compute a value for each row
looking at the other rows of the same partition,
without collapsing them like aggregations do:

>>> window("sales", Rank(), "position", partition_by=["city"], order_by=["amount DESC"])
'SELECT *, RANK() OVER (PARTITION BY "city" ORDER BY amount DESC) AS "position" FROM "sales"'
"""

import abc
from typing import Sequence

import pyarrow as pa

from .connection import Database
from .quoting import quote_identifier
from .sources import FileSource

__all__ = (
    "aggregate",
    "join",
    "window",
    "top_n_per_group",
    "run",
    "SumAggregation",
    "CountAggregation",
    "MinAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "RowNumber",
    "Rank",
    "DenseRank",
    "RunningSum",
    "Lag",
    "Lead",
)

Source = str | FileSource

JOIN_TYPES = {"inner": "INNER", "left": "LEFT", "right": "RIGHT", "full": "FULL OUTER"}


class Aggregation(abc.ABC):
    """Base class for aggregations.

    Each aggregation renders the SQL function call
    that computes it over the rows of a group.
    """

    def __init__(self, column: str) -> None:
        """
        :param column: The column to aggregate.
        """
        self.column = column

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.column})"

    @abc.abstractmethod
    def to_sql(self) -> str:
        """The SQL expression computing the aggregation."""
        ...


class SumAggregation(Aggregation):
    """Sum the values of the column."""

    def to_sql(self) -> str:
        return f"SUM({quote_identifier(self.column)})"


class MinAggregation(Aggregation):
    """Smallest value of the column."""

    def to_sql(self) -> str:
        return f"MIN({quote_identifier(self.column)})"


class MaxAggregation(Aggregation):
    """Biggest value of the column."""

    def to_sql(self) -> str:
        return f"MAX({quote_identifier(self.column)})"


class MeanAggregation(Aggregation):
    """Average of the values of the column."""

    def to_sql(self) -> str:
        return f"AVG({quote_identifier(self.column)})"


class CountAggregation(Aggregation):
    """Count the values of the column.

    Null values are not counted, when no column
    is provided all the rows are counted.
    """

    def __init__(self, column: str | None = None) -> None:
        self.column = column

    def to_sql(self) -> str:
        if self.column is None:
            return "COUNT(*)"
        return f"COUNT({quote_identifier(self.column)})"


class WindowFunction(abc.ABC):
    """Base class for functions evaluated over a window of rows.

    ``FRAME`` is the frame clause the function needs in its ``OVER``
    clause, if any, and ``REQUIRES_ORDER`` tells if the function
    is meaningless when the rows of the partition are not ordered.
    """

    FRAME: str | None = None
    REQUIRES_ORDER = False

    @abc.abstractmethod
    def to_sql(self) -> str:
        """The SQL function call, without the ``OVER`` clause."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class RowNumber(WindowFunction):
    """Progressive number of the row within the partition."""

    def to_sql(self) -> str:
        return "ROW_NUMBER()"


class Rank(WindowFunction):
    """Rank of the row, with gaps after ties."""

    def to_sql(self) -> str:
        return "RANK()"


class DenseRank(WindowFunction):
    """Rank of the row, without gaps after ties."""

    def to_sql(self) -> str:
        return "DENSE_RANK()"


class RunningSum(WindowFunction):
    """Sum of the values of all the rows up to the current one.

    The frame is made of rows, not of values, so rows with
    the same ordering key still get a progressive total.
    """

    FRAME = "ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW"
    REQUIRES_ORDER = True

    def __init__(self, column: str) -> None:
        self.column = column

    def __repr__(self) -> str:
        return f"RunningSum({self.column})"

    def to_sql(self) -> str:
        return f"SUM({quote_identifier(self.column)})"


class Lag(WindowFunction):
    """Value of the column ``offset`` rows before the current one."""

    FUNCTION = "LAG"

    def __init__(self, column: str, offset: int = 1) -> None:
        if offset < 1:
            raise ValueError("offset must be a positive number")
        self.column = column
        self.offset = offset

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.column}, offset={self.offset})"

    def to_sql(self) -> str:
        return f"{self.FUNCTION}({quote_identifier(self.column)}, {self.offset})"


class Lead(Lag):
    """Value of the column ``offset`` rows after the current one."""

    FUNCTION = "LEAD"


def source_sql(source: Source) -> str:
    """Render what follows ``FROM`` for a table name or a file.

    >>> source_sql("users")
    '"users"'
    """
    if isinstance(source, FileSource):
        return source.scan_sql()
    return quote_identifier(source)


def aggregate(
    source: Source,
    keys: Sequence[str],
    aggregations: dict[str, Aggregation],
    order: bool = True,
) -> str:
    """Group the rows by ``keys`` and compute the aggregations for each group.

    When no keys are provided, the aggregations are computed
    over all the rows and a single row is returned.

    :param source: The table or file to aggregate.
    :param keys: The columns to group by.
    :param aggregations: The aggregations to compute in
                         the form of ``{"new_col_name": Aggregation}``.
    :param order: Sort the groups by their keys.
    """
    if not aggregations:
        raise ValueError("At least one aggregation is required")

    keycols = [quote_identifier(k) for k in keys]
    projections = keycols + [
        f"{aggr.to_sql()} AS {quote_identifier(name)}"
        for name, aggr in aggregations.items()
    ]
    sql = f"SELECT {', '.join(projections)} FROM {source_sql(source)}"
    if keycols:
        sql += f" GROUP BY {', '.join(keycols)}"
        if order:
            sql += f" ORDER BY {', '.join(keycols)}"
    return sql


def join(
    left: Source,
    right: Source,
    on: str | tuple[str, str],
    how: str = "inner",
    select: Sequence[str] | None = None,
) -> str:
    """Combine the rows of two tables that share the same key.

    :param left: The left table or file.
    :param right: The right table or file.
    :param on: The name of the key column, when it's the same in both tables,
               or a ``(left_column, right_column)`` tuple.
    :param how: One of ``inner``, ``left``, ``right``, ``full``.
    :param select: The expressions to select, all columns when not provided.
                   When ``on`` is a tuple, the tables are aliased as ``l`` and ``r``.
    """
    try:
        jointype = JOIN_TYPES[how]
    except KeyError:
        raise ValueError(f"Unsupported join type: {how}") from None

    projections = ", ".join(select) if select else "*"
    if isinstance(on, str):
        return (
            f"SELECT {projections} FROM {source_sql(left)} {jointype} JOIN "
            f"{source_sql(right)} USING ({quote_identifier(on)})"
        )

    leftkey, rightkey = on
    return (
        f"SELECT {projections} FROM {source_sql(left)} AS l {jointype} JOIN "
        f"{source_sql(right)} AS r ON l.{quote_identifier(leftkey)} = r.{quote_identifier(rightkey)}"
    )


def window(
    source: Source,
    function: WindowFunction,
    alias: str,
    partition_by: Sequence[str] | None = None,
    order_by: Sequence[str] | None = None,
) -> str:
    """Add a column computed by a window function to all rows.

    :param source: The table or file to read.
    :param function: The window function to compute.
    :param alias: The name of the new column.
    :param partition_by: The columns identifying the groups of rows
                         the function is computed on. All rows form one
                         partition when not provided.
    :param order_by: The ordering expressions within each partition,
                     like ``"amount DESC"``.
    """
    if function.REQUIRES_ORDER and not order_by:
        raise ValueError(f"{function!r} requires the rows to be ordered")
    return (
        f"SELECT *, {function.to_sql()} {_over(partition_by, order_by, function.FRAME)} "
        f"AS {quote_identifier(alias)} FROM {source_sql(source)}"
    )


def top_n_per_group(
    source: Source,
    n: int,
    partition_by: Sequence[str],
    order_by: str,
    descending: bool = True,
) -> str:
    """Keep only the first ``n`` rows of each group.

    >>> top_n_per_group("sales", 3, ["city"], "amount")
    'SELECT * FROM "sales" QUALIFY ROW_NUMBER() OVER (PARTITION BY "city" ORDER BY "amount" DESC) <= 3'

    :param source: The table or file to read.
    :param n: How many rows to keep for each group.
    :param partition_by: The columns identifying the groups.
    :param order_by: The column rows are ranked by.
    :param descending: Keep the rows with the biggest values.
    """
    if n < 1:
        raise ValueError("n must be a positive number")
    ordering = f"{quote_identifier(order_by)} {'DESC' if descending else 'ASC'}"
    return (
        f"SELECT * FROM {source_sql(source)} QUALIFY "
        f"ROW_NUMBER() {_over(partition_by, [ordering])} <= {n}"
    )


def run(db: Database, sql: str) -> pa.Table:
    """Execute a query built by one of the functions of this module."""
    return db.fetch_arrow(sql)


def _over(
    partition_by: Sequence[str] | None,
    order_by: Sequence[str] | None,
    frame: str | None = None,
) -> str:
    clauses = []
    if partition_by:
        clauses.append(
            f"PARTITION BY {', '.join(quote_identifier(c) for c in partition_by)}"
        )
    if order_by:
        clauses.append(f"ORDER BY {', '.join(order_by)}")
    if frame:
        clauses.append(frame)
    return f"OVER ({' '.join(clauses)})"
