"""Interoperability with pandas and Apache Arrow

DuckDB speaks Arrow natively: query results can be
fetched as :class:`pyarrow.Table` without any conversion
cost and Arrow data can be queried in place.
pandas DataFrames are supported in the same way,
making SQL a convenient tool to analyse DataFrames:

>>> import pandas as pd
>>> df = pd.DataFrame({"city": ["Rome", "Milan", "Rome"], "sales": [10, 20, 30]})
>>> result = query_dataframe(df, "SELECT city, COUNT(*) AS n_sales FROM df GROUP BY city ORDER BY city")
>>> result["city"].tolist()
['Milan', 'Rome']
>>> result["n_sales"].tolist()
[1, 2]

For results bigger than memory, :func:`record_batches`
allows to stream the result in chunks of rows.
"""

from typing import Iterator

import pandas as pd
import pyarrow as pa

from .connection import Database, connect
from .quoting import validate_name

DEFAULT_BATCH_SIZE = 1_000_000


def to_arrow(db: Database, query: str) -> pa.Table:
    """Run a query and get its result as a :class:`pyarrow.Table`."""
    return db.fetch_arrow(query)


def to_pandas(db: Database, query: str) -> pd.DataFrame:
    """Run a query and get its result as a :class:`pandas.DataFrame`."""
    return db.fetch_df(query)


def record_batches(
    db: Database, query: str, batch_size: int = DEFAULT_BATCH_SIZE
) -> Iterator[pa.RecordBatch]:
    """Run a query and stream its result as :class:`pyarrow.RecordBatch`.

    :param db: The database running the query.
    :param query: The query to run.
    :param batch_size: How many rows each batch should contain at most.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be a positive number")
    return iter(db.fetch_record_batches(query, batch_size))


def query_dataframe(df: pd.DataFrame, query: str, name: str = "df") -> pd.DataFrame:
    """Query a DataFrame with SQL, the DataFrame is available as ``name``.

    The query runs on a transient in-memory database.
    """
    with connect() as db:
        db.register(validate_name(name), df)
        return db.fetch_df(query)


def query_arrow(
    table: pa.Table | pa.RecordBatch, query: str, name: str = "arrow_table"
) -> pa.Table:
    """Query Arrow data with SQL, the data is available as ``name``.

    The query runs on a transient in-memory database.
    """
    if isinstance(table, pa.RecordBatch):
        table = pa.Table.from_batches([table])
    with connect() as db:
        db.register(validate_name(name), table)
        return db.fetch_arrow(query)
