"""Analysing data with DuckDB

DuckDB is an embedded analytical database: it runs
within the Python process, like SQLite, but it's designed
to scan and aggregate large amounts of data quickly by
storing and processing the data by column.

The engine package covers the common tasks involved in
analysing data with DuckDB from Python, each one in its own module:

* :mod:`duckpyground.engine.connection`: connecting to a database.
* :mod:`duckpyground.engine.sources`: querying CSV, Parquet and JSON files directly.
* :mod:`duckpyground.engine.catalog`: registering DataFrames, Arrow tables and files as tables.
* :mod:`duckpyground.engine.tables`: creating and populating tables.
* :mod:`duckpyground.engine.export`: exporting query results to files.
* :mod:`duckpyground.engine.analytics`: aggregations, joins and window functions.
* :mod:`duckpyground.engine.interop`: moving data from and to pandas and Arrow.

A typical session would look like:

>>> import pyarrow as pa
>>> from duckpyground.engine import connect, Catalog, aggregate, SumAggregation
>>> shops = pa.table({
...    "city": ["New York", "New York", "Los Angeles", "Los Angeles", "New York"],
...    "n_employees": [10, 15, 8, 12, 20]
... })
>>> with connect() as db:
...     Catalog(db).register("shops", shops)
...     sql = aggregate("shops", ["city"], {"total_employees": SumAggregation("n_employees")})
...     db.fetch_all(sql)
[('Los Angeles', 20), ('New York', 45)]
"""

from .analytics import (
    CountAggregation,
    DenseRank,
    Lag,
    Lead,
    MaxAggregation,
    MeanAggregation,
    MinAggregation,
    Rank,
    RowNumber,
    RunningSum,
    SumAggregation,
    aggregate,
    join,
    top_n_per_group,
    window,
)
from .catalog import Catalog
from .connection import Database, DatabaseError, connect
from .export import export_query, export_table
from .interop import query_arrow, query_dataframe, record_batches, to_arrow, to_pandas
from .sources import CSVSource, JSONSource, ParquetSource, query_file, source_for_path
from .tables import (
    Column,
    create_table,
    create_table_as,
    describe,
    drop_table,
    insert_from,
    insert_rows,
)

__all__ = (
    "connect",
    "Database",
    "DatabaseError",
    "Catalog",
    "CSVSource",
    "ParquetSource",
    "JSONSource",
    "source_for_path",
    "query_file",
    "Column",
    "create_table",
    "create_table_as",
    "insert_rows",
    "insert_from",
    "describe",
    "drop_table",
    "export_query",
    "export_table",
    "aggregate",
    "join",
    "window",
    "top_n_per_group",
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
    "to_arrow",
    "to_pandas",
    "record_batches",
    "query_dataframe",
    "query_arrow",
)
