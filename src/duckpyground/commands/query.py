"""Command line interface for executing SQL queries on files.

This module provides a command line interface for executing SQL queries
on files through DuckDB, registering each file as a table by means of
the :class:`duckpyground.engine.Catalog`.

The results of the execution are then printed to the console in a tabular format
using the :mod:`duckpyground.utils.tabulate` module, or exported to a file
using :func:`duckpyground.engine.export_query`.
"""

import argparse

from duckpyground.engine import Catalog, Database, DatabaseError, export_query
from duckpyground.settings import get_settings
from duckpyground.utils import tabulate
from duckpyground.utils.logging import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run SQL queries on files with DuckDB.")
    parser.add_argument(
        "-t",
        "--table",
        action="append",
        help="Map a table name to a filepath. Can be provided multiple times.",
    )
    parser.add_argument(
        "-d", "--database", help="The DuckDB database file, in memory by default."
    )
    parser.add_argument(
        "-o", "--output", help="Export the result to a CSV, Parquet or JSON file."
    )
    parser.add_argument(
        "--max-rows", type=int, default=20, help="How many rows to print at most."
    )
    parser.add_argument("query", type=str, help="The SQL query to execute.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Parse the command line arguments and execute the SQL query."""
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    catalog = {}
    for table in args.table or []:
        table_name, sep, file_path = table.partition("=")
        if not sep or not table_name or not file_path:
            print(f"Invalid table mapping {table!r}, expected name=path")
            return 2
        catalog[table_name] = file_path

    if args.database:
        settings = settings.model_copy(update={"database": args.database})

    try:
        with Database.from_settings(settings) as db:
            Catalog(db).register_many(catalog)
            if args.output:
                path = export_query(db, args.query, args.output)
                print(f"Result written to {path}")
            else:
                result = db.run(args.query)
                if result is None:
                    print("OK")
                else:
                    print(tabulate.tabulate(result, max_rows=args.max_rows))
    except DatabaseError as e:
        print(f"Query failed, {e}")
        return 1
    except ValueError as e:
        print(f"Invalid arguments, {e}")
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
