"""Registering external tables

Data doesn't need to be imported in DuckDB to be queried.
In memory objects like :class:`pandas.DataFrame` and :class:`pyarrow.Table`
can be registered under a name and queried as if they were tables,
DuckDB will read their memory directly without copying it.

Files can be registered too, in which case a view over the
file is created, so that queries can refer to the file by name.

>>> import pyarrow as pa
>>> from duckpyground.engine import connect
>>> with connect() as db:
...     catalog = Catalog(db)
...     catalog.register("animals", pa.table({
...         "name": ["Flamingo", "Horse", "Centipede"],
...         "n_legs": [2, 4, 100]
...     }))
...     db.fetch_all("SELECT name FROM animals WHERE n_legs > 2 ORDER BY name")
[('Centipede',), ('Horse',)]
"""

import os
from typing import Any, Iterator, Mapping

import pandas as pd
import pyarrow as pa

from ..utils.logging import get_logger
from .connection import Database
from .quoting import quote_identifier, validate_name
from .sources import FileSource, source_for_path

log = get_logger(__name__)


class Catalog:
    """Names that queries can refer to as tables.

    The catalog keeps track of the objects and files
    it registered in the database, so that they can be listed
    and unregistered later on.
    """

    def __init__(self, db: Database) -> None:
        """
        :param db: The database where the tables are registered.
        """
        self.db = db
        self._entries: dict[str, Any] = {}

    def __str__(self) -> str:
        return f"Catalog({self.db}, names={self.names()})"

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def register(self, name: str, obj: Any) -> None:
        """Make ``obj`` available to queries as ``name``.

        Registering again a name replaces the previous object,
        when the new object can't be registered the previous one is kept.

        :param name: The table name, must be a plain identifier.
        :param obj: A :class:`pandas.DataFrame`, a :class:`pyarrow.Table`,
                    a :class:`pyarrow.RecordBatch`, a :class:`FileSource`
                    or the path of a file.
        """
        validate_name(name)
        if isinstance(obj, pa.RecordBatch):
            obj = pa.Table.from_batches([obj])
        elif isinstance(obj, (str, os.PathLike)):
            obj = source_for_path(obj)

        if isinstance(obj, FileSource):
            # Fails for unreadable files, leaving the registered table untouched.
            obj.poll_schema(self.db)
        elif not isinstance(obj, (pd.DataFrame, pa.Table)):
            raise TypeError(f"Unsupported object for table {name}: {type(obj)}")

        if name in self._entries:
            self.unregister(name)
        if isinstance(obj, FileSource):
            self.db.execute(
                f"CREATE OR REPLACE VIEW {quote_identifier(name)} AS SELECT * FROM {obj.scan_sql()}"
            )
        else:
            self.db.register(name, obj)

        self._entries[name] = obj
        log.info("registered", table=name, kind=type(obj).__name__)

    def register_many(self, tables: Mapping[str, Any]) -> None:
        """Register all the objects in the ``{name: obj}`` mapping."""
        for name, obj in tables.items():
            self.register(name, obj)

    def unregister(self, name: str) -> None:
        """Remove a registered name.

        :raises KeyError: if the name was not registered by this catalog.
        """
        obj = self._entries.pop(name)
        if isinstance(obj, FileSource):
            self.db.execute(f"DROP VIEW IF EXISTS {quote_identifier(name)}")
        else:
            self.db.unregister(name)
        log.info("unregistered", table=name)

    def get(self, name: str) -> Any:
        """The object registered as ``name``."""
        return self._entries[name]

    def names(self) -> list[str]:
        """The names registered through this catalog."""
        return sorted(self._entries)

    def tables(self) -> list[str]:
        """Every table and view that queries can refer to.

        This includes tables created with SQL and
        the objects registered by any catalog.
        """
        rows = self.db.fetch_all(
            "SELECT DISTINCT table_name FROM information_schema.tables ORDER BY table_name"
        )
        return [row[0] for row in rows]
