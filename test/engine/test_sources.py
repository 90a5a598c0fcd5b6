import json

import pyarrow as pa
import pyarrow.csv as csv
import pyarrow.parquet as pq
import pytest

from duckpyground.engine.connection import DatabaseError
from duckpyground.engine.sources import (
    CSVSource,
    JSONSource,
    ParquetSource,
    query_file,
    source_for_path,
)

MOCK_PYARROW_TABLE = pa.table({"col1": [1, 4, 7], "col2": [2, 5, 8], "col3": [3, 6, 9]})


@pytest.fixture
def datafiles(tmp_path):
    csv_path = tmp_path / "data.csv"
    csv.write_csv(MOCK_PYARROW_TABLE, csv_path)
    parquet_path = tmp_path / "data.parquet"
    pq.write_table(MOCK_PYARROW_TABLE, parquet_path)
    json_path = tmp_path / "data.json"
    json_path.write_text(json.dumps(MOCK_PYARROW_TABLE.to_pylist()))
    ndjson_path = tmp_path / "data.ndjson"
    ndjson_path.write_text(
        "\n".join(json.dumps(row) for row in MOCK_PYARROW_TABLE.to_pylist())
    )
    return {
        "csv": str(csv_path),
        "parquet": str(parquet_path),
        "json": str(json_path),
        "ndjson": str(ndjson_path),
    }


@pytest.mark.parametrize(
    "path, expected_class, expected_repr",
    [
        ("sales.csv", CSVSource, "CSVSource(sales.csv, header=True, delimiter=None)"),
        ("sales.tsv", CSVSource, "CSVSource(sales.tsv, header=True, delimiter='\\t')"),
        ("sales.parquet", ParquetSource, "ParquetSource(sales.parquet)"),
        ("data/*.PQ", ParquetSource, "ParquetSource(data/*.PQ)"),
        ("events.json", JSONSource, "JSONSource(events.json, format=auto)"),
        ("events.jsonl", JSONSource, "JSONSource(events.jsonl, format=newline_delimited)"),
    ],
)
def test_source_for_path(path, expected_class, expected_repr):
    source = source_for_path(path)
    assert isinstance(source, expected_class)
    assert repr(source) == expected_repr


def test_source_for_unknown_path():
    with pytest.raises(ValueError, match="Unable to detect"):
        source_for_path("archive.zip")


@pytest.mark.parametrize(
    "source, expected_sql",
    [
        (CSVSource("a.csv"), "read_csv_auto('a.csv', header=true)"),
        (
            CSVSource("a.csv", header=False, delimiter=";"),
            "read_csv_auto('a.csv', header=false, delim=';')",
        ),
        (ParquetSource("it's.parquet"), "read_parquet('it''s.parquet')"),
        (
            JSONSource("a.json", format="array"),
            "read_json_auto('a.json', format='array')",
        ),
    ],
)
def test_scan_sql(source, expected_sql):
    assert source.scan_sql() == expected_sql


def test_invalid_json_format():
    with pytest.raises(ValueError):
        JSONSource("a.json", format="xml")


@pytest.mark.parametrize("kind", ["csv", "parquet", "json", "ndjson"])
def test_relation(db, datafiles, kind):
    source = source_for_path(datafiles[kind])
    result = source.relation(db).to_arrow_table()
    assert result.column_names == ["col1", "col2", "col3"]
    assert result.column("col1").to_pylist() == [1, 4, 7]


@pytest.mark.parametrize("kind", ["csv", "parquet"])
def test_poll_schema(db, datafiles, kind):
    schema = source_for_path(datafiles[kind]).poll_schema(db)
    assert schema.names == ["col1", "col2", "col3"]
    assert pa.types.is_integer(schema.field("col1").type)


def test_query_file(db, datafiles):
    result = query_file(db, datafiles["parquet"], "SELECT col1 FROM data WHERE col2 > 2")
    assert result.to_pydict() == {"col1": [4, 7]}


def test_query_file_with_source_and_table_name(db, datafiles):
    result = query_file(
        db,
        CSVSource(datafiles["csv"]),
        "SELECT SUM(col3) AS total FROM numbers",
        table="numbers",
    )
    assert result.column("total").to_pylist() == [18]


def test_query_file_with_cte(db, datafiles):
    result = query_file(
        db,
        datafiles["csv"],
        "WITH big AS (SELECT * FROM data WHERE col2 > 2) SELECT COUNT(*) AS n FROM big",
    )
    assert result.column("n").to_pylist() == [2]


def test_query_file_invalid_query(db, datafiles):
    with pytest.raises(DatabaseError) as excinfo:
        query_file(db, datafiles["csv"], "SELEC col1 FROM data")
    assert excinfo.value.sql == "SELEC col1 FROM data"


def test_query_file_invalid_table_name(db, datafiles):
    with pytest.raises(ValueError, match="Invalid name"):
        query_file(db, datafiles["csv"], "SELECT 1", table="bad name")
