import pandas as pd
import pyarrow as pa
import pytest

from duckpyground.engine.interop import (
    query_arrow,
    query_dataframe,
    record_batches,
    to_arrow,
    to_pandas,
)


def test_to_arrow(db):
    result = to_arrow(db, "SELECT * FROM range(3) t(n)")
    assert isinstance(result, pa.Table)
    assert result.column("n").to_pylist() == [0, 1, 2]


def test_to_pandas(db):
    result = to_pandas(db, "SELECT * FROM range(3) t(n)")
    assert isinstance(result, pd.DataFrame)
    assert result["n"].tolist() == [0, 1, 2]


def test_record_batches(db):
    batches = list(record_batches(db, "SELECT * FROM range(10) t(n)", batch_size=4))
    assert all(isinstance(b, pa.RecordBatch) for b in batches)
    assert sum(b.num_rows for b in batches) == 10


def test_record_batches_invalid_size(db):
    with pytest.raises(ValueError):
        record_batches(db, "SELECT 1", batch_size=0)


def test_query_dataframe():
    df = pd.DataFrame({"city": ["Rome", "Milan", "Rome"], "sales": [10, 20, 30]})
    result = query_dataframe(
        df, "SELECT city, COUNT(*) AS n FROM df GROUP BY city ORDER BY city"
    )
    assert result["city"].tolist() == ["Milan", "Rome"]
    assert result["n"].tolist() == [1, 2]


def test_query_dataframe_custom_name():
    df = pd.DataFrame({"x": [1, 2, 3]})
    result = query_dataframe(df, "SELECT MAX(x) AS top FROM numbers", name="numbers")
    assert result["top"].tolist() == [3]


@pytest.mark.parametrize(
    "data",
    [
        pa.table({"x": [1, 2, 3]}),
        pa.record_batch({"x": [1, 2, 3]}),
    ],
    ids=["table", "recordbatch"],
)
def test_query_arrow(data):
    result = query_arrow(data, "SELECT x * 2 AS doubled FROM arrow_table ORDER BY x")
    assert result.to_pydict() == {"doubled": [2, 4, 6]}


def test_arrow_roundtrip_keeps_types(db):
    table = pa.table(
        {
            "name": pa.array(["a", "b"], pa.string()),
            "value": pa.array([1.5, 2.5], pa.float64()),
            "flag": pa.array([True, False]),
        }
    )
    db.register("data", table)
    result = to_arrow(db, "SELECT * FROM data")
    assert result.schema.field("value").type == pa.float64()
    assert result.schema.field("flag").type == pa.bool_()
    assert result.column("name").to_pylist() == ["a", "b"]
