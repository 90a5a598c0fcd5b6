import sys
import time

import pandas
import psutil

from duckpyground.engine import SumAggregation, aggregate, connect, source_for_path

try:
    aggregation_type = sys.argv[1]
except IndexError:
    aggregation_type = None

source = source_for_path("data/sales.csv")

if aggregation_type == "duckdb":
    def run():
        with connect() as db:
            return db.fetch_arrow(
                aggregate(source, ["Product"], {"total_quantity": SumAggregation("Quantity")})
            )
elif aggregation_type == "pandas":
    def run():
        df = pandas.read_csv("data/sales.csv")
        return (
            df.groupby("Product")
            .agg({"Quantity": "sum"})
            .rename(columns={"Quantity": "total_quantity"})
        )
else:
    print("Aggregation must be duckdb or pandas")
    sys.exit(1)

proc = psutil.Process()
start = time.time()
run()
end = time.time()

print(
    "TIME:",
    round(end - start, 3),
    "MEMORY:",
    proc.memory_full_info().rss // (1024 * 1024),
)
