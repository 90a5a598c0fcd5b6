from duckpyground.engine import Catalog, SumAggregation, aggregate, connect, export_query
from duckpyground.utils.tabulate import tabulate

with connect() as db:
  Catalog(db).register_many({"sales": "data/sales.csv", "shops": "data/shops.csv"})

  totals = aggregate("sales", ["Product"], {"Total Quantity": SumAggregation("Quantity")})
  print(tabulate(db.fetch_arrow(totals)))

  export_query(db, totals, "data/totals.parquet")
