"""Shell commands exposing DuckPyground functionalities.

This module contains the shell commands that can be used to interact with DuckPyground.

DuckQuery
=========

``pyground-duckquery`` runs SQL queries on files::

    pyground-duckquery -t users=users.csv "SELECT id, name FROM users WHERE age >= 18"

It can be tested against provided example data running it with the following command::

    pyground-duckquery -t sales=examples/data/sales.csv "SELECT Product, SUM(Quantity*Price) AS Total FROM sales GROUP BY Product ORDER BY Total DESC"

The result can be saved to a file instead of being printed::

    pyground-duckquery -t sales=examples/data/sales.csv -o totals.parquet "SELECT Product, SUM(Quantity) FROM sales GROUP BY Product"

Lint
====

``pyground-lint`` checks the posts for broken front matter and invalid code::

    pyground-lint _posts

NewPost
=======

``pyground-newpost`` creates a new post ready to be written::

    pyground-newpost "Window functions in DuckDB" -c duckdb -c sql
"""
