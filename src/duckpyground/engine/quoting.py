"""Quoting of names and values embedded in SQL text.

Values should be provided as statement parameters whenever possible,
but table functions arguments, file paths in ``COPY`` statements
and identifiers can't be parameters and have to be embedded
in the SQL text itself.
"""

import re

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_literal(value: str) -> str:
    """Quote a string as a SQL literal.

    >>> quote_literal("it's.csv")
    "'it''s.csv'"
    """
    return "'" + value.replace("'", "''") + "'"


def quote_identifier(name: str) -> str:
    """Quote a table or column name.

    >>> quote_identifier('users')
    '"users"'
    >>> quote_identifier('my "odd" table')
    '"my ""odd"" table"'
    """
    if not name:
        raise ValueError("Identifiers can't be empty")
    return '"' + name.replace('"', '""') + '"'


def validate_name(name: str) -> str:
    """Ensure that a name is a plain SQL identifier, and return it.

    Plain identifiers can be used in queries without quoting,
    so names registered by users are restricted to them.

    >>> validate_name("sales_2024")
    'sales_2024'
    """
    if not isinstance(name, str) or not IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid name: {name!r}")
    return name
