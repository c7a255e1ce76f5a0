"""
Read‑only helpers that query ``information_schema`` through an executor.

Each helper issues exactly one statement and degrades to an empty / false /
``-1`` answer when the call fails.
"""
from __future__ import annotations
import typing as t

from foliodb.constants import DEFAULT_SCHEMA
from foliodb.driver import SQLExecutor
from foliodb.utils import quote_literal


def _rows(executor: SQLExecutor, sql: str) -> list[dict[str, t.Any]]:
    res = executor.execute_one(sql)
    if res.success and isinstance(res.data, list):
        return res.data
    return []


def list_tables(executor: SQLExecutor, schema: str = DEFAULT_SCHEMA) -> list[str]:
    rows = _rows(
        executor,
        "SELECT table_name FROM information_schema.tables "
        f"WHERE table_schema = {quote_literal(schema)} ORDER BY table_name;",
    )
    return [row["table_name"] for row in rows]


def list_columns(
    executor: SQLExecutor, table: str, schema: str = DEFAULT_SCHEMA
) -> list[dict[str, str]]:
    rows = _rows(
        executor,
        "SELECT column_name, data_type FROM information_schema.columns\n"
        f"WHERE table_schema = {quote_literal(schema)} "
        f"AND table_name = {quote_literal(table)}\n"
        "ORDER BY ordinal_position;",
    )
    return [{"name": row["column_name"], "type": row["data_type"]} for row in rows]


def _exists(executor: SQLExecutor, sql: str) -> bool:
    rows = _rows(executor, sql)
    return bool(rows) and rows[0].get("exists") is True


def table_exists(executor: SQLExecutor, table: str, schema: str = DEFAULT_SCHEMA) -> bool:
    return _exists(
        executor,
        "SELECT EXISTS (\n"
        "  SELECT FROM information_schema.tables\n"
        f"  WHERE table_schema = {quote_literal(schema)} "
        f"AND table_name = {quote_literal(table)}\n"
        ");",
    )


def column_exists(
    executor: SQLExecutor, table: str, column: str, schema: str = DEFAULT_SCHEMA
) -> bool:
    return _exists(
        executor,
        "SELECT EXISTS (\n"
        "  SELECT FROM information_schema.columns\n"
        f"  WHERE table_schema = {quote_literal(schema)} "
        f"AND table_name = {quote_literal(table)} "
        f"AND column_name = {quote_literal(column)}\n"
        ");",
    )


def _ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def get_row_count(executor: SQLExecutor, table: str, schema: str = DEFAULT_SCHEMA) -> int:
    """Row count of *schema.table*, or ``-1`` if the query failed."""
    rows = _rows(executor, f"SELECT COUNT(*) AS count FROM {_ident(schema)}.{_ident(table)};")
    try:
        return int(rows[0]["count"])
    except (IndexError, KeyError, TypeError, ValueError):
        return -1
