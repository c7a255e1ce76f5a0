"""
Generic helpers that are reused across sub‑modules.
"""
from __future__ import annotations
import sqlparse

_DOLLAR_QUOTE = "$$"
_LABEL_WIDTH = 50


def split_sql(sql: str) -> list[str]:
    """
    Split a migration script into individual statements.

    Scans line by line.  Blank lines and ``--`` comment lines are dropped
    unless they sit inside a ``$$ … $$`` body, where they are kept verbatim
    and ``;`` does not end the statement.  A line with an odd number of
    ``$$`` markers opens or closes such a body; tagged delimiters
    (``$fn$ … $fn$``) are *not* recognised.

    A trailing statement without a final ``;`` is still returned.
    """
    statements: list[str] = []
    buf: list[str] = []
    in_dollar = False

    for line in sql.split("\n"):
        stripped = line.strip()

        if not in_dollar and (not stripped or stripped.startswith("--")):
            continue

        if line.count(_DOLLAR_QUOTE) % 2 == 1:
            in_dollar = not in_dollar

        buf.append(line + "\n")

        if not in_dollar and stripped.endswith(";"):
            stmt = "".join(buf).strip()
            if stmt and not stmt.startswith("--"):
                statements.append(stmt)
            buf = []

    tail = "".join(buf).strip()
    if tail:
        statements.append(tail)
    return statements


def is_executable(stmt: str) -> bool:
    """False for blank entries and pure ``--`` comments."""
    stmt = stmt.strip()
    return bool(stmt) and not stmt.startswith("--")


def statement_type(stmt: str) -> str:
    """Return the leading keyword class (``CREATE``, ``INSERT`` …) via sqlparse."""
    parsed = sqlparse.parse(stmt)
    if not parsed:
        return "UNKNOWN"
    return parsed[0].get_type()


def describe(stmt: str, width: int = _LABEL_WIDTH) -> str:
    """One‑line label for progress output."""
    flat = stmt.replace("\n", " ")
    return flat[:width] + ("..." if len(flat) > width else "")


def truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[:width]


def quote_literal(value: str) -> str:
    """Render *value* as a single‑quoted SQL string literal."""
    return "'" + value.replace("'", "''") + "'"
