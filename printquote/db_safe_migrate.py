from __future__ import annotations

import logging
import re
from typing import List, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Mapping of tables to columns and their SQL definitions
_MIGRATIONS: dict[str, dict[str, str]] = {
    "materials": {
        "notes": "TEXT",
        "active": "BOOLEAN NOT NULL DEFAULT 1",
        "created_at": "DATETIME DEFAULT CURRENT_TIMESTAMP",
        "updated_at": "DATETIME DEFAULT CURRENT_TIMESTAMP",
    },
    "rate_config": {
        "overhead_fixed": "NUMERIC NOT NULL DEFAULT 0",
        "overhead_percent": "NUMERIC NOT NULL DEFAULT 0",
        "failure_rate_percent": "NUMERIC NOT NULL DEFAULT 0",
        "tax_percent": "NUMERIC NOT NULL DEFAULT 0",
        "currency": "TEXT NOT NULL DEFAULT 'COP'",
        "updated_at": "DATETIME DEFAULT CURRENT_TIMESTAMP",
    },
    "shipping_rates": {
        "city": "TEXT",
        "notes": "TEXT",
        "active": "BOOLEAN NOT NULL DEFAULT 1",
        "created_at": "DATETIME DEFAULT CURRENT_TIMESTAMP",
        "updated_at": "DATETIME DEFAULT CURRENT_TIMESTAMP",
    },
    "packaging_rates": {
        "notes": "TEXT",
        "active": "BOOLEAN NOT NULL DEFAULT 1",
        "created_at": "DATETIME DEFAULT CURRENT_TIMESTAMP",
        "updated_at": "DATETIME DEFAULT CURRENT_TIMESTAMP",
    },
    "quotes": {
        "title": "TEXT",
        "notes": "TEXT",
        "waste_percent": "NUMERIC NOT NULL DEFAULT 0",
        "margin_percent": "NUMERIC NOT NULL DEFAULT 0",
        "tax_enabled": "BOOLEAN NOT NULL DEFAULT 0",
        "tax_percent_snapshot": "NUMERIC NOT NULL DEFAULT 0",
        "totals_json": "TEXT NOT NULL DEFAULT '{}'",
        "breakdown_json": "TEXT NOT NULL DEFAULT '{}'",
    },
    "quote_items": {
        "print_minutes": "NUMERIC NOT NULL DEFAULT 0",
        "labor_minutes": "NUMERIC NOT NULL DEFAULT 0",
        "quantity": "NUMERIC NOT NULL DEFAULT 1",
    },
}


def _missing_columns(conn, table: str, columns: dict[str, str]) -> List[Tuple[str, str, str]]:
    """Return list of (table, column, ddl) for missing columns."""
    exists = conn.execute(
        text(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=:name"
        ),
        {"name": table},
    ).fetchone()
    if not exists:
        return []
    result = conn.execute(text(f'PRAGMA table_info("{table}")'))
    existing = {row[1] for row in result}
    missing = []
    for col, ddl in columns.items():
        if col not in existing:
            missing.append((table, col, ddl))
    return missing


def _add_column_sqlite(conn, table: str, column: str, ddl: str) -> None:
    """Add a column to a SQLite table, handling timestamp defaults.

    SQLite refuses ``ADD COLUMN ... DEFAULT CURRENT_TIMESTAMP``, so such
    columns are added bare and back-filled.
    """
    qtable = f'"{table}"'
    qcol = f'"{column}"'
    if "DEFAULT CURRENT_TIMESTAMP" in ddl.upper():
        base_type = re.split(r"\s+DEFAULT\s+", ddl, flags=re.IGNORECASE)[0].strip()
        conn.execute(text(f"ALTER TABLE {qtable} ADD COLUMN {qcol} {base_type}"))
        conn.execute(text(
            f"UPDATE {qtable} SET {qcol} = CURRENT_TIMESTAMP WHERE {qcol} IS NULL"
        ))
    else:
        conn.execute(text(f"ALTER TABLE {qtable} ADD COLUMN {qcol} {ddl}"))


def pending_sqlite_migrations(engine: Engine) -> List[Tuple[str, str, str]]:
    """Return pending migrations without applying them."""
    if engine.dialect.name != "sqlite":
        return []
    with engine.begin() as conn:
        pending: List[Tuple[str, str, str]] = []
        for table, cols in _MIGRATIONS.items():
            pending.extend(_missing_columns(conn, table, cols))
        return pending


def run_sqlite_safe_migrations(engine: Engine) -> List[Tuple[str, str]]:
    """Add missing columns with defaults for SQLite development databases."""
    if engine.dialect.name != "sqlite":
        return []
    applied: List[Tuple[str, str]] = []

    with engine.begin() as conn:
        for table, cols in _MIGRATIONS.items():
            missing = _missing_columns(conn, table, cols)
            for _table, column, ddl in missing:
                _add_column_sqlite(conn, _table, column, ddl)
                applied.append((_table, column))
                logger.info("Added column %s.%s", _table, column)

    return applied
