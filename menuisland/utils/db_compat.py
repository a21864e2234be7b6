"""
Database compatibility helpers for SQLite and PostgreSQL.
"""
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(db: AsyncSession, table):
    """Return an INSERT construct that supports ON CONFLICT for the session's backend."""
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        return sqlite.insert(table)
    if dialect == "postgresql":
        return postgresql.insert(table)
    raise NotImplementedError(f"Atomic upsert not supported for dialect {dialect!r}")


def window_start(days: int, today: Optional[date] = None) -> date:
    """First calendar day of a rolling window of `days` ending today (inclusive)."""
    today = today or date.today()
    return today - timedelta(days=days)


def window_start_datetime(days: int, today: Optional[date] = None) -> datetime:
    """Midnight of the first day of the window, for timestamp columns."""
    return datetime.combine(window_start(days, today), time.min)
