"""
Daily visit / QR scan counters.

Each increment is a single INSERT ... ON CONFLICT (restaurant_id, date)
DO UPDATE statement, so concurrent requests for the same restaurant and day
never lose an update.
"""
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from menuisland.models.analytics import AnalyticsDay
from menuisland.utils.db_compat import dialect_insert


async def _increment_day_counter(
    db: AsyncSession,
    restaurant_id: int,
    column: str,
    day: Optional[date] = None,
) -> None:
    day = day or date.today()
    values = {"restaurant_id": restaurant_id, "date": day, "visits": 0, "qr_scans": 0}
    values[column] = 1

    table = AnalyticsDay.__table__
    stmt = dialect_insert(db, table).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.restaurant_id, table.c.date],
        set_={column: table.c[column] + 1},
    )
    await db.execute(stmt)


async def increment_visits(db: AsyncSession, restaurant_id: int, day: Optional[date] = None) -> None:
    """Count one public menu visit for the given day (default: today)."""
    await _increment_day_counter(db, restaurant_id, "visits", day)


async def increment_qr_scans(db: AsyncSession, restaurant_id: int, day: Optional[date] = None) -> None:
    """Count one QR code scan for the given day (default: today)."""
    await _increment_day_counter(db, restaurant_id, "qr_scans", day)
