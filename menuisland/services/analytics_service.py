"""
Analytics aggregation over a rolling window of days.

All queries look at [today - days, today] inclusive. Per-day series are
sparse: days without activity are absent, use zero_fill() for charts.
"""
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, or_, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from menuisland.config import get_settings
from menuisland.models.analytics import AnalyticsDay, MenuItemViewEvent, LanguageUsageDay
from menuisland.models.menu import Category, MenuItem
from menuisland.models.restaurant import Restaurant
from menuisland.utils.db_compat import window_start, window_start_datetime
from menuisland.utils.helpers import format_price, local_today

settings = get_settings()


def _window_end_datetime(today: date) -> datetime:
    return datetime.combine(today + timedelta(days=1), time.min)


async def get_analytics(
    db: AsyncSession,
    restaurant_id: int,
    days: int = 30,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Daily visits and QR scans, one row per active day, oldest first"""
    today = today or date.today()
    result = await db.execute(
        select(AnalyticsDay)
        .where(
            AnalyticsDay.restaurant_id == restaurant_id,
            AnalyticsDay.date >= window_start(days, today),
            AnalyticsDay.date <= today,
        )
        .order_by(AnalyticsDay.date)
    )
    return [
        {"date": row.date, "visits": row.visits or 0, "qr_scans": row.qr_scans or 0}
        for row in result.scalars().all()
    ]


def zero_fill(rows: List[Dict[str, Any]], days: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Expand a sparse daily series into one entry per day of the window"""
    today = today or date.today()
    by_date = {row["date"]: row for row in rows}
    current = window_start(days, today)
    dense = []
    while current <= today:
        row = by_date.get(current)
        dense.append({
            "date": current,
            "visits": row["visits"] if row else 0,
            "qr_scans": row["qr_scans"] if row else 0,
        })
        current += timedelta(days=1)
    return dense


async def get_most_viewed_menu_items(
    db: AsyncSession,
    restaurant_id: int,
    days: int = 30,
    limit: Optional[int] = None,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Top items by view events in the window.

    Ties on view count go to the lower item id. Events for items that were
    deleted, or that no longer belong to this restaurant, are ignored.
    """
    today = today or date.today()
    view_count = func.count(MenuItemViewEvent.id).label("view_count")

    result = await db.execute(
        select(
            MenuItem.id,
            MenuItem.name,
            MenuItem.description,
            MenuItem.price_cents,
            MenuItem.currency,
            Category.name.label("category_name"),
            view_count,
        )
        .select_from(MenuItemViewEvent)
        .join(MenuItem, MenuItem.id == MenuItemViewEvent.menu_item_id)
        .join(Category, Category.id == MenuItem.category_id)
        .where(
            MenuItemViewEvent.restaurant_id == restaurant_id,
            Category.restaurant_id == restaurant_id,
            MenuItemViewEvent.viewed_at >= window_start_datetime(days, today),
            MenuItemViewEvent.viewed_at < _window_end_datetime(today),
        )
        .group_by(
            MenuItem.id,
            MenuItem.name,
            MenuItem.description,
            MenuItem.price_cents,
            MenuItem.currency,
            Category.name,
        )
        .order_by(view_count.desc(), MenuItem.id.asc())
        .limit(limit or settings.TOP_VIEWED_LIMIT)
    )

    return [
        {
            "menu_item_id": row.id,
            "name": row.name,
            "description": row.description,
            "price": format_price(row.price_cents, row.currency),
            "price_cents": row.price_cents,
            "currency": row.currency,
            "category_name": row.category_name,
            "view_count": row.view_count,
        }
        for row in result
    ]


async def get_menu_language_stats(
    db: AsyncSession,
    restaurant_id: int,
    days: int = 30,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Views per language in the window, most used first"""
    today = today or date.today()
    total_views = func.sum(LanguageUsageDay.view_count).label("view_count")

    result = await db.execute(
        select(
            LanguageUsageDay.language,
            total_views,
            func.max(LanguageUsageDay.last_used).label("last_used"),
        )
        .where(
            LanguageUsageDay.restaurant_id == restaurant_id,
            LanguageUsageDay.date >= window_start(days, today),
            LanguageUsageDay.date <= today,
        )
        .group_by(LanguageUsageDay.language)
        .order_by(total_views.desc(), LanguageUsageDay.language.asc())
    )
    rows = result.all()

    grand_total = sum(row.view_count or 0 for row in rows)
    return [
        {
            "language": row.language,
            "view_count": row.view_count or 0,
            "last_used": row.last_used,
            "percentage": round((row.view_count or 0) / grand_total * 100, 1) if grand_total else 0,
        }
        for row in rows
    ]


async def summarize(
    db: AsyncSession,
    restaurant_id: int,
    days: int = 30,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Dashboard payload for one restaurant; totals are computed here, once"""
    basic_stats = await get_analytics(db, restaurant_id, days, today=today)
    most_viewed = await get_most_viewed_menu_items(db, restaurant_id, days, today=today)
    language_stats = await get_menu_language_stats(db, restaurant_id, days, today=today)

    return {
        "basic_stats": basic_stats,
        "most_viewed_items": most_viewed,
        "language_stats": language_stats,
        "total_views": sum(row["visits"] for row in basic_stats),
        "total_qr_scans": sum(row["qr_scans"] for row in basic_stats),
    }


async def get_owner_overview(
    db: AsyncSession,
    owner_id: Optional[str],
    days: int = 30,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Totals across all restaurants of an owner (every restaurant when owner_id is None)

    Each restaurant's window ends on its own local today, the same day its
    dashboard uses. Passing `today` pins every restaurant to that date.
    """
    timezones_query = select(Restaurant.timezone).distinct()
    count_query = select(func.count(Restaurant.id))
    if owner_id is not None:
        timezones_query = timezones_query.where(Restaurant.owner_id == owner_id)
        count_query = count_query.where(Restaurant.owner_id == owner_id)

    restaurant_count = (await db.execute(count_query)).scalar() or 0
    timezones = (await db.execute(timezones_query)).scalars().all()

    windows = []
    for tz in timezones:
        end = today or local_today(tz)
        windows.append(and_(
            Restaurant.timezone.is_(None) if tz is None else Restaurant.timezone == tz,
            AnalyticsDay.date >= window_start(days, end),
            AnalyticsDay.date <= end,
        ))

    if not windows:
        return {"total_restaurants": restaurant_count, "total_views": 0, "total_qr_scans": 0}

    totals_query = (
        select(
            func.coalesce(func.sum(AnalyticsDay.visits), 0).label("visits"),
            func.coalesce(func.sum(AnalyticsDay.qr_scans), 0).label("qr_scans"),
        )
        .select_from(AnalyticsDay)
        .join(Restaurant, Restaurant.id == AnalyticsDay.restaurant_id)
        .where(or_(*windows))
    )
    if owner_id is not None:
        totals_query = totals_query.where(Restaurant.owner_id == owner_id)

    totals = (await db.execute(totals_query)).one()

    return {
        "total_restaurants": restaurant_count,
        "total_views": int(totals.visits or 0),
        "total_qr_scans": int(totals.qr_scans or 0),
    }
