"""
Analytics API - per-restaurant dashboards and the operator overview
"""
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menuisland.api.auth import CurrentUser, ensure_can_manage, get_current_user
from menuisland.api.schemas import CamelModel
from menuisland.config import get_settings
from menuisland.database import get_db
from menuisland.models.restaurant import Restaurant
from menuisland.services import analytics_service
from menuisland.utils.helpers import local_today

settings = get_settings()

router = APIRouter(prefix="/api", tags=["analytics"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class DailyStat(CamelModel):
    date: date
    visits: int
    qr_scans: int


class MostViewedItem(CamelModel):
    menu_item_id: int
    name: str
    description: Optional[str] = None
    price: str
    price_cents: int
    currency: str
    category_name: str
    view_count: int


class LanguageStat(CamelModel):
    language: str
    view_count: int
    last_used: Optional[datetime] = None
    percentage: float


class AnalyticsSummary(CamelModel):
    basic_stats: List[DailyStat]
    most_viewed_items: List[MostViewedItem]
    language_stats: List[LanguageStat]
    total_views: int
    total_qr_scans: int


class AnalyticsOverview(CamelModel):
    total_restaurants: int
    total_views: int
    total_qr_scans: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

async def _get_manageable_restaurant(
    db: AsyncSession,
    restaurant_id: int,
    current_user: CurrentUser,
) -> Restaurant:
    result = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    restaurant = result.scalar_one_or_none()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    ensure_can_manage(restaurant, current_user)
    return restaurant


@router.get("/restaurants/{restaurant_id}/analytics", response_model=AnalyticsSummary)
async def get_restaurant_analytics(
    restaurant_id: int,
    days: int = Query(settings.DEFAULT_ANALYTICS_DAYS, ge=1, le=3650),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Visits, QR scans, most viewed dishes and language mix for one restaurant"""
    restaurant = await _get_manageable_restaurant(db, restaurant_id, current_user)
    return await analytics_service.summarize(
        db, restaurant.id, days, today=local_today(restaurant.timezone)
    )


@router.get("/restaurants/{restaurant_id}/analytics/daily", response_model=List[DailyStat])
async def get_restaurant_daily_stats(
    restaurant_id: int,
    days: int = Query(settings.DEFAULT_ANALYTICS_DAYS, ge=1, le=3650),
    fill: bool = Query(False, description="Return one entry per day, zero-filled"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Daily visits/QR scans; sparse unless fill=true"""
    restaurant = await _get_manageable_restaurant(db, restaurant_id, current_user)
    today = local_today(restaurant.timezone)
    rows = await analytics_service.get_analytics(db, restaurant.id, days, today=today)
    if fill:
        rows = analytics_service.zero_fill(rows, days, today=today)
    return rows


@router.get("/analytics/overview", response_model=AnalyticsOverview)
async def get_analytics_overview(
    days: int = Query(settings.DEFAULT_ANALYTICS_DAYS, ge=1, le=3650),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Totals over the current user's restaurants (all restaurants for admins)"""
    owner_id = None if current_user.is_admin else current_user.id
    return await analytics_service.get_owner_overview(db, owner_id, days)
