"""
Public menu API - tenant resolution, menu view and tracking endpoints.
No authentication: these are hit by diners' browsers.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from pydantic import Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menuisland.api.schemas import CamelModel, MenuResponse
from menuisland.config import get_settings
from menuisland.database import get_db
from menuisland.models.restaurant import Restaurant
from menuisland.services.counters import increment_visits, increment_qr_scans
from menuisland.services.menu_assembler import assemble_menu
from menuisland.services.tenant_directory import resolve_tenant, subdomain_from_host
from menuisland.services.trackers import track_menu_item_view, track_language_usage
from menuisland.services.translation import Translator, detect_language, get_translator
from menuisland.utils.helpers import local_now, local_today

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(tags=["public"])

MENU_UNAVAILABLE = "Menu unavailable"


class TrackViewRequest(CamelModel):
    menu_item_id: Optional[int] = None
    language: Optional[str] = Field(default=None, max_length=16)
    user_agent: Optional[str] = None


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def serve_menu(
    db: AsyncSession,
    restaurant: Restaurant,
    language: str,
    translator: Translator,
) -> MenuResponse:
    """Count the visit, then assemble and (if needed) translate the menu"""
    await increment_visits(db, restaurant.id, day=local_today(restaurant.timezone))
    await db.commit()

    tree = await assemble_menu(db, restaurant.id)
    if language != translator.source_lang:
        tree = await translator.translate_menu(tree, language)

    return MenuResponse(**tree.to_dict(), language=language)


@router.get("/")
async def root(
    request: Request,
    lang: Optional[str] = Query(None),
    accept_language: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    translator: Translator = Depends(get_translator),
):
    """Restaurant menu on <tenant>.<BASE_DOMAIN>, platform home anywhere else"""
    subdomain = subdomain_from_host(request.headers.get("host"))
    if subdomain:
        restaurant = await resolve_tenant(db, subdomain)
        if restaurant:
            language = detect_language(lang, accept_language, settings.SOURCE_LANGUAGE)
            return await serve_menu(db, restaurant, language, translator)

    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
    }


@router.get("/api/view/{subdomain}", response_model=MenuResponse)
async def view_menu(
    subdomain: str,
    lang: Optional[str] = Query(None),
    accept_language: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    translator: Translator = Depends(get_translator),
):
    """Public menu for a tenant; counts a visit"""
    restaurant = await resolve_tenant(db, subdomain)
    if not restaurant:
        raise HTTPException(status_code=404, detail=MENU_UNAVAILABLE)

    language = detect_language(lang, accept_language, settings.SOURCE_LANGUAGE)
    return await serve_menu(db, restaurant, language, translator)


@router.get("/api/scan/{subdomain}")
async def track_scan(
    subdomain: str,
    db: AsyncSession = Depends(get_db),
):
    """QR code landing hit; counts a scan"""
    restaurant = await resolve_tenant(db, subdomain)
    if not restaurant:
        raise HTTPException(status_code=404, detail=MENU_UNAVAILABLE)

    await increment_qr_scans(db, restaurant.id, day=local_today(restaurant.timezone))
    await db.commit()
    return {"success": True}


@router.post("/api/restaurants/{restaurant_id}/track-view")
async def track_view(
    restaurant_id: int,
    data: TrackViewRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Client-side tracking: language usage tick, plus an item view when menuItemId is set"""
    result = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    restaurant = result.scalar_one_or_none()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    # Event times are recorded on the restaurant-local clock, the one the analytics windows use
    now = local_now(restaurant.timezone)
    language = data.language or settings.SOURCE_LANGUAGE
    await track_language_usage(db, restaurant.id, language, day=now.date(), now=now)

    if data.menu_item_id is not None:
        await track_menu_item_view(
            db,
            restaurant_id=restaurant.id,
            menu_item_id=data.menu_item_id,
            language=language,
            user_agent=data.user_agent or request.headers.get("user-agent"),
            ip=_client_ip(request),
            viewed_at=now,
        )

    await db.commit()
    return {"success": True}
