"""
Restaurants API - tenant creation (with subdomain provisioning) and deletion
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import Field, field_validator
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from menuisland.api.auth import CurrentUser, ensure_can_manage, get_current_user, require_admin
from menuisland.api.schemas import CamelModel, RestaurantOut
from menuisland.database import get_db
from menuisland.models.analytics import AnalyticsDay, LanguageUsageDay, MenuItemViewEvent
from menuisland.models.menu import Category, MenuItem, menu_item_allergens
from menuisland.models.restaurant import Restaurant
from menuisland.services.provisioning import SubdomainProvisioner, generate_subdomain, get_provisioner
from menuisland.utils.validators import validate_subdomain, validate_timezone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])


class RestaurantCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    location: Optional[str] = None
    logo_url: Optional[str] = None
    template_id: Optional[int] = None
    category: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: Optional[str]) -> Optional[str]:
        return validate_timezone(v)


@router.post("", response_model=RestaurantOut, status_code=201)
async def create_restaurant(
    data: RestaurantCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    provisioner: SubdomainProvisioner = Depends(get_provisioner),
):
    """Create a restaurant under a free subdomain, then provision its DNS record"""

    async def taken_locally(name: str) -> bool:
        result = await db.execute(select(Restaurant.id).where(Restaurant.subdomain == name))
        return result.first() is not None

    base = generate_subdomain(data.name)
    try:
        subdomain = validate_subdomain(
            await provisioner.find_available_subdomain(base, is_taken=taken_locally)
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    restaurant = Restaurant(
        **data.model_dump(),
        subdomain=subdomain,
        owner_id=current_user.id,
    )
    db.add(restaurant)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request claimed the same name between the check and the insert
        await db.rollback()
        logger.warning(f"Subdomain '{subdomain}' was taken concurrently")
        raise HTTPException(status_code=409, detail="Subdomain already taken")
    await db.refresh(restaurant)
    logger.info(f"Restaurant {restaurant.id} created with subdomain '{subdomain}'")

    if not await provisioner.create_subdomain(subdomain):
        logger.warning(f"Failed to create subdomain for restaurant {restaurant.id}, but restaurant was created")

    return restaurant


@router.get("/{restaurant_id}", response_model=RestaurantOut)
async def get_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    restaurant = result.scalar_one_or_none()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    ensure_can_manage(restaurant, current_user)
    return restaurant


async def delete_restaurant_cascade(db: AsyncSession, restaurant_id: int) -> None:
    """Remove a restaurant with its menu and all of its analytics rows"""
    category_ids = select(Category.id).where(Category.restaurant_id == restaurant_id)
    item_ids = select(MenuItem.id).where(MenuItem.category_id.in_(category_ids))

    await db.execute(delete(menu_item_allergens).where(menu_item_allergens.c.menu_item_id.in_(item_ids)))
    await db.execute(delete(MenuItem).where(MenuItem.category_id.in_(category_ids)))
    await db.execute(delete(Category).where(Category.restaurant_id == restaurant_id))
    await db.execute(delete(AnalyticsDay).where(AnalyticsDay.restaurant_id == restaurant_id))
    await db.execute(delete(LanguageUsageDay).where(LanguageUsageDay.restaurant_id == restaurant_id))
    await db.execute(delete(MenuItemViewEvent).where(MenuItemViewEvent.restaurant_id == restaurant_id))
    await db.execute(delete(Restaurant).where(Restaurant.id == restaurant_id))


@router.delete("/{restaurant_id}", status_code=204)
async def delete_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
    provisioner: SubdomainProvisioner = Depends(get_provisioner),
):
    """Delete a restaurant (admin only); DNS cleanup is best-effort"""
    result = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    restaurant = result.scalar_one_or_none()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    subdomain = restaurant.subdomain
    await delete_restaurant_cascade(db, restaurant_id)
    await db.commit()
    logger.info(f"Restaurant {restaurant_id} deleted by {current_user.id}")

    if not await provisioner.delete_subdomain(subdomain):
        logger.warning(f"DNS record for '{subdomain}' could not be removed")

    return Response(status_code=204)
