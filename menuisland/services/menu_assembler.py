"""
Menu tree assembly: restaurant -> categories -> items -> allergens.

The tree is built from three batched queries (categories, items, allergen
links) instead of one query per category and per item. Ordering is
(sort_order, id) for categories and for items within each category, which is
the exact order the public menu renders.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menuisland.models.restaurant import Restaurant, Template
from menuisland.models.menu import Category, MenuItem, Allergen, menu_item_allergens
from menuisland.services.tenant_directory import resolve_template
from menuisland.utils.helpers import format_price

logger = logging.getLogger(__name__)


class RestaurantNotFound(LookupError):
    """Raised when a menu is requested for an unknown restaurant id"""

    def __init__(self, restaurant_id: int):
        super().__init__(f"Restaurant {restaurant_id} not found")
        self.restaurant_id = restaurant_id


@dataclass
class MenuTree:
    restaurant: Dict[str, Any]
    template: Optional[Dict[str, Any]]
    categories: List[Dict[str, Any]]
    # Records skipped because a join pointed at a row that no longer exists
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "restaurant": self.restaurant,
            "template": self.template,
            "categories": self.categories,
        }


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def restaurant_to_dict(r: Restaurant) -> Dict[str, Any]:
    return {
        "id": r.id,
        "name": r.name,
        "subdomain": r.subdomain,
        "location": r.location,
        "logo_url": r.logo_url,
        "owner_id": r.owner_id,
        "template_id": r.template_id,
        "category": r.category,
        "timezone": r.timezone,
        "created_at": r.created_at,
        "updated_at": r.updated_at,
    }


def template_to_dict(t: Template) -> Dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "description": t.description,
        "thumbnail_url": t.thumbnail_url,
        "css_styles": t.css_styles,
        "color_scheme": t.color_scheme or {},
        "is_popular": bool(t.is_popular),
        "is_new": bool(t.is_new),
    }


def category_to_dict(c: Category) -> Dict[str, Any]:
    return {
        "id": c.id,
        "restaurant_id": c.restaurant_id,
        "name": c.name,
        "description": c.description,
        "sort_order": c.sort_order,
        "items": [],
    }


def item_to_dict(i: MenuItem) -> Dict[str, Any]:
    return {
        "id": i.id,
        "category_id": i.category_id,
        "name": i.name,
        "description": i.description,
        "price": format_price(i.price_cents, i.currency),
        "price_cents": i.price_cents,
        "currency": i.currency,
        "image_url": i.image_url,
        "sort_order": i.sort_order,
        "allergens": [],
    }


def allergen_to_dict(a: Allergen) -> Dict[str, Any]:
    return {
        "id": a.id,
        "name": a.name,
        "icon": a.icon,
        "description": a.description,
    }


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

async def assemble_menu(db: AsyncSession, restaurant_id: int) -> MenuTree:
    """Build the full menu tree for a restaurant.

    Raises RestaurantNotFound if the restaurant does not exist. Dangling join
    references are skipped and reported in MenuTree.warnings rather than
    failing the whole tree.
    """
    result = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    restaurant = result.scalar_one_or_none()
    if restaurant is None:
        raise RestaurantNotFound(restaurant_id)

    template = await resolve_template(db, restaurant.template_id)
    warnings: List[str] = []

    # 1. Categories
    cat_result = await db.execute(
        select(Category)
        .where(Category.restaurant_id == restaurant_id)
        .order_by(Category.sort_order, Category.id)
    )
    categories = [category_to_dict(c) for c in cat_result.scalars().all()]
    categories_by_id = {c["id"]: c for c in categories}

    # 2. Items for all categories at once, kept in (sort_order, id) order
    items_by_id: Dict[int, Dict[str, Any]] = {}
    if categories_by_id:
        item_result = await db.execute(
            select(MenuItem)
            .where(MenuItem.category_id.in_(list(categories_by_id)))
            .order_by(MenuItem.sort_order, MenuItem.id)
        )
        for item in item_result.scalars().all():
            item_dict = item_to_dict(item)
            categories_by_id[item.category_id]["items"].append(item_dict)
            items_by_id[item.id] = item_dict

    # 3. Allergen links, outer-joined so dangling links are visible
    if items_by_id:
        link_result = await db.execute(
            select(
                menu_item_allergens.c.menu_item_id,
                menu_item_allergens.c.allergen_id,
                Allergen,
            )
            .select_from(menu_item_allergens)
            .outerjoin(Allergen, Allergen.id == menu_item_allergens.c.allergen_id)
            .where(menu_item_allergens.c.menu_item_id.in_(list(items_by_id)))
            .order_by(menu_item_allergens.c.menu_item_id, menu_item_allergens.c.allergen_id)
        )
        allergens_by_item = defaultdict(list)
        for menu_item_id, allergen_id, allergen in link_result.all():
            if allergen is None:
                warnings.append(f"menu item {menu_item_id} references missing allergen {allergen_id}")
                continue
            allergens_by_item[menu_item_id].append(allergen_to_dict(allergen))
        for menu_item_id, allergens in allergens_by_item.items():
            items_by_id[menu_item_id]["allergens"] = allergens

    for warning in warnings:
        logger.warning(f"Restaurant {restaurant_id}: skipped {warning}")

    return MenuTree(
        restaurant=restaurant_to_dict(restaurant),
        template=template_to_dict(template) if template else None,
        categories=categories,
        warnings=warnings,
    )
