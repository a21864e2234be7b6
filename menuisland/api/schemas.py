"""
Response schemas for the public menu tree (camelCase JSON)
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class AllergenOut(CamelModel):
    id: int
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None


class MenuItemOut(CamelModel):
    id: int
    category_id: int
    name: str
    description: Optional[str] = None
    price: str
    price_cents: int
    currency: str
    image_url: Optional[str] = None
    sort_order: int = 0
    allergens: List[AllergenOut] = []


class CategoryOut(CamelModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str] = None
    sort_order: int = 0
    items: List[MenuItemOut] = []


class RestaurantOut(CamelModel):
    id: int
    name: str
    subdomain: str
    location: Optional[str] = None
    logo_url: Optional[str] = None
    owner_id: Optional[str] = None
    template_id: Optional[int] = None
    category: Optional[str] = None
    timezone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TemplateOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    css_styles: Optional[str] = None
    color_scheme: Dict[str, Any] = {}
    is_popular: bool = False
    is_new: bool = False


class MenuResponse(CamelModel):
    restaurant: RestaurantOut
    template: Optional[TemplateOut] = None
    categories: List[CategoryOut]
    language: str
