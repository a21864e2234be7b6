"""
Tenant directory - maps a subdomain (or Host header) to a restaurant and its template.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menuisland.config import get_settings
from menuisland.models.restaurant import Restaurant, Template

logger = logging.getLogger(__name__)
settings = get_settings()


def normalize_subdomain(value: str) -> str:
    return (value or "").strip().lower()


def subdomain_from_host(host: Optional[str], base_domain: Optional[str] = None) -> Optional[str]:
    """Extract the tenant label from a Host header.

    Returns None for the bare platform domain, for "www." and for hosts
    outside the base domain; callers serve the platform home in that case.
    """
    if not host:
        return None
    base = (base_domain or settings.BASE_DOMAIN).lower()
    hostname = host.strip().lower().split(":", 1)[0].rstrip(".")

    suffix = f".{base}"
    if not hostname.endswith(suffix):
        return None
    label = hostname[: -len(suffix)]
    if not label or label == "www" or "." in label:
        return None
    return label


async def resolve_tenant(db: AsyncSession, subdomain: str) -> Optional[Restaurant]:
    """Exact, case-insensitive lookup of a restaurant by subdomain."""
    key = normalize_subdomain(subdomain)
    if not key:
        return None

    result = await db.execute(select(Restaurant).where(Restaurant.subdomain == key))
    restaurant = result.scalar_one_or_none()
    if restaurant is None:
        logger.info(f"No tenant for subdomain '{key}'")
    return restaurant


async def resolve_template(db: AsyncSession, template_id: Optional[int]) -> Optional[Template]:
    """Load a restaurant's template, falling back to the configured default.

    A reference to a template that no longer exists is a data-integrity
    problem: it is logged and the menu is served without styling.
    """
    resolved_id = template_id or settings.DEFAULT_TEMPLATE_ID
    result = await db.execute(select(Template).where(Template.id == resolved_id))
    template = result.scalar_one_or_none()
    if template is None:
        logger.error(f"Template {resolved_id} not found (requested: {template_id}); serving unstyled menu")
    return template
