"""
Item view and language usage trackers
"""
import ipaddress
from datetime import date, datetime
from typing import Optional

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from menuisland.config import get_settings
from menuisland.models.analytics import MenuItemViewEvent, LanguageUsageDay
from menuisland.utils.db_compat import dialect_insert
from menuisland.utils.validators import normalize_language

settings = get_settings()

USER_AGENT_MAX_LENGTH = 512


def truncate_ip(ip: Optional[str]) -> Optional[str]:
    """Anonymize a client IP: IPv4 keeps its /24, IPv6 its /48."""
    if not ip:
        return None
    try:
        address = ipaddress.ip_address(ip.strip())
    except ValueError:
        return None
    prefix = 24 if address.version == 4 else 48
    network = ipaddress.ip_network(f"{address}/{prefix}", strict=False)
    return str(network.network_address)


async def track_menu_item_view(
    db: AsyncSession,
    restaurant_id: int,
    menu_item_id: int,
    language: Optional[str] = None,
    user_agent: Optional[str] = None,
    ip: Optional[str] = None,
    viewed_at: Optional[datetime] = None,
) -> None:
    """Append one view event. Pure insert: nothing is read first."""
    await db.execute(
        insert(MenuItemViewEvent).values(
            menu_item_id=menu_item_id,
            restaurant_id=restaurant_id,
            viewer_language=normalize_language(language, default=settings.SOURCE_LANGUAGE) if language else None,
            user_agent=user_agent[:USER_AGENT_MAX_LENGTH] if user_agent else None,
            ip_address=truncate_ip(ip),
            viewed_at=viewed_at or datetime.now(),
        )
    )


async def track_language_usage(
    db: AsyncSession,
    restaurant_id: int,
    language: str,
    day: Optional[date] = None,
    now: Optional[datetime] = None,
) -> None:
    """Count one menu view in `language` for the day, as an atomic upsert."""
    now = now or datetime.now()
    day = day or now.date()
    code = normalize_language(language, default=settings.SOURCE_LANGUAGE)

    table = LanguageUsageDay.__table__
    stmt = dialect_insert(db, table).values(
        restaurant_id=restaurant_id,
        language=code,
        date=day,
        view_count=1,
        last_used=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.restaurant_id, table.c.language, table.c.date],
        set_={
            "view_count": table.c.view_count + 1,
            "last_used": stmt.excluded.last_used,
        },
    )
    await db.execute(stmt)
