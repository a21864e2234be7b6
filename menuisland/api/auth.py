"""
Auth contract - identity is supplied by the upstream auth layer.

The gateway in front of this service authenticates the session and forwards
the user id and admin flag as headers; they are trusted as-is here.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

from menuisland.models.restaurant import Restaurant

TRUTHY = {"1", "true", "yes", "on"}


class CurrentUser(BaseModel):
    id: str
    is_admin: bool = False


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_admin: Optional[str] = Header(None),
) -> CurrentUser:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return CurrentUser(
        id=x_user_id.strip(),
        is_admin=(x_user_admin or "").strip().lower() in TRUTHY,
    )


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden: Admin access required")
    return current_user


def ensure_can_manage(restaurant: Restaurant, user: CurrentUser) -> None:
    """Owners manage their own restaurants, admins manage all of them"""
    if not user.is_admin and restaurant.owner_id != user.id:
        raise HTTPException(status_code=403, detail="Permission denied")
