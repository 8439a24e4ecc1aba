import secrets
from typing import Optional

from fastapi import Header, HTTPException

from drawapp.core.config import db_configured, settings


def require_db() -> None:
    if not db_configured():
        raise HTTPException(status_code=500, detail="Database is not configured")


def require_draw_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing user id")
    if (x_user_role or "").lower() not in settings.draw_allowed_roles:
        raise HTTPException(
            status_code=403, detail="Only organization owners and admins can draw winners"
        )
    return x_user_id


def require_internal_token(x_internal_token: Optional[str] = Header(None)) -> None:
    if not settings.internal_token:
        return
    if not x_internal_token or not secrets.compare_digest(x_internal_token, settings.internal_token):
        raise HTTPException(status_code=401, detail="Invalid internal token")
