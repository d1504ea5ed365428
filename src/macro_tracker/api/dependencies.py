"""Request dependencies for caller identity and calendar day."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Header, HTTPException, Request, status

if TYPE_CHECKING:
    from macro_tracker.containers import AppContainer


async def require_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller identity verified by the upstream authorizer."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User ID not found in request context",
        )
    return x_user_id.strip()


async def get_today(
    request: Request, x_user_timezone: str | None = Header(default=None)
) -> date:
    """Return today's date in the caller's timezone."""
    container: AppContainer = request.app.state.container
    return today_in(x_user_timezone, container.settings.default_timezone)


def today_in(timezone_name: str | None, fallback: str) -> date:
    """Return the current calendar day in a timezone, falling back when invalid."""
    return datetime.now(tz=_resolve_zone(timezone_name, fallback)).date()


def _resolve_zone(timezone_name: str | None, fallback: str) -> ZoneInfo:
    if timezone_name:
        try:
            return ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return ZoneInfo(fallback)
