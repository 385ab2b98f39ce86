"""Shared route dependencies."""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.database import get_db
from app.models.user import User, UserRole
from app.services.booking_service import BookingService
from app.services.report_service import ReportService


async def get_current_user(
    x_user_id: Optional[int] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the caller from the X-User-Id header.

    Authentication happens in front of this service; the gateway forwards the
    authenticated user's id.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await db.get(User, x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")

    return user


async def get_optional_user(
    x_user_id: Optional[int] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None."""
    if x_user_id is None:
        return None
    return await db.get(User, x_user_id)


def require_role(*roles: str):
    """Dependency that only lets callers with one of the given roles through."""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency


require_owner = require_role(UserRole.FACILITY_OWNER, UserRole.ADMIN)
require_admin = require_role(UserRole.ADMIN)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


def get_report_service(request: Request) -> ReportService:
    return request.app.state.report_service
