"""Venue endpoints."""
from typing import List, Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_optional_user, get_settings, require_admin, require_owner
from app.core.config import Settings
from app.core.database import get_db
from app.models.user import User, UserRole
from app.models.venue import Venue
from app.schemas.venue import VenueCreate, VenueInDB, VenueUpdate

router = APIRouter(prefix="/venues", tags=["venues"])


def _check_timezone(tz_name: str):
    try:
        pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise HTTPException(status_code=400, detail=f"Unknown timezone '{tz_name}'")


def can_manage_venue(venue: Venue, user: Optional[User]) -> bool:
    return user is not None and (user.role == UserRole.ADMIN or venue.owner_id == user.id)


async def get_managed_venue(db: AsyncSession, venue_id: int, user: User) -> Venue:
    """Load a venue the caller owns (or any venue, for admins)."""
    venue = await db.get(Venue, venue_id)

    if not venue:
        raise HTTPException(status_code=404, detail="Venue not found")

    if not can_manage_venue(venue, user):
        raise HTTPException(status_code=403, detail="You do not manage this venue")

    return venue


@router.post("", response_model=VenueInDB, status_code=201)
async def create_venue(
    venue: VenueCreate,
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Create a venue owned by the caller.

    New venues are unlisted until an admin approves them.

    Args:
        venue: Venue data
        user: Facility owner creating the venue
        db: Database session
        settings: Application settings (default timezone)

    Returns:
        Created venue
    """
    venue_data = venue.model_dump()
    venue_data["timezone"] = venue_data.get("timezone") or settings.DEFAULT_TIMEZONE
    _check_timezone(venue_data["timezone"])

    db_venue = Venue(owner_id=user.id, is_approved=False, **venue_data)
    db.add(db_venue)
    await db.commit()
    await db.refresh(db_venue)

    return db_venue


@router.get("", response_model=List[VenueInDB])
async def list_venues(
    city: Optional[str] = Query(default=None, description="Filter by city"),
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    """
    List approved venues.

    Args:
        city: Optional city filter
        skip: Number of records to skip
        limit: Maximum number of records to return
        db: Database session

    Returns:
        List of venues
    """
    query = select(Venue).where(Venue.is_approved.is_(True))
    if city:
        query = query.where(Venue.city == city)

    result = await db.execute(query.order_by(Venue.id).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/{venue_id}", response_model=VenueInDB)
async def get_venue(
    venue_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a venue. Unapproved venues are visible to their owner and admins only."""
    venue = await db.get(Venue, venue_id)

    if not venue or (not venue.is_approved and not can_manage_venue(venue, user)):
        raise HTTPException(status_code=404, detail="Venue not found")

    return venue


@router.patch("/{venue_id}", response_model=VenueInDB)
async def update_venue(
    venue_id: int,
    venue_update: VenueUpdate,
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    """Update a venue's details."""
    venue = await get_managed_venue(db, venue_id, user)

    update_data = venue_update.model_dump(exclude_unset=True)
    if update_data.get("timezone"):
        _check_timezone(update_data["timezone"])
    else:
        update_data.pop("timezone", None)

    for field, value in update_data.items():
        setattr(venue, field, value)

    await db.commit()
    await db.refresh(venue)

    return venue


@router.post("/{venue_id}/approve", response_model=VenueInDB)
async def approve_venue(
    venue_id: int,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Approve a venue for public listing (admin only)."""
    venue = await db.get(Venue, venue_id)

    if not venue:
        raise HTTPException(status_code=404, detail="Venue not found")

    venue.is_approved = True
    await db.commit()
    await db.refresh(venue)

    return venue
