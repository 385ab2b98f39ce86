"""Court endpoints."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_optional_user, require_owner
from app.api.venues import can_manage_venue, get_managed_venue
from app.core.database import get_db
from app.models.booking import Booking, BookingStatus
from app.models.court import Court
from app.models.user import User
from app.models.venue import Venue
from app.schemas.court import (
    BookedInterval,
    CourtAvailability,
    CourtCreate,
    CourtInDB,
    CourtUpdate,
)
from app.services.conflict_checker import get_blocking_bookings

router = APIRouter(tags=["courts"])


async def _get_court(db: AsyncSession, court_id: int) -> Court:
    court = await db.get(Court, court_id)
    if not court:
        raise HTTPException(status_code=404, detail="Court not found")
    return court


@router.post("/venues/{venue_id}/courts", response_model=CourtInDB, status_code=201)
async def create_court(
    venue_id: int,
    court: CourtCreate,
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    """
    Add a court to a venue.

    Args:
        venue_id: Venue ID
        court: Court data
        user: Venue owner or admin
        db: Database session

    Returns:
        Created court
    """
    await get_managed_venue(db, venue_id, user)

    db_court = Court(venue_id=venue_id, **court.model_dump())
    db.add(db_court)
    await db.commit()
    await db.refresh(db_court)

    return db_court


@router.get("/venues/{venue_id}/courts", response_model=List[CourtInDB])
async def list_courts(
    venue_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """List a venue's courts."""
    venue = await db.get(Venue, venue_id)

    if not venue or (not venue.is_approved and not can_manage_venue(venue, user)):
        raise HTTPException(status_code=404, detail="Venue not found")

    result = await db.execute(
        select(Court).where(Court.venue_id == venue_id).order_by(Court.id)
    )
    return result.scalars().all()


@router.get("/courts/{court_id}", response_model=CourtInDB)
async def get_court(
    court_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific court by ID."""
    return await _get_court(db, court_id)


@router.patch("/courts/{court_id}", response_model=CourtInDB)
async def update_court(
    court_id: int,
    court_update: CourtUpdate,
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a court's name, sport, price or hours.

    Changes apply to bookings made from now on; existing bookings keep the
    price they were charged.
    """
    court = await _get_court(db, court_id)
    await get_managed_venue(db, court.venue_id, user)

    update_data = {
        field: value
        for field, value in court_update.model_dump(exclude_unset=True).items()
        if value is not None
    }
    opening = update_data.get("operating_start", court.operating_start)
    closing = update_data.get("operating_end", court.operating_end)
    if opening >= closing:
        raise HTTPException(
            status_code=400,
            detail="operating_start must be before operating_end",
        )

    for field, value in update_data.items():
        setattr(court, field, value)

    await db.commit()
    await db.refresh(court)

    return court


@router.delete("/courts/{court_id}", status_code=204)
async def delete_court(
    court_id: int,
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a court and its booking history.

    Refused while the court has pending or confirmed bookings.
    """
    court = await _get_court(db, court_id)
    await get_managed_venue(db, court.venue_id, user)

    result = await db.execute(
        select(Booking.id).where(
            and_(
                Booking.court_id == court_id,
                Booking.status.in_(BookingStatus.BLOCKING),
            )
        ).limit(1)
    )
    if result.first() is not None:
        raise HTTPException(
            status_code=400,
            detail="Court has active bookings and cannot be deleted",
        )

    await db.delete(court)
    await db.commit()


@router.get("/courts/{court_id}/availability", response_model=CourtAvailability)
async def get_court_availability(
    court_id: int,
    booking_date: date = Query(..., alias="date", description="Day to check (YYYY-MM-DD)"),
    db: AsyncSession = Depends(get_db),
):
    """
    Occupied intervals on a court for one day.

    Everything inside operating hours that is not listed is free to book.
    """
    court = await _get_court(db, court_id)
    bookings = await get_blocking_bookings(db, court_id, booking_date)

    return CourtAvailability(
        court_id=court.id,
        date=booking_date.isoformat(),
        operating_start=court.operating_start,
        operating_end=court.operating_end,
        booked=[
            BookedInterval(start_time=b.start_time, end_time=b.end_time, status=b.status)
            for b in bookings
        ],
    )
