"""Booking conflict detection for a court on a given day."""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking, BookingStatus

logger = logging.getLogger(__name__)


def intervals_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """
    Half-open overlap test for [start1, end1) and [start2, end2).

    Times are zero-padded "HH:MM" strings, so string comparison is time order.
    Back-to-back intervals (end1 == start2) do not overlap.
    """
    if start1 == start2 and end1 == end2:
        return True
    return start1 < end2 and end1 > start2


async def get_blocking_bookings(
    db: AsyncSession,
    court_id: int,
    booking_date: date,
    exclude_booking_id: Optional[int] = None,
) -> List[Booking]:
    """Bookings on this court and day that occupy their slot."""
    conditions = [
        Booking.court_id == court_id,
        Booking.date == booking_date,
        Booking.status.in_(BookingStatus.BLOCKING),
    ]
    if exclude_booking_id is not None:
        conditions.append(Booking.id != exclude_booking_id)

    result = await db.execute(
        select(Booking).where(and_(*conditions)).order_by(Booking.start_time)
    )
    return list(result.scalars().all())


async def has_conflict(
    db: AsyncSession,
    court_id: int,
    booking_date: date,
    start_time: str,
    end_time: str,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """
    Check whether [start_time, end_time) overlaps an existing booking.

    Confirmed bookings and Pending ones (payment still in flight) both hold
    their slot. Read-only.

    Args:
        db: Database session
        court_id: Court to check
        booking_date: Calendar day of the booking
        start_time: Requested start ("HH:MM")
        end_time: Requested end ("HH:MM"), after start_time
        exclude_booking_id: Booking to ignore, e.g. the one being checked

    Returns:
        True if any blocking booking overlaps the interval
    """
    bookings = await get_blocking_bookings(db, court_id, booking_date, exclude_booking_id)

    for booking in bookings:
        if intervals_overlap(start_time, end_time, booking.start_time, booking.end_time):
            logger.info(
                f"Court {court_id} on {booking_date}: {start_time}-{end_time} overlaps "
                f"booking {booking.id} ({booking.start_time}-{booking.end_time}, {booking.status})"
            )
            return True

    return False
