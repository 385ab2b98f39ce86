"""Booking endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_booking_service, get_current_user, require_owner
from app.core.database import get_db
from app.core.exceptions import InvalidStatusTransition, NotFound, PermissionDenied
from app.models.user import User
from app.schemas.booking import (
    BookingCreate,
    BookingInDB,
    BookingResponse,
    BookingStatusUpdate,
)
from app.services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    booking: BookingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service),
):
    """
    Book a court.

    Checks the slot, prices it, charges for it and confirms it. A taken slot
    or a failed payment comes back as 400 with the reason in `message`.

    Args:
        booking: Court, date and HH:MM interval
        user: Authenticated caller
        db: Database session
        booking_service: Booking service

    Returns:
        The confirmed booking
    """
    try:
        result = await booking_service.create_booking(
            db,
            user_id=user.id,
            court_id=booking.court_id,
            booking_date=booking.date,
            start_time=booking.start_time,
            end_time=booking.end_time,
        )
    except Exception as e:
        logger.error(f"Failed to create booking: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create booking")

    if not result.success:
        return JSONResponse(status_code=400, content=result.model_dump(mode="json"))

    return result


@router.get("/mine", response_model=List[BookingInDB])
async def list_my_bookings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service),
):
    """List the caller's bookings, newest first."""
    return await booking_service.list_user_bookings(db, user.id)


@router.get("/owner", response_model=List[BookingInDB])
async def list_owner_bookings(
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service),
):
    """List bookings on every venue the caller owns."""
    return await booking_service.list_owner_bookings(db, user.id)


@router.put("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service),
):
    """
    Cancel one of the caller's confirmed bookings.

    Args:
        booking_id: Booking ID
        user: Authenticated caller
        db: Database session
        booking_service: Booking service
    """
    try:
        result = await booking_service.cancel_user_booking(db, booking_id, user.id)
    except Exception as e:
        logger.error(f"Failed to cancel booking {booking_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to cancel booking")

    if not result.success:
        return JSONResponse(status_code=400, content=result.model_dump(mode="json"))

    return result


@router.patch("/{booking_id}", response_model=BookingInDB)
async def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service),
):
    """
    Change a booking's status (venue owner or admin).

    Only lifecycle moves are accepted: Confirmed to Cancelled or Completed.
    Cancelled and Completed bookings are final.
    """
    try:
        return await booking_service.update_booking_status(
            db, booking_id, update.status, actor=user
        )
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
