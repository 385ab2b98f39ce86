"""Booking schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime, date

from app.schemas.court import HHMM_PATTERN


class BookingCreate(BaseModel):
    """Schema for a booking request."""

    court_id: int
    date: date
    start_time: str = Field(..., pattern=HHMM_PATTERN, description="Start time (HH:MM)")
    end_time: str = Field(..., pattern=HHMM_PATTERN, description="End time (HH:MM)")


class BookingStatusUpdate(BaseModel):
    """Schema for an owner/admin status change."""

    status: str


class BookingInDB(BaseModel):
    """Schema for booking from database."""

    id: int
    user_id: int
    venue_id: int
    court_id: int
    date: date
    start_time: str
    end_time: str
    total_price: float
    status: str
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    """Outcome of a booking operation."""

    success: bool
    message: str
    booking: Optional[BookingInDB] = None
