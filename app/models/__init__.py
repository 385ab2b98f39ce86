"""Database models."""
from app.models.user import User, UserRole
from app.models.venue import Venue
from app.models.court import Court
from app.models.booking import Booking, BookingStatus
from app.models.report import Report

__all__ = ["User", "UserRole", "Venue", "Court", "Booking", "BookingStatus", "Report"]
