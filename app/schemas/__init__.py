"""API schemas."""
from app.schemas.venue import (
    VenueCreate,
    VenueUpdate,
    VenueInDB,
)
from app.schemas.court import (
    CourtCreate,
    CourtUpdate,
    CourtInDB,
    CourtAvailability,
)
from app.schemas.booking import (
    BookingCreate,
    BookingStatusUpdate,
    BookingInDB,
    BookingResponse,
)
from app.schemas.report import (
    ReportCreate,
    ReportUpdate,
    ReportInDB,
)

__all__ = [
    "VenueCreate",
    "VenueUpdate",
    "VenueInDB",
    "CourtCreate",
    "CourtUpdate",
    "CourtInDB",
    "CourtAvailability",
    "BookingCreate",
    "BookingStatusUpdate",
    "BookingInDB",
    "BookingResponse",
    "ReportCreate",
    "ReportUpdate",
    "ReportInDB",
]
