"""Court schemas."""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime

from app.models.court import SPORT_TYPES

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _check_sport_type(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in SPORT_TYPES:
        raise ValueError(f"sport_type must be one of: {', '.join(SPORT_TYPES)}")
    return value


class CourtBase(BaseModel):
    """Base court schema."""

    name: str = Field(..., min_length=1)
    sport_type: str
    price_per_hour: float = Field(..., gt=0)
    operating_start: str = Field(..., pattern=HHMM_PATTERN, description="Opening time (HH:MM)")
    operating_end: str = Field(..., pattern=HHMM_PATTERN, description="Closing time (HH:MM)")

    @field_validator("sport_type")
    @classmethod
    def check_sport_type(cls, value):
        return _check_sport_type(value)

    @model_validator(mode="after")
    def check_operating_hours(self):
        if self.operating_start >= self.operating_end:
            raise ValueError("operating_start must be before operating_end")
        return self


class CourtCreate(CourtBase):
    """Schema for creating a court."""

    pass


class CourtUpdate(BaseModel):
    """Schema for updating a court. Hours are re-validated against stored values."""

    name: Optional[str] = Field(default=None, min_length=1)
    sport_type: Optional[str] = None
    price_per_hour: Optional[float] = Field(default=None, gt=0)
    operating_start: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)
    operating_end: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)

    @field_validator("sport_type")
    @classmethod
    def check_sport_type(cls, value):
        return _check_sport_type(value)


class CourtInDB(CourtBase):
    """Schema for court from database."""

    id: int
    venue_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookedInterval(BaseModel):
    """An occupied [start, end) interval on a court."""

    start_time: str
    end_time: str
    status: str


class CourtAvailability(BaseModel):
    """Occupied intervals for a court on one day."""

    court_id: int
    date: str
    operating_start: str
    operating_end: str
    booked: List[BookedInterval]
