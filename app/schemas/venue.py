"""Venue schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class VenueBase(BaseModel):
    """Base venue schema."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    sport_types: List[str] = Field(default_factory=list)
    timezone: Optional[str] = None


class VenueCreate(VenueBase):
    """Schema for creating a venue."""

    pass


class VenueUpdate(BaseModel):
    """Schema for updating a venue."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    sport_types: Optional[List[str]] = None
    timezone: Optional[str] = None


class VenueInDB(VenueBase):
    """Schema for venue from database."""

    id: int
    owner_id: int
    is_approved: bool
    timezone: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
