"""Venue model."""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Venue(Base):
    """Represents a sports facility owned by a facility owner."""

    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True, index=True)
    sport_types = Column(JSON, nullable=False, default=list)  # e.g. ["Badminton", "Tennis"]
    is_approved = Column(Boolean, nullable=False, default=False)
    timezone = Column(String, nullable=False, default="Asia/Kolkata")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="venues")
    courts = relationship("Court", back_populates="venue", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="venue")
