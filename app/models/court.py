"""Court model."""
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


SPORT_TYPES = (
    "Badminton",
    "Tennis",
    "Football",
    "Cricket",
    "Basketball",
    "Volleyball",
    "Table Tennis",
    "Squash",
    "Swimming",
    "Gym",
    "Yoga",
    "Dance",
    "Martial Arts",
    "Other",
)


class Court(Base):
    """Represents a bookable court at a venue."""

    __tablename__ = "courts"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    sport_type = Column(String, nullable=False)
    price_per_hour = Column(Float, nullable=False)
    operating_start = Column(String(5), nullable=False)  # "HH:MM"
    operating_end = Column(String(5), nullable=False)    # "HH:MM"
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    venue = relationship("Venue", back_populates="courts")
    bookings = relationship(
        "Booking", back_populates="court", cascade="all, delete-orphan", passive_deletes=True
    )
