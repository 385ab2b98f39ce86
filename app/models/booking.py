"""Booking model."""
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Date, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.exceptions import InvalidStatusTransition


class BookingStatus:
    """Booking lifecycle states."""

    PENDING = "Pending"  # provisional, held while payment is in flight
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"

    ALL = (PENDING, CONFIRMED, CANCELLED, COMPLETED)

    # Statuses that occupy their slot for conflict checks
    BLOCKING = (PENDING, CONFIRMED)

    TRANSITIONS = {
        PENDING: frozenset({CONFIRMED, CANCELLED}),
        CONFIRMED: frozenset({CANCELLED, COMPLETED}),
        CANCELLED: frozenset(),
        COMPLETED: frozenset(),
    }

    @classmethod
    def can_transition(cls, current: str, requested: str) -> bool:
        return requested in cls.TRANSITIONS.get(current, frozenset())


class Booking(Base):
    """Represents a reservation of a court for a time interval on a date."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    court_id = Column(Integer, ForeignKey("courts.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM", zero-padded so string order is time order
    end_time = Column(String(5), nullable=False)
    total_price = Column(Float, nullable=False)
    status = Column(String, nullable=False, default=BookingStatus.PENDING)
    transaction_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="bookings")
    venue = relationship("Venue", back_populates="bookings")
    court = relationship("Court", back_populates="bookings")

    __table_args__ = (
        Index("ix_bookings_court_date_status", "court_id", "date", "status"),
    )

    def transition_to(self, new_status: str):
        """Move to a new status, refusing transitions the lifecycle does not allow."""
        if not BookingStatus.can_transition(self.status, new_status):
            raise InvalidStatusTransition(self.status, new_status)
        self.status = new_status
