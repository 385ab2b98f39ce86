"""User model."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class UserRole:
    """Platform roles."""

    USER = "User"
    FACILITY_OWNER = "FacilityOwner"
    ADMIN = "Admin"

    ALL = (USER, FACILITY_OWNER, ADMIN)


class User(Base):
    """Represents a platform account. Credentials live with the auth provider."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    role = Column(String, nullable=False, default=UserRole.USER)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    venues = relationship("Venue", back_populates="owner")
    bookings = relationship("Booking", back_populates="user")
