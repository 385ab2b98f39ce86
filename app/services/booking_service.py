"""Booking service: conflict check, pricing, payment and status management."""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytz
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStatusTransition, NotFound, PermissionDenied
from app.models.booking import Booking, BookingStatus
from app.models.court import Court
from app.models.user import User, UserRole
from app.models.venue import Venue
from app.schemas.booking import BookingInDB, BookingResponse
from app.services.conflict_checker import has_conflict
from app.services.email_service import booking_cancellation_email, booking_confirmation_email
from app.services.notifications import NotificationQueue
from app.services.payment_gateway import PaymentGateway, PaymentRequest, PaymentResult
from app.services.pricing import compute_price, hours_between, parse_hhmm

logger = logging.getLogger(__name__)

MSG_CONFIRMED = "Booking created and confirmed."
MSG_SLOT_TAKEN = "Time slot is not available."
MSG_PAYMENT_FAILED = "Payment failed. Booking cancelled."
MSG_COURT_NOT_FOUND = "Court not found."
MSG_BAD_INTERVAL = "End time must be after start time."
MSG_BAD_TIME = "Times must be in HH:MM format."
MSG_OUTSIDE_HOURS = "Requested time is outside the court's operating hours."
MSG_BOOKING_NOT_FOUND = "Booking not found."
MSG_NOT_YOUR_BOOKING = "You are not authorized to cancel this booking."
MSG_NOT_CANCELLABLE = "Only confirmed bookings can be cancelled."
MSG_CANCELLED = "Booking cancelled successfully."
MSG_HOLD_RELEASED = "Booking was cancelled before payment completed."


def _failure(message: str) -> BookingResponse:
    return BookingResponse(success=False, message=message)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive UTC timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BookingService:
    """
    Creates and cancels bookings.

    A booking attempt runs conflict check, provisional insert, payment and
    finalisation strictly in that order, each step once. The check and the
    insert happen under a per (court, date) lock and a row lock on the court,
    and the provisional booking is Pending, which blocks its slot until the
    payment outcome moves it to Confirmed or Cancelled.
    """

    def __init__(
        self,
        payment_gateway: PaymentGateway,
        notifier: NotificationQueue,
        payment_timeout: float = 10.0,
        cancellation_lead_hours: int = 24,
        pending_timeout_minutes: int = 15,
    ):
        self.payment_gateway = payment_gateway
        self.notifier = notifier
        self.payment_timeout = payment_timeout
        self.cancellation_lead_hours = cancellation_lead_hours
        self.pending_timeout_minutes = pending_timeout_minutes
        self._locks: Dict[Tuple[int, date], list] = {}

    @asynccontextmanager
    async def _slot_lock(self, court_id: int, booking_date: date):
        """Serialise check-and-insert for one court and day within this process."""
        key = (court_id, booking_date)
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    async def create_booking(
        self,
        db: AsyncSession,
        user_id: int,
        court_id: int,
        booking_date: date,
        start_time: str,
        end_time: str,
    ) -> BookingResponse:
        """
        Book a court interval and charge for it.

        Args:
            db: Database session
            user_id: Booking user
            court_id: Court to book
            booking_date: Calendar day
            start_time: Start ("HH:MM")
            end_time: End ("HH:MM")

        Returns:
            BookingResponse; business failures come back with success=False,
            database errors propagate.
        """
        try:
            if hours_between(start_time, end_time) <= 0:
                return _failure(MSG_BAD_INTERVAL)
        except ValueError:
            return _failure(MSG_BAD_TIME)

        logger.info(
            f"Booking request: user {user_id}, court {court_id}, {booking_date} {start_time}-{end_time}"
        )

        async with self._slot_lock(court_id, booking_date):
            result = await db.execute(
                select(Court).where(Court.id == court_id).with_for_update()
            )
            court = result.scalar_one_or_none()

            if not court:
                await db.rollback()
                return _failure(MSG_COURT_NOT_FOUND)

            if start_time < court.operating_start or end_time > court.operating_end:
                await db.rollback()
                return _failure(MSG_OUTSIDE_HOURS)

            if await has_conflict(db, court_id, booking_date, start_time, end_time):
                await db.rollback()
                logger.warning(
                    f"Rejected booking for court {court_id} on {booking_date} "
                    f"{start_time}-{end_time}: slot taken"
                )
                return _failure(MSG_SLOT_TAKEN)

            total_price = compute_price(start_time, end_time, court.price_per_hour)
            booking = Booking(
                user_id=user_id,
                venue_id=court.venue_id,
                court_id=court_id,
                date=booking_date,
                start_time=start_time,
                end_time=end_time,
                total_price=total_price,
                status=BookingStatus.PENDING,
            )
            db.add(booking)
            await db.commit()

        booking_id = booking.id
        logger.info(f"Booking {booking_id} held as Pending, charging {total_price}")

        payment = await self._charge(booking_id, total_price)

        booking = await db.get(Booking, booking_id, populate_existing=True)

        if booking.status != BookingStatus.PENDING:
            # Released by housekeeping while the charge was in flight
            logger.error(
                f"Booking {booking_id} is {booking.status} after payment "
                f"(success={payment.success}, transaction {payment.transaction_id})"
            )
            return _failure(MSG_HOLD_RELEASED)

        if not payment.success:
            booking.transition_to(BookingStatus.CANCELLED)
            await db.commit()
            logger.info(f"Booking {booking_id} cancelled: {payment.message}")
            return _failure(MSG_PAYMENT_FAILED)

        booking.transition_to(BookingStatus.CONFIRMED)
        booking.transaction_id = payment.transaction_id
        await db.commit()
        await db.refresh(booking)
        logger.info(f"Booking {booking_id} confirmed (transaction {payment.transaction_id})")

        await self._notify_confirmed(db, booking)

        return BookingResponse(
            success=True,
            message=MSG_CONFIRMED,
            booking=BookingInDB.model_validate(booking),
        )

    async def _charge(self, booking_id: int, total_price: float) -> PaymentResult:
        """Charge once; a timeout or gateway exception is a failed payment."""
        request = PaymentRequest(booking_id=booking_id, total_price=total_price)
        try:
            return await asyncio.wait_for(
                self.payment_gateway.process_payment(request),
                timeout=self.payment_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Payment for booking {booking_id} timed out after {self.payment_timeout}s"
            )
            return PaymentResult(success=False, message="Payment timed out.")
        except Exception as e:
            logger.error(f"Payment gateway error for booking {booking_id}: {e}", exc_info=True)
            return PaymentResult(
                success=False,
                message="An unexpected error occurred during payment processing.",
            )

    async def _notify_confirmed(self, db: AsyncSession, booking: Booking):
        """Queue the confirmation email. The booking is already committed."""
        try:
            user = await db.get(User, booking.user_id)
            court = await db.get(Court, booking.court_id)
            venue = await db.get(Venue, booking.venue_id)

            self.notifier.enqueue(
                booking_confirmation_email(
                    to_email=user.email,
                    venue_name=venue.name,
                    court_name=court.name,
                    booking_date=booking.date.isoformat(),
                    start_time=booking.start_time,
                    end_time=booking.end_time,
                    total_price=booking.total_price,
                )
            )
        except Exception as e:
            logger.error(
                f"Failed to queue confirmation email for booking {booking.id}: {e}",
                exc_info=True,
            )

    async def _notify_cancelled(self, db: AsyncSession, booking: Booking):
        try:
            user = await db.get(User, booking.user_id)
            court = await db.get(Court, booking.court_id)
            venue = await db.get(Venue, booking.venue_id)

            self.notifier.enqueue(
                booking_cancellation_email(
                    to_email=user.email,
                    venue_name=venue.name,
                    court_name=court.name,
                    booking_date=booking.date.isoformat(),
                    start_time=booking.start_time,
                    end_time=booking.end_time,
                )
            )
        except Exception as e:
            logger.error(
                f"Failed to queue cancellation email for booking {booking.id}: {e}",
                exc_info=True,
            )

    def _local_datetime(self, booking_date: date, hhmm: str, tz_name: str) -> datetime:
        """A booking date and "HH:MM" as an aware datetime in the venue's timezone."""
        tz = pytz.timezone(tz_name or "UTC")
        return tz.localize(datetime.combine(booking_date, parse_hhmm(hhmm)))

    async def cancel_user_booking(
        self,
        db: AsyncSession,
        booking_id: int,
        user_id: int,
        now: Optional[datetime] = None,
    ) -> BookingResponse:
        """
        Cancel a user's own confirmed booking.

        Allowed only while at least CANCELLATION_LEAD_HOURS remain before the
        booking starts, measured in the venue's timezone.
        """
        booking = await db.get(Booking, booking_id)

        if not booking:
            return _failure(MSG_BOOKING_NOT_FOUND)

        if booking.user_id != user_id:
            return _failure(MSG_NOT_YOUR_BOOKING)

        if booking.status != BookingStatus.CONFIRMED:
            return _failure(MSG_NOT_CANCELLABLE)

        venue = await db.get(Venue, booking.venue_id)
        starts_at = self._local_datetime(booking.date, booking.start_time, venue.timezone)
        now = now or datetime.now(pytz.UTC)

        if starts_at - now < timedelta(hours=self.cancellation_lead_hours):
            return _failure(
                f"Bookings must be cancelled at least {self.cancellation_lead_hours} hours in advance."
            )

        booking.transition_to(BookingStatus.CANCELLED)
        await db.commit()
        await db.refresh(booking)
        logger.info(f"Booking {booking_id} cancelled by user {user_id}")

        await self._notify_cancelled(db, booking)

        return BookingResponse(
            success=True,
            message=MSG_CANCELLED,
            booking=BookingInDB.model_validate(booking),
        )

    async def update_booking_status(
        self,
        db: AsyncSession,
        booking_id: int,
        new_status: str,
        actor: User,
    ) -> Booking:
        """
        Change a booking's status on behalf of the venue owner or an admin.

        Raises:
            NotFound: No such booking
            PermissionDenied: Actor neither owns the venue nor is an admin
            InvalidStatusTransition: The booking is not Confirmed or the lifecycle
                does not allow the change
        """
        booking = await db.get(Booking, booking_id)
        if not booking:
            raise NotFound(MSG_BOOKING_NOT_FOUND)

        venue = await db.get(Venue, booking.venue_id)
        if actor.role != UserRole.ADMIN and venue.owner_id != actor.id:
            raise PermissionDenied("Only the venue owner or an admin can update this booking")

        # Pending holds belong to the booking flow until payment settles
        if booking.status != BookingStatus.CONFIRMED or new_status not in BookingStatus.ALL:
            raise InvalidStatusTransition(booking.status, new_status)

        booking.transition_to(new_status)
        await db.commit()
        await db.refresh(booking)
        logger.info(f"Booking {booking_id} set to {new_status} by user {actor.id}")

        if new_status == BookingStatus.CANCELLED:
            await self._notify_cancelled(db, booking)

        return booking

    async def list_user_bookings(self, db: AsyncSession, user_id: int) -> List[Booking]:
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.date.desc(), Booking.start_time.desc())
        )
        return list(result.scalars().all())

    async def list_owner_bookings(self, db: AsyncSession, owner_id: int) -> List[Booking]:
        """Bookings across every venue the owner has, newest first."""
        result = await db.execute(
            select(Booking)
            .join(Venue, Booking.venue_id == Venue.id)
            .where(Venue.owner_id == owner_id)
            .order_by(Booking.date.desc(), Booking.start_time.desc())
        )
        return list(result.scalars().all())

    async def complete_past_bookings(
        self, db: AsyncSession, now: Optional[datetime] = None
    ) -> int:
        """
        Mark confirmed bookings whose end time has passed as Completed.

        Returns:
            Number of bookings completed
        """
        now = now or datetime.now(pytz.UTC)

        # Venue timezones are at most a day away from UTC
        result = await db.execute(
            select(Booking, Venue.timezone)
            .join(Venue, Booking.venue_id == Venue.id)
            .where(
                and_(
                    Booking.status == BookingStatus.CONFIRMED,
                    Booking.date <= (now + timedelta(days=1)).date(),
                )
            )
        )

        completed = 0
        for booking, tz_name in result.all():
            ends_at = self._local_datetime(booking.date, booking.end_time, tz_name)
            if ends_at <= now:
                booking.transition_to(BookingStatus.COMPLETED)
                completed += 1

        if completed:
            await db.commit()
            logger.info(f"Marked {completed} bookings as Completed")

        return completed

    async def expire_stale_pending(
        self, db: AsyncSession, now: Optional[datetime] = None
    ) -> int:
        """
        Cancel Pending bookings older than PENDING_TIMEOUT_MINUTES.

        A booking only stays Pending past its payment call if finalising it
        failed; this releases the slot it holds.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(minutes=self.pending_timeout_minutes)

        result = await db.execute(
            select(Booking).where(Booking.status == BookingStatus.PENDING)
        )

        expired = 0
        for booking in result.scalars().all():
            if booking.created_at is not None and _as_utc(booking.created_at) <= cutoff:
                booking.transition_to(BookingStatus.CANCELLED)
                expired += 1

        if expired:
            await db.commit()
            logger.warning(f"Cancelled {expired} stale Pending bookings")

        return expired
