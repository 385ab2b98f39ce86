"""Background scheduler for booking housekeeping."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.services.booking_service import BookingService

logger = logging.getLogger(__name__)


class CompletionScheduler:
    """Periodically completes finished bookings and releases stale Pending holds."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        booking_service: BookingService,
        interval_minutes: int = 15,
    ):
        """Initialize the scheduler."""
        self.session_factory = session_factory
        self.booking_service = booking_service
        self.interval_minutes = interval_minutes
        self.scheduler = AsyncIOScheduler()
        self.running = False

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        logger.info("Starting completion scheduler")

        self.scheduler.add_job(
            self.run_once,
            IntervalTrigger(minutes=self.interval_minutes),
            id="booking_housekeeping",
            name="Complete past bookings and expire stale holds",
            replace_existing=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info(f"Completion scheduler started (every {self.interval_minutes} minutes)")

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping completion scheduler")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Completion scheduler stopped")

    async def run_once(self):
        """
        One housekeeping pass.

        Each step commits on its own, so a failure in one does not undo the
        other.
        """
        logger.debug("Running booking housekeeping")

        async with self.session_factory() as db:
            try:
                await self.booking_service.complete_past_bookings(db)
            except Exception as e:
                logger.error(f"Failed to complete past bookings: {e}", exc_info=True)
                await db.rollback()

            try:
                await self.booking_service.expire_stale_pending(db)
            except Exception as e:
                logger.error(f"Failed to expire stale bookings: {e}", exc_info=True)
                await db.rollback()
