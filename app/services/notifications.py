"""Background notification queue.

Booking code enqueues messages and returns immediately; a single worker task
delivers them. Delivery failures are logged and dropped, never reported back
to the booking that produced them.
"""
import asyncio
import logging
from typing import Optional

from app.services.email_service import EmailMessage, EmailService

logger = logging.getLogger(__name__)


class NotificationQueue:
    """asyncio.Queue drained by one worker task."""

    def __init__(self, email_service: EmailService, maxsize: int = 1000):
        self.email_service = email_service
        self.maxsize = maxsize
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self.running = False

    async def start(self):
        """Start the worker."""
        if self.running:
            logger.warning("Notification queue is already running")
            return

        self._queue = asyncio.Queue(maxsize=self.maxsize)
        self._worker = asyncio.create_task(self._run(), name="notification-worker")
        self.running = True
        logger.info("Notification queue started")

    async def stop(self):
        """Deliver what is already queued, then stop the worker."""
        if not self.running:
            return

        logger.info("Stopping notification queue")
        await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self.running = False
        logger.info("Notification queue stopped")

    def enqueue(self, message: EmailMessage) -> bool:
        """Queue a message without waiting. Returns False if it was dropped."""
        if not self.running:
            logger.warning(f"Notification queue not running; dropping email to {message.to_email}")
            return False

        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.error(f"Notification queue full; dropping email to {message.to_email}")
            return False

        return True

    async def join(self):
        """Wait until every queued message has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def _run(self):
        while True:
            message = await self._queue.get()
            try:
                await self.email_service.send(message)
            except Exception as e:
                logger.error(
                    f"Failed to send email to {message.to_email}: {e}",
                    exc_info=True,
                )
            finally:
                self._queue.task_done()
