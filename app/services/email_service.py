"""
Email service using SendGrid for booking notifications.
"""

import asyncio
import logging
from typing import Optional

from pydantic import BaseModel
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger(__name__)


class EmailMessage(BaseModel):
    """An outgoing email."""

    to_email: str
    subject: str
    html_content: str


class EmailService:
    """Sends email through SendGrid; logs and skips when no API key is configured."""

    def __init__(self, api_key: Optional[str], from_email: str):
        self.api_key = api_key
        self.from_email = from_email

    async def send(self, message: EmailMessage) -> bool:
        """
        Send one email.

        Returns:
            True if SendGrid accepted the message or sending is disabled.

        Raises:
            Whatever the SendGrid client raises; the caller decides what to do.
        """
        if not self.api_key:
            logger.warning(
                f"SENDGRID_API_KEY not configured. Skipping email to {message.to_email}: "
                f"{message.subject}"
            )
            return True

        mail = Mail(
            from_email=self.from_email,
            to_emails=message.to_email,
            subject=message.subject,
            html_content=message.html_content,
        )

        # SendGrid's client is blocking
        response = await asyncio.to_thread(SendGridAPIClient(self.api_key).send, mail)

        if 200 <= response.status_code < 300:
            logger.info(f"Email sent to {message.to_email}: {message.subject}")
            return True

        logger.error(
            f"SendGrid rejected email to {message.to_email}: status {response.status_code}"
        )
        return False


def booking_confirmation_email(
    to_email: str,
    venue_name: str,
    court_name: str,
    booking_date: str,
    start_time: str,
    end_time: str,
    total_price: float,
) -> EmailMessage:
    return EmailMessage(
        to_email=to_email,
        subject="QuickCourt - Booking Confirmed!",
        html_content=(
            f"<h1>Your booking at {venue_name} is confirmed!</h1>"
            f"<p>Court: {court_name}</p>"
            f"<p>Date: {booking_date}</p>"
            f"<p>Time: {start_time} - {end_time}</p>"
            f"<p>Total Price: {total_price}</p>"
        ),
    )


def booking_cancellation_email(
    to_email: str,
    venue_name: str,
    court_name: str,
    booking_date: str,
    start_time: str,
    end_time: str,
) -> EmailMessage:
    return EmailMessage(
        to_email=to_email,
        subject="QuickCourt - Booking Cancelled",
        html_content=(
            f"<h1>Your booking at {venue_name} has been cancelled.</h1>"
            f"<p>Court: {court_name}</p>"
            f"<p>Date: {booking_date}</p>"
            f"<p>Time: {start_time} - {end_time}</p>"
        ),
    )
