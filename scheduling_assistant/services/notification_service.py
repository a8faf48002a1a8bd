"""Notification service - Booking confirmation emails sent through Resend."""

import asyncio
import logging
from datetime import datetime

import resend

from scheduling_assistant.config import settings
from scheduling_assistant.models.appointment import Appointment

logger = logging.getLogger(__name__)

resend.api_key = settings.resend_api_key


def booking_confirmation_html(client_name: str, provider_name: str, local_start: datetime) -> str:
    when = local_start.strftime("%A, %B %d, %Y at %I:%M %p").replace(" 0", " ")
    return (
        f"<p>Hi {client_name},</p>"
        f"<p>Your appointment with <strong>{provider_name}</strong> is confirmed for "
        f"<strong>{when}</strong> ({local_start.tzname()}).</p>"
        "<p>See you then!</p>"
    )


class NotificationService:
    """Service class for outgoing notifications."""

    def __init__(self, from_address: str | None = None):
        self.from_address = from_address or settings.email_from_address

    @property
    def is_configured(self) -> bool:
        return bool(resend.api_key)

    async def send_booking_confirmation(
        self, appointment: Appointment, provider_name: str, local_start: datetime
    ) -> bool:
        """Email the client about a committed booking.

        Returns False when no email provider is configured. Delivery errors
        propagate; the caller decides how to report them.
        """
        if not self.is_configured:
            logger.info("Resend not configured, skipping confirmation for appointment %s", appointment.id)
            return False

        params = {
            "from": self.from_address,
            "to": [appointment.client_email],
            "subject": f"Appointment confirmed - {local_start.strftime('%B %d')}",
            "html": booking_confirmation_html(appointment.client_name, provider_name, local_start),
        }
        response = await asyncio.to_thread(resend.Emails.send, params)
        logger.info("Confirmation email sent for appointment %s: %s", appointment.id, response)
        return True
