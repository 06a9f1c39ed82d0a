"""
Best-effort email notifications through the external email microservice.

The microservice accepts `POST {email, subject, content}` as JSON. Sending is
fire-and-forget from the request's point of view: `dispatch()` schedules the
HTTP call as a background asyncio task and returns immediately. Failures are
logged and counted, never raised to the caller.
"""

import asyncio
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import httpx

from app.core.config import Settings, get_settings
from app.core.logging import get_logger
from app.core.metrics import record_email

logger = get_logger(__name__)


@dataclass(frozen=True)
class OutgoingEmail:
    """An email built inside a transaction, handed to the notifier once it commits."""

    to: str
    subject: str
    content: str


class EmailNotifier:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.enabled = settings.EMAIL_ENABLED
        self.service_url = settings.EMAIL_SERVICE_URL
        self.timeout = settings.EMAIL_TIMEOUT_SECONDS
        self._transport = transport
        self._pending: set[asyncio.Task] = set()

    async def send_email(self, to: str, subject: str, content: str) -> bool:
        """Deliver one email. Returns True when the microservice accepted it."""
        if not self.enabled:
            record_email("skipped")
            logger.debug("email_skipped", reason="disabled", to=to, subject=subject)
            return False

        payload = {"email": to, "subject": subject, "content": content}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.service_url, json=payload)
        except httpx.HTTPError as e:
            record_email("failed")
            logger.error("email_send_failed", to=to, subject=subject, error=str(e))
            return False

        if response.status_code >= 400:
            record_email("failed")
            logger.error(
                "email_send_failed",
                to=to,
                subject=subject,
                status_code=response.status_code,
                body=response.text[:500],
            )
            return False

        record_email("sent")
        logger.info("email_sent", to=to, subject=subject)
        return True

    def dispatch(self, to: str, subject: str, content: str) -> Optional[asyncio.Task]:
        """Schedule send_email without waiting for it. Call only after the data it describes is committed."""
        if not self.enabled:
            record_email("skipped")
            return None

        task = asyncio.create_task(self.send_email(to, subject, content))
        # The event loop only keeps weak references to tasks
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight notifications. Called on shutdown."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


@lru_cache()
def get_notifier() -> EmailNotifier:
    return EmailNotifier(get_settings())


def booking_confirmation_email(
    tourist_name: str,
    event_name: str,
    ticket_count: int,
    payment_amount: str,
) -> tuple[str, str]:
    subject = f"Booking confirmed: {event_name}"
    content = (
        f"Hi {tourist_name},\n\n"
        f"Your booking for {event_name} is confirmed.\n"
        f"Tickets: {ticket_count}\n"
        f"Amount paid: {payment_amount}\n"
    )
    return subject, content


def welcome_email(name: str, role: str) -> tuple[str, str]:
    subject = "Welcome aboard"
    content = (
        f"Hi {name},\n\n"
        f"Your {role.lower()} account has been created. You can now sign in.\n"
    )
    return subject, content
