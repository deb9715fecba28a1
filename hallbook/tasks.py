"""Celery background tasks.

This module contains the background tasks for:
- Best-effort notification emails (SendGrid), logged in email_logs
- Day-before reminders for approved events
"""

import asyncio
import logging
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.database import DATASTORE_ERRORS, get_db_context
from hallbook.domain.booking_state import BookingStatus
from hallbook.domain.notification_routing import plan_for_reminder
from hallbook.models.booking import Booking
from hallbook.models.hall import Hall
from hallbook.models.notification import EmailLog
from hallbook.services.notification_service import EMAIL_NOT_CONFIGURED, NotificationService
from hallbook.utils.clock import local_today, utcnow
from hallbook.worker import celery_app

logger = logging.getLogger(__name__)


# ==================== EMAIL TASKS ====================


@celery_app.task(bind=True, max_retries=3)
def send_email_notification(
    self,
    to_email: str,
    subject: str,
    message: str,
    notification_type: str,
    booking_id: str | None = None,
):
    """Send one notification email and record the attempt.

    Failed sends are retried a bounded number of times; the final failure
    stays in email_logs and is not raised.
    """
    try:
        log = asyncio.run(
            _run_email_delivery(to_email, subject, message, notification_type, booking_id)
        )
    except DATASTORE_ERRORS as exc:
        logger.error(f"Could not record {notification_type} email to {to_email}: {exc}")
        return {"status": "failed", "error": str(exc)}

    if log.status == "sent":
        return {"status": "sent", "email_log_id": str(log.id)}

    if log.error_message != EMAIL_NOT_CONFIGURED and self.request.retries < self.max_retries:
        raise self.retry(countdown=60 * (self.request.retries + 1))

    return {"status": "failed", "email_log_id": str(log.id), "error": log.error_message}


async def _run_email_delivery(
    to_email: str,
    subject: str,
    message: str,
    notification_type: str,
    booking_id: str | None,
) -> EmailLog:
    service = NotificationService()
    try:
        async with get_db_context() as db:
            return await deliver_email(
                db, service, to_email, subject, message, notification_type, booking_id
            )
    finally:
        await service.close()


async def deliver_email(
    db: AsyncSession,
    service: NotificationService,
    to_email: str,
    subject: str,
    message: str,
    notification_type: str,
    booking_id: str | None = None,
) -> EmailLog:
    """Send an email through the service and log the outcome.

    Args:
        db: Database session
        service: Notification service owning the HTTP client
        to_email: Recipient address
        subject: Email subject
        message: Plain text message
        notification_type: Type tag of the originating notification
        booking_id: Related booking, if any

    Returns:
        EmailLog: Logged attempt (sent or failed)
    """
    log = EmailLog(
        recipient_email=to_email,
        subject=subject,
        body=message,
        notification_type=notification_type,
        booking_id=UUID(booking_id) if booking_id else None,
        status="pending",
    )
    db.add(log)
    await db.flush()

    html = service._generate_email_html(subject, message, booking_id)
    sent, error = await service.send_email(to_email, subject, html, text_content=message)

    if sent:
        log.status = "sent"
        log.sent_at = utcnow()
    else:
        log.status = "failed"
        log.error_message = error
        logger.warning(f"{notification_type} email to {to_email} failed: {error}")
    await db.flush()
    return log


# ==================== REMINDER TASKS ====================


@celery_app.task(bind=True, max_retries=3)
def send_event_reminders(self):
    """Remind faculty of their approved events happening tomorrow.

    Runs daily from the beat schedule.
    """
    try:
        count = asyncio.run(_run_event_reminders())
    except DATASTORE_ERRORS as exc:
        raise self.retry(exc=exc, countdown=300)
    return {"status": "success", "reminders": count}


async def _run_event_reminders() -> int:
    async with get_db_context() as db:
        return await queue_event_reminders(db, local_today())


async def queue_event_reminders(db: AsyncSession, today: date) -> int:
    """Notify the owner of every approved booking dated the day after ``today``.

    Returns:
        Number of bookings reminded
    """
    tomorrow = today + timedelta(days=1)
    result = await db.execute(
        select(Booking)
        .where(
            Booking.status == BookingStatus.APPROVED.value,
            Booking.event_date == tomorrow,
        )
        .order_by(Booking.start_time)
    )
    bookings = list(result.scalars().all())

    service = NotificationService()
    for booking in bookings:
        hall = await db.get(Hall, booking.hall_id)
        await service.deliver(
            db,
            plan_for_reminder(booking, hall.name if hall else "the booked hall"),
            booking_id=booking.id,
            data={"booking_id": str(booking.id), "event_date": booking.event_date.isoformat()},
        )

    logger.info(f"Queued {len(bookings)} event reminders for {tomorrow}")
    return len(bookings)
