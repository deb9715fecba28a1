"""Notification Service for in-app notifications and email.

Handles both channels:
- In-app notifications (database rows, one per recipient profile)
- Email (SendGrid), queued through Celery once the writing transaction commits

Routing (who hears about what) lives in hallbook.domain.notification_routing;
this service resolves recipients and writes the rows. Every failure here is
logged and swallowed so a booking transition is never unwound by it.
"""

import html
import logging
from typing import Any
from uuid import UUID

import httpx
from sqlalchemy import event, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction

from hallbook.config import settings
from hallbook.core.exceptions import NotFoundError
from hallbook.database import DATASTORE_ERRORS
from hallbook.domain.notification_routing import NotificationPlan, NotificationType, Recipient
from hallbook.models.notification import Notification
from hallbook.models.profile import Profile
from hallbook.utils.clock import utcnow

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"
EMAIL_NOT_CONFIGURED = "Email delivery is not configured"

# Session.info key holding emails that wait for the transaction to commit
PENDING_EMAILS = "pending_emails"


class NotificationService:
    """Service for sending notifications across channels."""

    def __init__(self) -> None:
        """Initialize notification service."""
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=settings.email_timeout_seconds)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    # ==================== IN-APP NOTIFICATIONS ====================

    async def create_notification(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: str,
        message: str,
        notification_type: str,
        data: dict[str, Any] | None = None,
        booking_id: UUID | None = None,
    ) -> Notification:
        """Create an in-app notification.

        Args:
            db: Database session
            user_id: Recipient profile
            title: Notification title
            message: Notification text
            notification_type: Type tag
            data: Optional structured payload
            booking_id: Related booking

        Returns:
            Notification: Created notification
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            notification_type=notification_type,
            data=data,
            booking_id=booking_id,
        )
        db.add(notification)
        await db.flush()
        return notification

    async def resolve_recipients(self, db: AsyncSession, recipient: Recipient) -> list[Profile]:
        """Expand a recipient into the active profiles it addresses."""
        if recipient.profile_id is not None:
            profile = await db.get(Profile, recipient.profile_id)
            return [profile] if profile is not None and profile.is_active else []

        query = select(Profile).where(Profile.is_active == True)  # noqa: E712
        if recipient.role is not None:
            query = query.where(Profile.role == recipient.role)
        if recipient.department is not None:
            query = query.where(Profile.department == recipient.department)
        result = await db.execute(query.order_by(Profile.name))
        return list(result.scalars().all())

    async def deliver(
        self,
        db: AsyncSession,
        plans: list[NotificationPlan],
        booking_id: UUID | None = None,
        data: dict[str, Any] | None = None,
        send_email: bool = True,
    ) -> list[Notification]:
        """Write the in-app rows for each plan and hold their emails.

        Each plan runs in its own savepoint; a failing plan is rolled back
        and logged without touching the caller's transaction. Emails are
        handed to Celery only after the caller's transaction commits and
        are dropped if it rolls back.

        Returns:
            Notifications that were written
        """
        delivered: list[tuple[Notification, Profile]] = []

        for plan in plans:
            written: list[tuple[Notification, Profile]] = []
            try:
                async with db.begin_nested():
                    recipients = await self.resolve_recipients(db, plan.recipient)
                    for profile in recipients:
                        notification = await self.create_notification(
                            db,
                            user_id=profile.id,
                            title=plan.title,
                            message=plan.message,
                            notification_type=plan.notification_type.value,
                            data=data,
                            booking_id=booking_id,
                        )
                        written.append((notification, profile))
            except DATASTORE_ERRORS as e:
                logger.warning(
                    f"Failed to write {plan.notification_type.value} notification "
                    f"for booking {booking_id}: {e}"
                )
                continue

            if not written:
                logger.info(
                    f"No active recipients for {plan.notification_type.value} notification "
                    f"({plan.recipient})"
                )
            delivered.extend(written)

        if send_email:
            outbox = db.info.setdefault(PENDING_EMAILS, [])
            for notification, profile in delivered:
                outbox.append(
                    {
                        "to_email": profile.email,
                        "subject": notification.title,
                        "message": notification.message,
                        "notification_type": notification.notification_type,
                        "booking_id": booking_id,
                    }
                )

        return [notification for notification, _ in delivered]

    async def broadcast(
        self,
        db: AsyncSession,
        title: str,
        message: str,
        notification_type: NotificationType,
        data: dict[str, Any] | None = None,
    ) -> list[Notification]:
        """Notify every active profile."""
        plan = NotificationPlan(
            recipient=Recipient(),
            notification_type=notification_type,
            title=title,
            message=message,
        )
        return await self.deliver(db, [plan], data=data)

    # ==================== FEED ====================

    async def get_feed(
        self,
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        notification_type: str | None = None,
        booking_id: UUID | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Notification], int, int]:
        """One recipient's notifications, newest first.

        Returns:
            (page of notifications, total matching, unread count overall)
        """
        mine = Notification.user_id == user_id
        query = select(Notification).where(mine)
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712
        if notification_type:
            query = query.where(Notification.notification_type == notification_type)
        if booking_id:
            query = query.where(Notification.booking_id == booking_id)

        total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0
        unread = (
            await db.scalar(
                select(func.count()).where(mine, Notification.is_read == False)  # noqa: E712
            )
            or 0
        )

        result = await db.execute(
            query.order_by(Notification.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total, unread

    async def mark_read(self, db: AsyncSession, user_id: UUID, notification_id: UUID) -> Notification:
        notification = await db.get(Notification, notification_id)
        # Someone else's notification is reported as missing
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification", str(notification_id))
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await db.flush()
        return notification

    async def mark_all_read(self, db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True, read_at=utcnow())
        )
        return result.rowcount or 0

    # ==================== EMAIL (SENDGRID) ====================

    def dispatch_email(
        self,
        to_email: str,
        subject: str,
        message: str,
        notification_type: str,
        booking_id: UUID | None = None,
    ) -> None:
        """Queue an email on the Celery worker. Enqueue failures are logged only."""
        from hallbook.tasks import send_email_notification

        try:
            send_email_notification.delay(
                to_email=to_email,
                subject=subject,
                message=message,
                notification_type=notification_type,
                booking_id=str(booking_id) if booking_id else None,
            )
        except Exception as e:
            logger.error(f"Could not queue {notification_type} email to {to_email}: {e}")

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str | None = None,
    ) -> tuple[bool, str | None]:
        """Send an email via SendGrid.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_content: HTML body
            text_content: Plain text body

        Returns:
            (sent, error message)
        """
        if not settings.sendgrid_api_key:
            return False, EMAIL_NOT_CONFIGURED

        headers = {
            "Authorization": f"Bearer {settings.sendgrid_api_key}",
            "Content-Type": "application/json",
        }

        payload: dict[str, Any] = {
            "personalizations": [
                {
                    "to": [{"email": to_email}],
                }
            ],
            "from": {
                "email": settings.email_from_address,
                "name": settings.email_from_name,
            },
            "subject": subject,
            "content": [{"type": "text/html", "value": html_content}],
        }
        if text_content:
            payload["content"].insert(0, {"type": "text/plain", "value": text_content})

        try:
            response = await self.http_client.post(
                SENDGRID_SEND_URL,
                headers=headers,
                json=payload,
            )
        except httpx.HTTPError as e:
            logger.warning(f"SendGrid request failed for {to_email}: {e}")
            return False, str(e)

        if response.status_code not in (200, 202):
            logger.warning(
                f"SendGrid rejected email to {to_email}: {response.status_code} {response.text}"
            )
            return False, f"SendGrid returned {response.status_code}"
        return True, None

    def _generate_email_html(self, title: str, message: str, booking_id: str | None) -> str:
        """Generate simple HTML email content.

        Args:
            title: Email title
            message: Email body
            booking_id: Booking to deep-link to, if any

        Returns:
            str: HTML email content
        """
        button_html = ""
        if booking_id:
            action_url = f"{settings.frontend_url}/bookings/{booking_id}"
            button_html = f"""
            <p style="margin-top: 24px;">
                <a href="{action_url}"
                   style="background-color: #1E3A8A; color: white; padding: 12px 24px;
                          text-decoration: none; border-radius: 6px; display: inline-block;">
                    View Booking
                </a>
            </p>
            """

        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                     max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
            <div style="background-color: #f9fafb; border-radius: 8px; padding: 24px;">
                <h1 style="color: #111827; font-size: 24px; margin-bottom: 16px;">{html.escape(title)}</h1>
                <p style="color: #4b5563; font-size: 16px; line-height: 1.6;">{html.escape(message)}</p>
                {button_html}
            </div>
            <p style="color: #9ca3af; font-size: 12px; margin-top: 24px; text-align: center;">
                &copy; {utcnow().year} {settings.email_from_name}. This is an automated message.
            </p>
        </body>
        </html>
        """


# Singleton instance
notification_service = NotificationService()


def send_pending_emails(session: Session) -> None:
    """Queue the emails held by a session once its outer transaction commits."""
    # Savepoint commits fire this hook too
    if session.in_nested_transaction():
        return
    for email in session.info.pop(PENDING_EMAILS, []):
        notification_service.dispatch_email(**email)


def discard_pending_emails(session: Session, transaction: SessionTransaction) -> None:
    """Drop held emails when the outer transaction ends without committing."""
    if transaction.parent is not None:
        return
    dropped = session.info.pop(PENDING_EMAILS, None)
    if dropped:
        logger.info(f"Dropped {len(dropped)} queued emails; transaction did not commit")


def register_email_outbox() -> None:
    """Hook the email outbox into every session. Safe to call more than once."""
    if not event.contains(Session, "after_commit", send_pending_emails):
        event.listen(Session, "after_commit", send_pending_emails)
    if not event.contains(Session, "after_transaction_end", discard_pending_emails):
        event.listen(Session, "after_transaction_end", discard_pending_emails)


register_email_outbox()
