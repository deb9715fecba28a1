"""Hall administration service."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from hallbook.core.permissions import Permission, has_permission
from hallbook.domain.notification_routing import NotificationType
from hallbook.models.hall import Hall
from hallbook.models.profile import Profile
from hallbook.services.notification_service import notification_service
from hallbook.utils.clock import utcnow

logger = logging.getLogger(__name__)

HALL_STATUS_ACTIONS = ("block", "unblock", "maintenance", "clear_maintenance")


class HallService:
    """Service for hall block/maintenance state."""

    async def get_hall(self, db: AsyncSession, hall_id: UUID) -> Hall:
        hall = await db.get(Hall, hall_id)
        if hall is None:
            raise NotFoundError("Hall", str(hall_id))
        return hall

    async def update_hall_status(
        self,
        db: AsyncSession,
        hall_id: UUID,
        action: str,
        actor: Profile,
        note: str | None = None,
    ) -> Hall:
        """Block, unblock, or toggle maintenance on a hall and tell everyone.

        Blocked and under-maintenance are kept mutually exclusive: setting one
        clears the other.

        Args:
            db: Database session
            hall_id: Hall to update
            action: block, unblock, maintenance or clear_maintenance
            actor: Admin performing the change
            note: Optional note shown as the unavailability reason

        Returns:
            Hall: Updated hall
        """
        if not has_permission(actor.role, Permission.MANAGE_HALL_STATUS):
            logger.warning(f"Hall status change refused for {actor.id} ({actor.role})")
            raise AuthorizationError("Only administrators can change hall status")
        if action not in HALL_STATUS_ACTIONS:
            raise ValidationError(f"Unknown hall status action: {action}")

        hall = await self.get_hall(db, hall_id)
        note = note.strip() if note and note.strip() else None

        if action == "block":
            hall.is_blocked = True
            hall.is_under_maintenance = False
            hall.status_note = note
        elif action == "maintenance":
            hall.is_under_maintenance = True
            hall.is_blocked = False
            hall.status_note = note
        elif action == "unblock":
            hall.is_blocked = False
            if not hall.is_under_maintenance:
                hall.status_note = None
        else:
            hall.is_under_maintenance = False
            if not hall.is_blocked:
                hall.status_note = None

        hall.status_updated_at = utcnow()
        hall.status_updated_by = actor.id
        await db.flush()

        logger.info(f"Hall {hall.id} ({hall.name}) {action} by {actor.id}; now {hall.status_label}")

        message = f"{hall.name} ({hall.block}) is now {hall.status_label.lower()}."
        if hall.status_note:
            message = f"{message} Note: {hall.status_note}"
        await notification_service.broadcast(
            db,
            title="Hall Status Updated",
            message=message,
            notification_type=NotificationType.HALL_STATUS,
            data={"hall_id": str(hall.id), "action": action, "status": hall.status_label},
        )
        return hall


hall_service = HallService()
