"""Append-only enforcement for the approval audit log using SQLAlchemy events."""

import logging

from sqlalchemy import event

from hallbook.core.exceptions import ValidationError
from hallbook.utils.clock import utcnow

logger = logging.getLogger(__name__)


class ImmutabilityViolationError(ValidationError):
    """Raised when attempting to modify an append-only record."""

    def __init__(self, model_name: str, operation: str, record_id: str):
        self.model_name = model_name
        self.operation = operation
        self.record_id = record_id
        super().__init__(
            f"Immutability violation: Cannot {operation} {model_name} record {record_id}. "
            "Approval records are append-only."
        )


def _log_immutability_violation(model_name: str, operation: str, record_id: str) -> None:
    logger.error(
        f"IMMUTABILITY_VIOLATION: Attempted to {operation} {model_name} "
        f"record_id={record_id} at {utcnow().isoformat()}"
    )


def prevent_approval_update(mapper, connection, target):
    """Prevent updates to BookingApproval (append-only)."""
    _log_immutability_violation("BookingApproval", "UPDATE", str(target.id))
    raise ImmutabilityViolationError("BookingApproval", "UPDATE", str(target.id))


def prevent_approval_delete(mapper, connection, target):
    """Prevent deletion of BookingApproval (append-only)."""
    _log_immutability_violation("BookingApproval", "DELETE", str(target.id))
    raise ImmutabilityViolationError("BookingApproval", "DELETE", str(target.id))


def register_immutability_enforcement() -> None:
    """Register SQLAlchemy event listeners for immutability enforcement.

    Must be called after models are imported but before session use. Safe to
    call more than once.
    """
    from hallbook.models.booking import BookingApproval

    if not event.contains(BookingApproval, "before_update", prevent_approval_update):
        event.listen(BookingApproval, "before_update", prevent_approval_update)
    if not event.contains(BookingApproval, "before_delete", prevent_approval_delete):
        event.listen(BookingApproval, "before_delete", prevent_approval_delete)

    logger.info("Immutability enforcement registered for booking approvals")
