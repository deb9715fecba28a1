"""Booking approval state machine.

States:
- pending_hod: Submitted by faculty, waiting for the department HOD
- pending_principal: Approved by HOD, waiting for the principal
- pending_pro: Legacy third stage; kept so historical rows still resolve
- approved: Final approval given (terminal)
- rejected: Rejected at some stage (terminal)

Normal path: pending_hod -> pending_principal -> approved.
"""

from enum import Enum

from hallbook.core.exceptions import InvalidBookingStatus


class BookingStatus(str, Enum):
    """Booking lifecycle states."""

    PENDING_HOD = "pending_hod"
    PENDING_PRINCIPAL = "pending_principal"
    PENDING_PRO = "pending_pro"  # legacy, no transition leads here any more
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalAction(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


PENDING_STATUSES = frozenset(
    {
        BookingStatus.PENDING_HOD.value,
        BookingStatus.PENDING_PRINCIPAL.value,
        BookingStatus.PENDING_PRO.value,
    }
)
TERMINAL_STATUSES = frozenset({BookingStatus.APPROVED.value, BookingStatus.REJECTED.value})

# Every status still in the pipeline holds its slot, not just approved ones.
SLOT_HOLDING_STATUSES = PENDING_STATUSES | {BookingStatus.APPROVED.value}

BOOKING_TRANSITIONS: dict[str, set[str]] = {
    "pending_hod": {"pending_principal", "rejected"},
    "pending_principal": {"approved", "rejected"},
    "pending_pro": {"approved", "rejected"},
    "approved": set(),
    "rejected": set(),
}

APPROVAL_CHAIN: dict[str, str] = {
    "pending_hod": "pending_principal",
    "pending_principal": "approved",
    "pending_pro": "approved",
}

# Role allowed to decide at each stage
STAGE_APPROVER: dict[str, str] = {
    "pending_hod": "hod",
    "pending_principal": "principal",
    "pending_pro": "pro",
}

STATUS_LABELS: dict[str, str] = {
    "pending_hod": "pending HOD approval",
    "pending_principal": "pending Principal approval",
    "pending_pro": "pending PRO approval",
    "approved": "approved",
    "rejected": "rejected",
}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def assert_booking_transition(current: str, target: str) -> None:
    """Validate booking state transition.

    Args:
        current: Current booking status
        target: Target booking status

    Raises:
        InvalidBookingStatus: If transition is not allowed
    """
    allowed = BOOKING_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current} → {target}"
        )


def next_status_on_approval(current: str) -> str:
    """Return the status an approval moves the booking into."""
    target = APPROVAL_CHAIN.get(current)
    if target is None:
        raise InvalidBookingStatus(f"A booking that is {current} cannot be approved")
    return target


def can_approve(
    actor_role: str,
    actor_department: str | None,
    booking_status: str,
    booking_department: str,
) -> bool:
    """Whether an actor may approve or reject a booking in its current state.

    HODs are scoped to their own department; the principal may act on any
    department's booking. No other role may move a booking.
    """
    required_role = STAGE_APPROVER.get(booking_status)
    if required_role is None or actor_role != required_role:
        return False
    if required_role == "hod":
        return actor_department is not None and actor_department == booking_department
    return True


def describe_status(status: str) -> str:
    return STATUS_LABELS.get(status, status)
