"""Role-based access control and permissions."""

from enum import Enum
from typing import Any, Callable

from fastapi import Depends

from hallbook.api.deps import get_current_user
from hallbook.core.exceptions import AuthorizationError
from hallbook.models.profile import Profile


class UserRole(str, Enum):
    """User roles in the system."""

    FACULTY = "faculty"
    HOD = "hod"
    PRINCIPAL = "principal"
    PRO = "pro"  # read-only downstream viewer of approved events
    CHAIRMAN = "chairman"  # read-only view across every department
    ADMIN = "admin"


class Permission(str, Enum):
    """System permissions."""

    CREATE_BOOKING = "create_booking"
    APPROVE_BOOKING = "approve_booking"
    SWITCH_HALL = "switch_hall"
    MANAGE_HALL_STATUS = "manage_hall_status"
    VIEW_ALL_BOOKINGS = "view_all_bookings"
    VIEW_STATISTICS = "view_statistics"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.FACULTY: {
        Permission.CREATE_BOOKING,
    },
    UserRole.HOD: {
        Permission.APPROVE_BOOKING,
        Permission.SWITCH_HALL,
        Permission.VIEW_ALL_BOOKINGS,
        Permission.VIEW_STATISTICS,
    },
    UserRole.PRINCIPAL: {
        Permission.APPROVE_BOOKING,
        Permission.SWITCH_HALL,
        Permission.VIEW_ALL_BOOKINGS,
        Permission.VIEW_STATISTICS,
    },
    UserRole.PRO: {
        # Only legacy pending_pro bookings can still be decided by a PRO
        Permission.APPROVE_BOOKING,
        Permission.VIEW_ALL_BOOKINGS,
        Permission.VIEW_STATISTICS,
    },
    UserRole.CHAIRMAN: {
        Permission.VIEW_ALL_BOOKINGS,
        Permission.VIEW_STATISTICS,
    },
    UserRole.ADMIN: {
        Permission.CREATE_BOOKING,
        Permission.SWITCH_HALL,
        Permission.MANAGE_HALL_STATUS,
        Permission.VIEW_ALL_BOOKINGS,
        Permission.VIEW_STATISTICS,
    },
}


def has_permission(role: str, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    try:
        user_role = UserRole(role)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS.get(user_role, set())


def require_permission(permission: Permission) -> Callable[..., Any]:
    """Dependency to require a specific permission."""

    async def permission_checker(current_user: Profile = Depends(get_current_user)) -> Profile:
        if not has_permission(current_user.role, permission):
            raise AuthorizationError(
                f"Permission '{permission.value}' is required for this action"
            )
        return current_user

    return permission_checker


# Convenience dependencies
require_booking_creator = require_permission(Permission.CREATE_BOOKING)
require_hall_switch = require_permission(Permission.SWITCH_HALL)
require_hall_status_manager = require_permission(Permission.MANAGE_HALL_STATUS)
require_statistics_access = require_permission(Permission.VIEW_STATISTICS)
