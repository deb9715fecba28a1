"""Clock helpers.

Timestamps are stored in UTC; booking dates and wall-clock times are
interpreted in the college's local timezone.
"""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from hallbook.config import settings


def utcnow() -> datetime:
    """Current aware UTC timestamp."""
    return datetime.now(UTC)


def local_now() -> datetime:
    """Current aware timestamp in the college timezone."""
    return datetime.now(ZoneInfo(settings.timezone))


def local_today() -> date:
    return local_now().date()
