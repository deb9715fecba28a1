"""Usage statistics (read-only)."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.domain.campus import ALL_DEPARTMENTS
from hallbook.models.booking import Booking
from hallbook.models.hall import Hall
from hallbook.schemas.reporting import (
    DepartmentUsage,
    HallUsage,
    StatisticsResponse,
    UsageEntry,
)

TOP_K = 5
UNKNOWN = "Unknown"


def rank_usage(counts: dict[str, int], k: int = TOP_K) -> tuple[list[UsageEntry], list[UsageEntry]]:
    """Split counts into (most used, least used), each at most k long.

    Sorting is stable, so ties keep the order of ``counts``.
    """
    entries = [UsageEntry(name=name, count=count) for name, count in counts.items()]
    entries.sort(key=lambda e: e.count, reverse=True)
    return entries[:k], list(reversed(entries))[:k]


class ReportingService:
    """Service for booking usage statistics."""

    async def get_usage_statistics(
        self,
        db: AsyncSession,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> StatisticsResponse:
        """Booking counts per hall and per department over an event-date range.

        Every booking in the range counts, whatever its status. All known
        departments are listed even with zero bookings.
        """
        query = select(Booking.department, Hall.name).outerjoin(Hall, Booking.hall_id == Hall.id)
        if from_date:
            query = query.where(Booking.event_date >= from_date)
        if to_date:
            query = query.where(Booking.event_date <= to_date)

        result = await db.execute(query.order_by(Hall.name))
        rows = result.all()

        hall_counts: dict[str, int] = {}
        department_counts: dict[str, int] = {name: 0 for name in ALL_DEPARTMENTS}
        for department, hall_name in rows:
            hall_key = hall_name or UNKNOWN
            hall_counts[hall_key] = hall_counts.get(hall_key, 0) + 1
            dept_key = department or UNKNOWN
            department_counts[dept_key] = department_counts.get(dept_key, 0) + 1

        most_used, least_used = rank_usage(hall_counts)
        most_active, least_active = rank_usage(department_counts)

        return StatisticsResponse(
            from_date=from_date,
            to_date=to_date,
            total_bookings=len(rows),
            halls=HallUsage(most_used=most_used, least_used=least_used),
            departments=DepartmentUsage(most_active=most_active, least_active=least_active),
        )


reporting_service = ReportingService()
