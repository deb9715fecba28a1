"""Usage statistics schemas (read-only)."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class UsageEntry(BaseModel):
    """Booking count for one hall or department."""

    name: str
    count: int


class HallUsage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    most_used: list[UsageEntry] = Field(alias="mostUsed")
    least_used: list[UsageEntry] = Field(alias="leastUsed")


class DepartmentUsage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    most_active: list[UsageEntry] = Field(alias="mostActive")
    least_active: list[UsageEntry] = Field(alias="leastActive")


class StatisticsResponse(BaseModel):
    """Usage statistics over an optional event-date range.

    Serialized with camelCase keys for the dashboard.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_date: date | None = Field(None, alias="fromDate")
    to_date: date | None = Field(None, alias="toDate")
    total_bookings: int = Field(alias="totalBookings")
    halls: HallUsage
    departments: DepartmentUsage
