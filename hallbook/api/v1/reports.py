"""Usage reporting endpoints (read-only)."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.api.deps import get_db
from hallbook.core.exceptions import AppException, ValidationError
from hallbook.core.permissions import require_statistics_access
from hallbook.database import DATASTORE_ERRORS
from hallbook.models.profile import Profile
from hallbook.schemas.reporting import StatisticsResponse
from hallbook.services.reporting_service import reporting_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    current_user: Annotated[Profile, Depends(require_statistics_access)],
    db: Annotated[AsyncSession, Depends(get_db)],
    from_date: date | None = Query(default=None, alias="fromDate"),
    to_date: date | None = Query(default=None, alias="toDate"),
) -> StatisticsResponse:
    """Booking totals and most/least used halls and departments."""
    if from_date and to_date and from_date > to_date:
        raise ValidationError("fromDate must not be after toDate")

    try:
        return await reporting_service.get_usage_statistics(db, from_date, to_date)
    except DATASTORE_ERRORS as e:
        logger.error(f"Statistics query failed: {e}")
        raise AppException(detail=f"Could not compute statistics: {e}")
