"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from hallbook.api.v1 import admin, bookings, halls, notifications, reports

api_router = APIRouter()

# Halls and availability
api_router.include_router(halls.router, prefix="/halls", tags=["Halls"])

# Bookings and approvals
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

# Reports
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
