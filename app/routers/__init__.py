"""
Routers package initialization.

This module imports all routers to make them available from a single import point.
"""

from app.routers.health import router as health_router
from app.routers.reports import router as reports_router
from app.routers.exports import router as exports_router
from app.routers.schedule import router as schedule_router

__all__ = [
    "health_router",
    "reports_router",
    "exports_router",
    "schedule_router",
]
