"""
Models package initialization.

This module imports all models to ensure they are registered with SQLAlchemy.
"""

from app.models.base import Base

from app.models.report import Report
from app.models.scheduled_report import ScheduledReport


__all__ = [
    "Base",
    "Report",
    "ScheduledReport",
]
