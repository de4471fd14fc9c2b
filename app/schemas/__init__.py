"""
Schemas package initialization.

This module re-exports the request and response schemas.
"""

from app.schemas.report import (
    ExportRequest,
    Report,
    ReportCreate,
    ReportFilter,
    ReportQuery,
    ReportRow,
    UserOption,
)
from app.schemas.schedule import (
    MessageResponse,
    RecurringScheduleRequest,
    ReportConfig,
    ScheduleReportRequest,
    ScheduleResponse,
)

__all__ = [
    "ExportRequest",
    "Report",
    "ReportCreate",
    "ReportFilter",
    "ReportQuery",
    "ReportRow",
    "UserOption",
    "MessageResponse",
    "RecurringScheduleRequest",
    "ReportConfig",
    "ScheduleReportRequest",
    "ScheduleResponse",
]
