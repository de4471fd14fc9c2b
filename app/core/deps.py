"""
Dependencies for FastAPI endpoints.

The exporter, dispatcher and schedule manager are built once in ``app.main``
and kept on ``app.state``; endpoints receive them through these providers
so tests can swap in fakes with ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Query, Request
from pydantic import ValidationError as PydanticValidationError

from app.core.email import EmailDispatcher
from app.core.exceptions import ValidationError
from app.schemas.report import ReportFilter
from app.services.export import ReportExporter
from app.services.schedule import ScheduleManager


def get_exporter(request: Request) -> ReportExporter:
    return request.app.state.exporter


def get_dispatcher(request: Request) -> EmailDispatcher:
    return request.app.state.dispatcher


def get_schedule_manager(request: Request) -> ScheduleManager:
    return request.app.state.schedule_manager


def get_report_filter(
    date: Optional[str] = Query(None, description="Exact date (YYYY-MM-DD)"),
    start_date: Optional[str] = Query(None, alias="start_date", description="Inclusive start date"),
    end_date: Optional[str] = Query(None, alias="end_date", description="Inclusive end date"),
    category: Optional[str] = Query(None, description="Exact category"),
    user: Optional[str] = Query(None, description="Case-insensitive user substring"),
    region: Optional[str] = Query(None, description="Case-insensitive region substring"),
) -> ReportFilter:
    """
    Build filter criteria from query parameters.

    Raises:
        ValidationError: If a date is malformed or the range is inverted
    """
    try:
        return ReportFilter(
            date=date,
            start_date=start_date,
            end_date=end_date,
            category=category,
            user=user,
            region=region,
        )
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid filter parameters",
            details=[{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()],
        ) from e
