"""
Pydantic schemas for report delivery and recurring schedules.
"""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.report import ReportFilter
from app.utils import is_valid_email


class ScheduleReportRequest(BaseModel):
    """One-off delivery of report data that the caller already holds."""

    email: str = Field(..., min_length=1)
    report_data: List[Dict[str, Any]] = Field(..., min_length=1, alias="reportData")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        v = v.strip()
        if not is_valid_email(v):
            raise ValueError("Invalid email format")
        return v


class ReportConfig(BaseModel):
    """Report configuration snapshotted into a recurring schedule."""

    filters: ReportFilter = Field(default_factory=ReportFilter)


class RecurringScheduleRequest(BaseModel):
    """
    Recurring delivery request.

    The email and cron expression are checked by the schedule manager so that
    every entry point shares the same validation.
    """

    email: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1, description="Crontab expression, e.g. '0 9 * * *'")
    report_config: ReportConfig = Field(..., alias="reportConfig")

    model_config = ConfigDict(populate_by_name=True)


class ScheduleResponse(BaseModel):
    success: bool = True
    message: str
    id: int
    next_run: datetime = Field(..., alias="nextRun")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    message: str
