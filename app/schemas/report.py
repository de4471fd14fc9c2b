"""
Pydantic schemas for reports.

This module defines the request and response schemas for report-related
API endpoints using Pydantic models.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from app.models.report import ReportCategory
from app.utils import to_money


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _money(value: Any) -> Decimal:
    try:
        return to_money(value)
    except InvalidOperation as e:
        raise ValueError("amount is out of range") from e


def _date_part(value: Any) -> Any:
    # Browsers serialize Date objects as full ISO timestamps
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value


class ReportBase(BaseModel):
    """Base schema for report data."""

    date: dt.date
    category: ReportCategory
    amount: Decimal = Field(
        ..., ge=0, le=Decimal("99999999.99"), description="Non-negative amount, two decimals"
    )
    user: str = Field(..., min_length=1, max_length=50)
    region: str = Field(..., min_length=1, max_length=50)

    @field_validator("date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return _date_part(v)

    @field_validator("amount")
    @classmethod
    def quantize_amount(cls, v):
        return _money(v)

    @field_validator("user", "region")
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal) -> float:
        return float(v)


class ReportCreate(ReportBase):
    """Schema for creating a new report."""

    pass


class Report(ReportBase):
    """Schema for report response data."""

    id: int
    category: str

    model_config = ConfigDict(from_attributes=True)


class ReportRow(BaseModel):
    """
    A report record as posted back by the frontend for export.

    Rows may come from any revision of the frontend, so the category is not
    restricted to the enum and the identifier is optional. Older clients send
    the user as ``user_id``.
    """

    id: Optional[int] = None
    date: dt.date
    category: str
    amount: Decimal = Field(..., ge=Decimal("-99999999.99"), le=Decimal("99999999.99"))
    user: str = Field(..., validation_alias=AliasChoices("user", "user_id"))
    region: str

    model_config = ConfigDict(from_attributes=True, extra="ignore", populate_by_name=True)

    @field_validator("date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return _date_part(v)

    @field_validator("amount")
    @classmethod
    def quantize_amount(cls, v):
        return _money(v)

    @field_validator("user", mode="before")
    @classmethod
    def user_as_text(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class ReportFilter(BaseModel):
    """
    Schema for filtering reports.

    Every criterion is optional; unset criteria do not constrain the result.
    """

    date: Optional[dt.date] = None
    start_date: Optional[dt.date] = Field(
        None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: Optional[dt.date] = Field(
        None, validation_alias=AliasChoices("end_date", "endDate")
    )
    category: Optional[str] = None
    user: Optional[str] = Field(None, validation_alias=AliasChoices("user", "userId", "user_id"))
    region: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_unset(cls, v):
        return _blank_to_none(v)

    @field_validator("date", "start_date", "end_date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return _date_part(v)

    @field_validator("user", mode="before")
    @classmethod
    def user_as_text(cls, v):
        # the dashboard sends numeric user ids
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready form of the populated criteria."""
        return self.model_dump(mode="json", exclude_none=True)


class ReportQuery(ReportFilter):
    """Filtered fetch over a required date window."""

    start_date: dt.date = Field(..., validation_alias=AliasChoices("start_date", "startDate"))
    end_date: dt.date = Field(..., validation_alias=AliasChoices("end_date", "endDate"))


class ExportRequest(BaseModel):
    """Body of the export endpoints."""

    data: List[ReportRow]


class UserOption(BaseModel):
    id: str
    name: str
