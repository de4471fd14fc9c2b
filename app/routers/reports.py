"""
Report API endpoints.
This module provides endpoints for reading, adding and filtering report records.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_report_filter
from app.core.logging import logger
from app.db.session import get_db
from app.schemas.report import Report, ReportCreate, ReportFilter, ReportQuery, UserOption
from app.services.report import ReportService

router = APIRouter()


@router.get("/reports", response_model=List[Report])
async def list_reports(
    criteria: ReportFilter = Depends(get_report_filter),
    db: AsyncSession = Depends(get_db),
) -> List[Report]:
    """
    Get all report records, optionally narrowed by filter query parameters.

    Args:
        criteria: Filter criteria from the query string
        db: Database session

    Returns:
        Matching reports (empty list when none)
    """
    logger.info(f"Reports requested with filters: {criteria.snapshot()}")
    reports = await ReportService.find(db, None if criteria.is_empty() else criteria)
    return reports


@router.post("/reports", response_model=Report, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_in: ReportCreate,
    db: AsyncSession = Depends(get_db),
) -> Report:
    """
    Add a new report record.

    Args:
        report_in: Report creation data
        db: Database session

    Returns:
        Created report with its identifier
    """
    report = await ReportService.create(db, report_in)
    logger.info(f"Report created successfully: {report.id}")
    return report


@router.post("/data", response_model=List[Report])
async def query_reports(
    query: ReportQuery,
    db: AsyncSession = Depends(get_db),
) -> List[Report]:
    """
    Fetch reports within a required date window plus optional filters.
    """
    logger.info(f"Data requested from {query.start_date} to {query.end_date}")
    return await ReportService.find(db, query)


@router.get("/regions", response_model=List[str])
async def list_regions(db: AsyncSession = Depends(get_db)) -> List[str]:
    """Distinct regions for the filter dropdown."""
    return await ReportService.get_regions(db)


@router.get("/users", response_model=List[UserOption])
async def list_users(db: AsyncSession = Depends(get_db)) -> List[UserOption]:
    """Distinct users for the filter dropdown."""
    users = await ReportService.get_users(db)
    return [UserOption(id=user, name=user) for user in users]
