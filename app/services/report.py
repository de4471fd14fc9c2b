"""
Service layer for report records.

This module wraps every query against the ``reports`` table, abstracting
away the database operations from the API endpoints and the scheduler.
Store failures surface as ``StoreError``.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StoreError
from app.core.logging import logger
from app.models.report import Report
from app.schemas.report import ReportCreate, ReportFilter
from app.services.report_filter import filter_reports


class ReportService:
    """Service class for report records."""

    @staticmethod
    async def create(db: AsyncSession, report_in: ReportCreate) -> Report:
        """
        Insert a new report record.

        Args:
            db: Database session
            report_in: Report creation data

        Returns:
            Created report, with its store-assigned identifier
        """
        logger.info(
            f"Creating {report_in.category.value} report for {report_in.user} "
            f"({report_in.region}) dated {report_in.date}"
        )

        report = Report(
            date=report_in.date,
            category=report_in.category.value,
            amount=report_in.amount,
            user=report_in.user,
            region=report_in.region,
        )
        try:
            db.add(report)
            await db.commit()
            await db.refresh(report)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to insert report: {e}")
            raise StoreError("Failed to add report", details=str(e)) from e

        logger.info(f"Created report with ID: {report.id}")
        return report

    @staticmethod
    async def list_reports(
        db: AsyncSession,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Report]:
        """
        Read report records, optionally bounded by an inclusive date window.

        Args:
            db: Database session
            start_date: Earliest date to include
            end_date: Latest date to include

        Returns:
            Reports in insertion order
        """
        logger.debug(f"Listing reports, start_date={start_date}, end_date={end_date}")

        query = select(Report)
        if start_date:
            query = query.where(Report.date >= start_date)
        if end_date:
            query = query.where(Report.date <= end_date)
        query = query.order_by(Report.id)

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch reports: {e}")
            raise StoreError("Failed to fetch reports", details=str(e)) from e
        return list(result.scalars().all())

    @staticmethod
    async def find(db: AsyncSession, criteria: Optional[ReportFilter] = None) -> List[Report]:
        """
        Fetch the reports matching ``criteria``.

        The date window is pushed down to the query; the full criteria are
        then applied by ``filter_reports`` so every caller shares one set of
        matching rules.
        """
        if criteria is None:
            return await ReportService.list_reports(db)

        reports = await ReportService.list_reports(
            db,
            start_date=criteria.date or criteria.start_date,
            end_date=criteria.date or criteria.end_date,
        )
        return filter_reports(reports, criteria)

    @staticmethod
    async def get_regions(db: AsyncSession) -> List[str]:
        """Distinct regions, sorted."""
        try:
            result = await db.execute(
                select(Report.region).where(Report.region.is_not(None)).distinct().order_by(Report.region)
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch regions: {e}")
            raise StoreError("Failed to fetch regions", details=str(e)) from e
        return [region for region in result.scalars().all() if region]

    @staticmethod
    async def get_users(db: AsyncSession) -> List[str]:
        """Distinct users, sorted."""
        try:
            result = await db.execute(
                select(Report.user).where(Report.user.is_not(None)).distinct().order_by(Report.user)
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch users: {e}")
            raise StoreError("Failed to fetch users", details=str(e)) from e
        return [user for user in result.scalars().all() if user]
