"""
Service layer for recurring report deliveries.

A schedule request is validated, logged as a ``scheduled_reports`` row and
registered with the in-process scheduler. Every firing re-reads the store,
applies the snapshotted filter, renders a PDF and emails it. Only the filter
is snapshotted; the data is always current.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.concurrency import run_in_threadpool

from app.core.email import EmailDispatcher
from app.core.exceptions import StoreError, ValidationError
from app.core.logging import logger
from app.models.scheduled_report import ScheduledReport
from app.schemas.report import ReportFilter
from app.services.export import ReportExporter
from app.services.report import ReportService
from app.utils import is_valid_email


@dataclass
class ScheduledJob:
    """A registered recurring delivery."""

    id: int
    email: str
    frequency: str
    filters: Dict[str, Any] = field(default_factory=dict)
    next_run: Optional[datetime] = None

    @property
    def job_id(self) -> str:
        return f"scheduled-report-{self.id}"


class ScheduleManager:
    """Registers recurring report deliveries and runs their firings."""

    def __init__(
        self,
        scheduler: BaseScheduler,
        session_factory: async_sessionmaker[AsyncSession],
        exporter: ReportExporter,
        dispatcher: EmailDispatcher,
    ):
        self.scheduler = scheduler
        self.session_factory = session_factory
        self.exporter = exporter
        self.dispatcher = dispatcher

    def build_trigger(self, frequency: str) -> CronTrigger:
        """
        Parse a five-field crontab expression.

        Raises:
            ValidationError: If the expression is not a valid schedule
        """
        try:
            return CronTrigger.from_crontab(frequency.strip(), timezone=self.scheduler.timezone)
        except (ValueError, TypeError) as e:
            raise ValidationError("Invalid cron expression", details=str(e)) from e

    def validate(self, email: Optional[str], frequency: Optional[str]) -> CronTrigger:
        """
        Check a schedule request before anything is persisted or registered.

        Returns:
            The parsed trigger
        """
        if not email or not frequency:
            raise ValidationError("Missing required parameters")
        if not is_valid_email(email.strip()):
            raise ValidationError("Invalid email format")
        return self.build_trigger(frequency)

    @staticmethod
    def next_run_time(trigger: CronTrigger) -> datetime:
        return trigger.get_next_fire_time(None, datetime.now(trigger.timezone))

    def _register(self, job: ScheduledJob, trigger: CronTrigger) -> None:
        self.scheduler.add_job(
            self.run_job,
            trigger=trigger,
            args=[job.email, job.filters],
            id=job.job_id,
            name=f"Scheduled report for {job.email} ({job.frequency})",
            replace_existing=True,
        )
        logger.info(f"Registered {job.job_id} for {job.email}, next run {job.next_run}")

    async def schedule(
        self,
        db: AsyncSession,
        email: str,
        frequency: str,
        criteria: Optional[ReportFilter] = None,
    ) -> ScheduledJob:
        """
        Validate, persist and register a recurring delivery.

        Args:
            db: Database session
            email: Recipient address
            frequency: Crontab expression
            criteria: Filter applied on every firing

        Returns:
            The registered job with its next fire time
        """
        trigger = self.validate(email, frequency)
        email = email.strip()
        frequency = frequency.strip()
        filters = criteria.snapshot() if criteria else {}
        next_run = self.next_run_time(trigger)

        row = ScheduledReport(
            email=email,
            frequency=frequency,
            report_config={"filters": filters},
            next_run=next_run,
        )
        try:
            db.add(row)
            await db.commit()
            await db.refresh(row)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to store schedule for {email}: {e}")
            raise StoreError("Failed to schedule report", details=str(e)) from e

        job = ScheduledJob(id=row.id, email=email, frequency=frequency, filters=filters, next_run=next_run)
        self._register(job, trigger)
        return job

    async def run_job(self, email: str, filters: Optional[Dict[str, Any]] = None) -> bool:
        """
        Run one firing: fetch, filter, render, dispatch.

        Failures are logged and swallowed so the trigger keeps firing.

        Returns:
            True when a report was sent
        """
        try:
            criteria = ReportFilter.model_validate(filters or {})
            async with self.session_factory() as db:
                records = await ReportService.find(db, criteria)

            if not records:
                logger.info(f"Scheduled report for {email} matched no records; nothing sent")
                return False

            generated_at = datetime.now()
            content = await run_in_threadpool(self.exporter.to_pdf, records, generated_at)
            await run_in_threadpool(
                self.dispatcher.send_report_attachment,
                email,
                content,
                self.exporter.pdf_filename(generated_at.date()),
                "pdf",
                generated_at,
            )
        except Exception:
            logger.exception(f"Scheduled report for {email} failed")
            return False

        logger.info(f"Sent scheduled report to {email} ({len(records)} records)")
        return True

    async def restore(self, db: AsyncSession) -> int:
        """
        Re-register every persisted schedule.

        Called at startup so schedules survive a process restart. Rows whose
        expression no longer parses are skipped.

        Returns:
            Number of jobs registered
        """
        try:
            result = await db.execute(select(ScheduledReport).order_by(ScheduledReport.id))
            rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to load scheduled reports: {e}")
            raise StoreError("Failed to load scheduled reports", details=str(e)) from e

        restored = 0
        for row in rows:
            try:
                trigger = self.build_trigger(row.frequency)
            except ValidationError as e:
                logger.warning(f"Skipping scheduled report {row.id}: {e.details}")
                continue
            if not is_valid_email(row.email):
                logger.warning(f"Skipping scheduled report {row.id}: invalid email")
                continue

            next_run = self.next_run_time(trigger)
            filters = (row.report_config or {}).get("filters") or {}
            self._register(
                ScheduledJob(id=row.id, email=row.email, frequency=row.frequency, filters=filters, next_run=next_run),
                trigger,
            )
            row.next_run = next_run
            restored += 1

        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StoreError("Failed to update scheduled reports", details=str(e)) from e

        logger.info(f"Restored {restored} of {len(rows)} scheduled report(s)")
        return restored

    def list_jobs(self) -> List[str]:
        return [job.id for job in self.scheduler.get_jobs()]
