"""
Tests for the recurring schedule manager.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.models.scheduled_report import ScheduledReport
from app.schemas.report import ReportCreate, ReportFilter
from app.services.export import ReportExporter
from app.services.report import ReportService
from app.services.schedule import ScheduledJob, ScheduleManager


class RecordingExporter(ReportExporter):
    """Keeps the records handed to every PDF render."""

    def __init__(self):
        super().__init__(title="Test Report")
        self.rendered = []

    def to_pdf(self, records, generated_at=None):
        self.rendered.append(list(records))
        return super().to_pdf(records, generated_at)


@pytest.fixture
def recording_exporter():
    return RecordingExporter()


@pytest.fixture
def recording_manager(scheduler, session_factory, recording_exporter, dispatcher):
    return ScheduleManager(
        scheduler=scheduler,
        session_factory=session_factory,
        exporter=recording_exporter,
        dispatcher=dispatcher,
    )


async def _stored_schedules(db_session: AsyncSession):
    result = await db_session.execute(select(ScheduledReport))
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_schedule_daily_report(db_session, schedule_manager, scheduler):
    """A valid request is persisted and registered with its next run."""
    job = await schedule_manager.schedule(
        db_session, "ops@example.com", "0 9 * * *", ReportFilter(region="north")
    )

    assert job.id is not None
    assert job.next_run > datetime.now(timezone.utc)
    assert (job.next_run.hour, job.next_run.minute) == (9, 0)
    assert [j.id for j in scheduler.get_jobs()] == [job.job_id]

    rows = await _stored_schedules(db_session)
    assert len(rows) == 1
    assert rows[0].email == "ops@example.com"
    assert rows[0].frequency == "0 9 * * *"
    assert rows[0].report_config == {"filters": {"region": "north"}}


@pytest.mark.asyncio
async def test_invalid_email_is_rejected_before_registration(db_session, schedule_manager, scheduler):
    with pytest.raises(ValidationError) as exc_info:
        await schedule_manager.schedule(db_session, "not-an-email", "0 9 * * *")

    assert exc_info.value.message == "Invalid email format"
    assert scheduler.get_jobs() == []
    assert await _stored_schedules(db_session) == []


@pytest.mark.asyncio
async def test_invalid_cron_is_rejected(db_session, schedule_manager, scheduler):
    with pytest.raises(ValidationError) as exc_info:
        await schedule_manager.schedule(db_session, "ops@example.com", "every day at nine")

    assert exc_info.value.message == "Invalid cron expression"
    assert scheduler.get_jobs() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("email, frequency", [("", "0 9 * * *"), ("ops@example.com", ""), (None, None)])
async def test_missing_parameters(schedule_manager, email, frequency):
    with pytest.raises(ValidationError) as exc_info:
        schedule_manager.validate(email, frequency)

    assert exc_info.value.message == "Missing required parameters"


@pytest.mark.asyncio
async def test_run_job_sends_filtered_pdf(schedule_manager, dispatcher, seeded_reports):
    sent = await schedule_manager.run_job("ops@example.com", {"region": "nor"})

    assert sent is True
    assert len(dispatcher.attachments) == 1
    attachment = dispatcher.attachments[0]
    assert attachment["recipient"] == "ops@example.com"
    assert attachment["content"].startswith(b"%PDF")
    assert attachment["filename"].startswith("reportify_report_")
    assert attachment["filename"].endswith(".pdf")


@pytest.mark.asyncio
async def test_run_job_with_no_matches_sends_nothing(schedule_manager, dispatcher, seeded_reports):
    sent = await schedule_manager.run_job("ops@example.com", {"region": "atlantis"})

    assert sent is False
    assert dispatcher.attachments == []


@pytest.mark.asyncio
async def test_failed_firing_is_swallowed(db_session, schedule_manager, scheduler, dispatcher, seeded_reports):
    """A failing firing is logged and the job stays registered."""
    job = await schedule_manager.schedule(db_session, "ops@example.com", "*/5 * * * *")
    dispatcher.fail = True

    sent = await schedule_manager.run_job(job.email, job.filters)

    assert sent is False
    assert scheduler.get_job(job.job_id) is not None


@pytest.mark.asyncio
async def test_restore_registers_valid_rows(db_session, schedule_manager, scheduler):
    valid = ScheduledReport(
        email="ops@example.com", frequency="0 9 * * 1", report_config={"filters": {"category": "Sales"}}
    )
    broken = ScheduledReport(email="ops@example.com", frequency="not a cron", report_config={})
    db_session.add_all([valid, broken])
    await db_session.commit()

    restored = await schedule_manager.restore(db_session)

    assert restored == 1
    job_id = ScheduledJob(id=valid.id, email=valid.email, frequency=valid.frequency).job_id
    assert job_id == f"scheduled-report-{valid.id}"
    assert schedule_manager.list_jobs() == [job_id]
    assert scheduler.get_job(job_id).args == ("ops@example.com", {"category": "Sales"})

    await db_session.refresh(valid)
    assert valid.next_run is not None


@pytest.mark.asyncio
async def test_run_job_renders_only_matching_records(recording_manager, recording_exporter, seeded_reports):
    sent = await recording_manager.run_job("ops@example.com", {"region": "nor"})

    assert sent is True
    assert len(recording_exporter.rendered) == 1
    rendered = recording_exporter.rendered[0]
    assert [r.id for r in rendered] == [seeded_reports[0].id, seeded_reports[2].id]
    assert [r.region for r in rendered] == ["North", "Northeast"]


@pytest.mark.asyncio
async def test_each_firing_reads_current_data(
    db_session, recording_manager, recording_exporter, dispatcher, seeded_reports
):
    """Records added after scheduling appear in the next firing."""
    job = await recording_manager.schedule(
        db_session, "ops@example.com", "0 9 * * *", ReportFilter(region="nor")
    )
    added = await ReportService.create(
        db_session,
        ReportCreate(date="2025-06-10", category="Sales", amount=42, user="Dave", region="Northwest"),
    )
    await ReportService.create(
        db_session,
        ReportCreate(date="2025-06-10", category="Sales", amount=7, user="Erin", region="South"),
    )

    sent = await recording_manager.run_job(job.email, job.filters)

    assert sent is True
    rendered = recording_exporter.rendered[0]
    assert added.id in [r.id for r in rendered]
    assert [r.region for r in rendered] == ["North", "Northeast", "Northwest"]
    assert len(dispatcher.attachments) == 1
