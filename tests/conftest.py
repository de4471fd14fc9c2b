"""
Configuration for pytest.

This module provides fixtures and configuration for running tests.
"""

import os

# Settings are read on import, so the environment has to be in place first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator, List

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import DatabaseSettings, SchedulerSettings
from app.core.deps import get_dispatcher, get_exporter, get_schedule_manager
from app.core.exceptions import DeliveryError
from app.core.scheduler import create_scheduler
from app.db.session import build_engine, build_session_factory, get_db, init_db
from app.main import app
from app.models.report import Report
from app.services.export import ReportExporter
from app.services.schedule import ScheduleManager

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeDispatcher:
    """Records outgoing emails instead of talking to an SMTP server."""

    def __init__(self):
        self.data_emails: List[dict] = []
        self.attachments: List[dict] = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise DeliveryError("Failed to send email", details="connection refused")

    def send_report_data(self, recipient, report_data, html_table=None):
        self._check()
        self.data_emails.append(
            {"recipient": recipient, "report_data": list(report_data), "html_table": html_table}
        )

    def send_report_attachment(self, recipient, content, filename, mime_subtype="pdf", generated_at=None):
        self._check()
        self.attachments.append(
            {"recipient": recipient, "content": content, "filename": filename, "mime_subtype": mime_subtype}
        )


@pytest.fixture
async def test_engine():
    """Fresh in-memory database with all tables."""
    engine = build_engine(DatabaseSettings(url=TEST_DATABASE_URL))
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_session_factory(test_engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def exporter() -> ReportExporter:
    return ReportExporter(title="Test Report")


@pytest.fixture
def scheduler() -> AsyncIOScheduler:
    # never started; added jobs stay pending and are listed by get_jobs()
    return create_scheduler(SchedulerSettings(timezone="UTC"))


@pytest.fixture
def schedule_manager(scheduler, session_factory, exporter, dispatcher) -> ScheduleManager:
    return ScheduleManager(
        scheduler=scheduler,
        session_factory=session_factory,
        exporter=exporter,
        dispatcher=dispatcher,
    )


@pytest.fixture
def sample_records() -> List[dict]:
    return [
        {"id": 1, "date": "2025-06-01", "category": "Sales", "amount": 1000, "user": "Alice", "region": "North"},
        {"id": 2, "date": "2025-06-02", "category": "HR", "amount": 250.5, "user": "Bob", "region": "South"},
        {"id": 3, "date": "2025-06-03", "category": "Finance", "amount": 75.25, "user": "alice", "region": "Northeast"},
    ]


@pytest.fixture
async def seeded_reports(db_session) -> List[Report]:
    """Three stored report rows."""
    reports = [
        Report(date=date(2025, 6, 1), category="Sales", amount=Decimal("1000.00"), user="Alice", region="North"),
        Report(date=date(2025, 6, 2), category="HR", amount=Decimal("250.50"), user="Bob", region="South"),
        Report(date=date(2025, 6, 3), category="Finance", amount=Decimal("75.25"), user="Carol", region="Northeast"),
    ]
    db_session.add_all(reports)
    await db_session.commit()
    for report in reports:
        await db_session.refresh(report)
    return reports


@pytest.fixture
async def async_client(session_factory, exporter, dispatcher, schedule_manager):
    """Create an async test client."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_exporter] = lambda: exporter
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_schedule_manager] = lambda: schedule_manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
