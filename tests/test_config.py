"""
Tests for settings.
"""

import pytest
from pydantic import ValidationError

from app.core.config import Environment, ProductionSettings, Settings, TestingSettings, settings


def test_testing_settings_are_active():
    assert isinstance(settings, TestingSettings)
    assert settings.environment == Environment.TESTING
    assert settings.database.is_sqlite
    assert not settings.scheduler.enabled


def test_plain_postgres_url_uses_asyncpg():
    configured = Settings(database_url="postgresql://user:pw@db:5432/reports")

    assert configured.database.url == "postgresql+asyncpg://user:pw@db:5432/reports"


def test_unknown_database_url_is_rejected():
    with pytest.raises(ValidationError):
        Settings(database_url="mysql://user:pw@db/reports")


def test_production_requires_smtp_password():
    with pytest.raises(ValidationError):
        ProductionSettings(environment="production", database_url="postgresql://db/reports", smtp_password=None)


def test_email_sender_header():
    configured = Settings(
        database_url="postgresql://db/reports",
        smtp_from_name="Reports",
        smtp_from_email="reports@example.com",
        smtp_password="secret",
    )

    assert configured.email.sender == '"Reports" <reports@example.com>'
    assert configured.email.password_str == "secret"
