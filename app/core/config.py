# config.py
"""
Configuration module for the application.
Handles environment-specific settings using Pydantic v2 and pydantic-settings.
"""
from typing import Optional
from enum import Enum
from pydantic import Field, field_validator, BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_enabled: bool = True
    file_path: str = "logs/app.log"

class APISettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 10000
    prefix: str = "/api"
    version: str = "1.0.0"
    title: str = "Reportify API"
    description: str = "Reporting backend: filtered report data, PDF/Excel exports and scheduled email delivery"

class DatabaseSettings(BaseModel):
    url: str
    pool_size: int = 20
    max_overflow: int = 30
    pool_recycle: int = 3600

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

class EmailSettings(BaseModel):
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    use_tls: bool = True
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    from_email: str = "reports@reportify.local"
    from_name: str = "Reportify Reports"
    subject: str = "Scheduled Report from Reportify"
    timeout: float = 30.0
    @property
    def password_str(self) -> Optional[str]:
        """Return the password as a string for SMTP connection."""
        return self.password.get_secret_value() if self.password else None

    @property
    def sender(self) -> str:
        return f'"{self.from_name}" <{self.from_email}>'

class SchedulerSettings(BaseModel):
    timezone: str = "UTC"
    enabled: bool = True
    restore_on_startup: bool = True
    misfire_grace_time: int = 300

class Settings(BaseSettings):
    """Main settings class with environment-specific configurations."""
    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # API
    api_title: str = "Reportify API"
    api_description: str = "Reporting backend: filtered report data, PDF/Excel exports and scheduled email delivery"
    api_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 10000

    # Database
    database_url: str
    pool_size: int = 20
    max_overflow: int = 30
    pool_recycle: int = 3600

    # Logging
    log_level: str = "INFO"
    log_format: str = Field(default="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}")
    log_file_enabled: bool = True
    log_file_path: str = "logs/app.log"

    # Email
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_use_tls: bool = True
    smtp_username: Optional[str] = None
    smtp_password: Optional[SecretStr] = None
    smtp_from_email: str = "reports@reportify.local"
    smtp_from_name: str = "Reportify Reports"
    smtp_timeout: float = 30.0
    report_email_subject: str = "Scheduled Report from Reportify"

    # Reports
    report_title: str = "Reportify Report"

    # Scheduler
    scheduler_timezone: str = "UTC"
    scheduler_enabled: bool = True
    schedule_restore_on_startup: bool = True
    scheduler_misfire_grace_time: int = 300

    # Frontend
    frontend_urls_raw: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        alias="FRONTEND_URLS",
        exclude=True,
    )

    # Validators
    @field_validator("debug")
    @classmethod
    def debug_not_in_production(cls, v, info):
        env = info.data.get("environment")
        if v and env == Environment.PRODUCTION:
            raise ValueError("Debug mode should not be enabled in production")
        return v

    @property
    def frontend_urls(self) -> list[str]:
        """Comma-separated frontend URLs from .env, parsed into a list."""
        urls = [url.strip() for url in self.frontend_urls_raw.split(",") if url.strip()]
        from urllib.parse import urlparse
        for url in urls:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"Invalid URL in frontend_urls: {url}")
        return urls

    @field_validator("smtp_password")
    @classmethod
    def validate_smtp_password(cls, v, info):
        env = info.data.get("environment")
        if env == Environment.PRODUCTION and not v:
            raise ValueError("SMTP password must be set in production")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v.startswith(("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError("Invalid database URL format")
        # Managed Postgres providers hand out plain postgresql:// URLs
        if v.startswith("postgresql://"):
            v = "postgresql+asyncpg://" + v[len("postgresql://"):]
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    # Sub-settings via properties
    @property
    def api(self) -> APISettings:
        return APISettings(
            host=self.host,
            port=self.port,
            title=self.api_title,
            description=self.api_description,
            version=self.api_version,
        )

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings(
            level=self.log_level,
            format=self.log_format,
            file_enabled=self.log_file_enabled,
            file_path=self.log_file_path,
        )

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings(
            url=self.database_url,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_recycle=self.pool_recycle,
        )

    @property
    def email(self) -> EmailSettings:
        return EmailSettings(
            smtp_host=self.smtp_host,
            smtp_port=self.smtp_port,
            use_tls=self.smtp_use_tls,
            username=self.smtp_username,
            password=self.smtp_password,
            from_email=self.smtp_from_email,
            from_name=self.smtp_from_name,
            subject=self.report_email_subject,
            timeout=self.smtp_timeout,
        )

    @property
    def scheduler(self) -> SchedulerSettings:
        return SchedulerSettings(
            timezone=self.scheduler_timezone,
            enabled=self.scheduler_enabled,
            restore_on_startup=self.schedule_restore_on_startup,
            misfire_grace_time=self.scheduler_misfire_grace_time,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )

class DevelopmentSettings(Settings):
    debug: bool = True
    log_level: str = "DEBUG"

class ProductionSettings(Settings):
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("smtp_password")
    @classmethod
    def validate_smtp_password(cls, v, info):
        if not v:
            raise ValueError("SMTP password is required in production")
        return v

class TestingSettings(Settings):
    database_url: str = "sqlite+aiosqlite:///:memory:"
    debug: bool = True
    log_level: str = "DEBUG"
    log_file_enabled: bool = False
    scheduler_enabled: bool = False
    schedule_restore_on_startup: bool = False

def get_settings() -> Settings:
    """Factory to return environment-specific settings."""
    env = Settings().environment
    if env == Environment.PRODUCTION:
        return ProductionSettings()
    elif env == Environment.TESTING:
        return TestingSettings()
    return DevelopmentSettings()

# Global settings instance
settings = get_settings()
