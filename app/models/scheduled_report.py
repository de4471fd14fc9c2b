"""
ScheduledReport model to log recurring report deliveries.

Each row records a schedule request: who receives the report, the cron
expression, the filter snapshot and the next computed run. The live
trigger is owned by the in-process scheduler; the row is what lets the
application re-register it after a restart.
"""

from sqlalchemy import Column, DateTime, Integer, JSON, String
from sqlalchemy.sql import func

from app.models.base import Base


class ScheduledReport(Base):
    __tablename__ = "scheduled_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False)
    frequency = Column(String(100), nullable=False)  # crontab expression
    report_config = Column(JSON, nullable=False, default=dict)
    next_run = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return (
            f"<ScheduledReport(id={self.id}, email='{self.email}', "
            f"frequency='{self.frequency}', next_run={self.next_run})>"
        )
