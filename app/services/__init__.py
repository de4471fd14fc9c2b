"""
Services package initialization.

This module imports all services to make them available from a single import point.
"""

from app.services.report import ReportService
from app.services.report_filter import filter_reports
from app.services.export import ReportExporter
from app.services.schedule import ScheduleManager, ScheduledJob

__all__ = ["ReportService", "filter_reports", "ReportExporter", "ScheduleManager", "ScheduledJob"]
