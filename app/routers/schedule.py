"""
Report delivery endpoints.

``/schedule-report`` emails data the caller already holds, right away.
``/schedule`` registers a recurring delivery that re-queries the store on
every firing.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.core.deps import get_dispatcher, get_exporter, get_schedule_manager
from app.core.email import EmailDispatcher
from app.core.logging import logger
from app.db.session import get_db
from app.schemas.schedule import (
    MessageResponse,
    RecurringScheduleRequest,
    ScheduleReportRequest,
    ScheduleResponse,
)
from app.services.export import ReportExporter
from app.services.schedule import ScheduleManager

router = APIRouter()


@router.post("/schedule-report", response_model=MessageResponse)
async def schedule_report(
    request_in: ScheduleReportRequest,
    exporter: ReportExporter = Depends(get_exporter),
    dispatcher: EmailDispatcher = Depends(get_dispatcher),
) -> MessageResponse:
    """
    Email the posted report data to the given address.

    Args:
        request_in: Recipient and report rows
        exporter: Renders the HTML table for the email body
        dispatcher: Email transport

    Returns:
        Confirmation message
    """
    logger.info(f"Emailing {len(request_in.report_data)} report rows to {request_in.email}")

    html_table = await run_in_threadpool(exporter.to_html_table, request_in.report_data)
    await run_in_threadpool(
        dispatcher.send_report_data,
        request_in.email,
        request_in.report_data,
        html_table,
    )
    return MessageResponse(message="Report scheduled and emailed successfully")


@router.post("/schedule", response_model=ScheduleResponse, response_model_by_alias=True)
async def schedule_recurring_report(
    request_in: RecurringScheduleRequest,
    db: AsyncSession = Depends(get_db),
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> ScheduleResponse:
    """
    Register a recurring report delivery.

    Args:
        request_in: Recipient, crontab expression and filter snapshot
        db: Database session
        manager: Schedule manager

    Returns:
        Confirmation with the next run time
    """
    job = await manager.schedule(
        db,
        request_in.email,
        request_in.frequency,
        request_in.report_config.filters,
    )
    logger.info(f"Report scheduled for {job.email} with '{job.frequency}'")
    return ScheduleResponse(
        message="Report scheduled successfully",
        id=job.id,
        next_run=job.next_run,
    )
