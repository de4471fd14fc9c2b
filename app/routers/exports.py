"""
Export endpoints for reports.
This module provides endpoints for exporting report records in different formats.
"""
from fastapi import APIRouter, Depends, Response
from starlette.concurrency import run_in_threadpool

from app.core.deps import get_exporter
from app.core.logging import logger
from app.schemas.report import ExportRequest
from app.services.export import EXCEL_MEDIA_TYPE, PDF_MEDIA_TYPE, ReportExporter

router = APIRouter()

EXCEL_FILENAME = "reportify_report.xlsx"
PDF_FILENAME = "reportify_report.pdf"


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/excel")
async def export_excel(
    export_in: ExportRequest,
    exporter: ReportExporter = Depends(get_exporter),
) -> Response:
    """
    Export the posted records as an Excel workbook.
    """
    logger.info(f"Exporting {len(export_in.data)} records as Excel")
    content = await run_in_threadpool(exporter.to_excel, export_in.data)
    return _attachment(content, EXCEL_MEDIA_TYPE, EXCEL_FILENAME)


@router.post("/pdf")
async def export_pdf(
    export_in: ExportRequest,
    exporter: ReportExporter = Depends(get_exporter),
) -> Response:
    """
    Export the posted records as a PDF document.
    """
    logger.info(f"Exporting {len(export_in.data)} records as PDF")
    content = await run_in_threadpool(exporter.to_pdf, export_in.data)
    return _attachment(content, PDF_MEDIA_TYPE, PDF_FILENAME)
