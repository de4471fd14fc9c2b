"""
Rendering of report records into downloadable artifacts.

Spreadsheets are written with openpyxl, PDF documents with the reportlab
canvas, and email bodies as a plain HTML table.
"""

import html
from datetime import date, datetime
from decimal import InvalidOperation
from io import BytesIO
from typing import Any, List, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.core.exceptions import RenderError
from app.core.logging import logger
from app.utils import get_field, to_money

EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"

COLUMNS = ("date", "category", "amount", "user", "region")

HEADER_FONT = Font(bold=True, color="FFFFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FF007BFF")
COLUMN_WIDTH = 20
AMOUNT_FORMAT = "0.00"

# PDF layout, in points
PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_X = 40
TOP_Y = PAGE_HEIGHT - 50
BOTTOM_Y = 50
LINE_STEP = 16
BODY_FONT = ("Helvetica", 10)
TITLE_FONT = ("Helvetica-Bold", 16)

Page = List[Tuple[float, str]]


def _value(record: Any, name: str) -> Any:
    value = get_field(record, name)
    if name == "user" and value is None:
        value = get_field(record, "user_id")
    return getattr(value, "value", value)


def _has_ids(records: Sequence[Any]) -> bool:
    return any(get_field(record, "id") is not None for record in records)


def format_amount(value: Any) -> str:
    try:
        return f"{to_money(value):.2f}"
    except (InvalidOperation, TypeError, ValueError):
        return "" if value is None else str(value)


def format_record_line(record: Any) -> str:
    """``id. date | category | $amount | user | region``"""
    record_id = get_field(record, "id")
    prefix = f"{record_id}. " if record_id is not None else ""
    return (
        f"{prefix}{_value(record, 'date')} | {_value(record, 'category')} | "
        f"${format_amount(_value(record, 'amount'))} | {_value(record, 'user')} | {_value(record, 'region')}"
    )


def paginate_lines(
    lines: Sequence[str],
    start_y: float = TOP_Y,
    top_y: float = TOP_Y,
    bottom_y: float = BOTTOM_Y,
    step: float = LINE_STEP,
) -> List[Page]:
    """
    Assign each line a page and a vertical position.

    The cursor moves down by ``step`` per line; once it passes ``bottom_y``
    the next line starts a new page at ``top_y``.

    Returns:
        One list of ``(y, line)`` pairs per page
    """
    pages: List[Page] = [[]]
    y = start_y
    for line in lines:
        if y < bottom_y:
            pages.append([])
            y = top_y
        pages[-1].append((y, line))
        y -= step
    return pages


class ReportExporter:
    """Renders filtered report records as spreadsheet, PDF or HTML."""

    def __init__(self, title: str = "Reportify Report"):
        self.title = title

    @staticmethod
    def _require_records(records: Sequence[Any]) -> List[Any]:
        records = list(records or [])
        if not records:
            raise RenderError.empty()
        return records

    def columns_for(self, records: Sequence[Any]) -> Tuple[str, ...]:
        return (("id",) + COLUMNS) if _has_ids(records) else COLUMNS

    def to_excel(self, records: Sequence[Any]) -> bytes:
        """
        Render records as an XLSX workbook.

        Args:
            records: Non-empty sequence of report records

        Returns:
            Workbook bytes
        """
        records = self._require_records(records)
        columns = self.columns_for(records)

        try:
            workbook = Workbook()
            worksheet = workbook.active
            worksheet.title = "Report"

            worksheet.append([column.upper() for column in columns])
            for index, cell in enumerate(worksheet[1], start=1):
                cell.font = HEADER_FONT
                cell.fill = HEADER_FILL
                worksheet.column_dimensions[get_column_letter(index)].width = COLUMN_WIDTH

            amount_column = columns.index("amount") + 1
            for record in records:
                row = []
                for column in columns:
                    value = _value(record, column)
                    if column == "amount" and value is not None:
                        value = float(to_money(value))
                    row.append(value)
                worksheet.append(row)
                worksheet.cell(row=worksheet.max_row, column=amount_column).number_format = AMOUNT_FORMAT

            buffer = BytesIO()
            workbook.save(buffer)
        except Exception as e:
            logger.exception("Excel export failed")
            raise RenderError("Failed to generate Excel report", details=str(e)) from e

        logger.info(f"Rendered Excel report with {len(records)} rows")
        return buffer.getvalue()

    def to_pdf(self, records: Sequence[Any], generated_at: datetime = None) -> bytes:
        """
        Render records as a paginated PDF document, one record per line.

        Args:
            records: Non-empty sequence of report records
            generated_at: Timestamp printed under the title

        Returns:
            PDF bytes
        """
        records = self._require_records(records)
        generated_at = generated_at or datetime.now()
        lines = [format_record_line(record) for record in records]

        # title and subtitle take the first three line steps of page one
        pages = paginate_lines(lines, start_y=TOP_Y - 3 * LINE_STEP)

        try:
            buffer = BytesIO()
            pdf = canvas.Canvas(buffer, pagesize=A4)
            pdf.setTitle(self.title)

            pdf.setFont(*TITLE_FONT)
            pdf.drawString(MARGIN_X, TOP_Y, self.title)
            pdf.setFont(*BODY_FONT)
            pdf.drawString(MARGIN_X, TOP_Y - LINE_STEP, f"Generated on {generated_at:%Y-%m-%d %H:%M}")

            for number, page in enumerate(pages):
                if number:
                    pdf.showPage()
                    pdf.setFont(*BODY_FONT)
                for y, line in page:
                    pdf.drawString(MARGIN_X, y, line)

            pdf.save()
        except Exception as e:
            logger.exception("PDF export failed")
            raise RenderError("Failed to generate PDF report", details=str(e)) from e

        logger.info(f"Rendered PDF report with {len(records)} rows on {len(pages)} page(s)")
        return buffer.getvalue()

    def to_html_table(self, records: Sequence[Any]) -> str:
        """Render records as an HTML table for email bodies."""
        records = self._require_records(records)
        columns = self.columns_for(records)

        header = "".join(
            f'<th style="background-color:#3498db;color:#fff;text-align:left;padding:8px;">'
            f"{html.escape(column.capitalize())}</th>"
            for column in columns
        )
        body = []
        for record in records:
            cells = []
            for column in columns:
                value = _value(record, column)
                text = f"${format_amount(value)}" if column == "amount" else ("" if value is None else str(value))
                cells.append(f'<td style="padding:6px;border-bottom:1px solid #e0e0e0;">{html.escape(text)}</td>')
            body.append(f"<tr>{''.join(cells)}</tr>")

        return (
            '<table style="width:100%;border-collapse:collapse;font-family:Arial, sans-serif;">'
            f"<thead><tr>{header}</tr></thead>"
            f"<tbody>{''.join(body)}</tbody>"
            "</table>"
        )

    @staticmethod
    def pdf_filename(on: date = None) -> str:
        on = on or date.today()
        return f"reportify_report_{on.isoformat()}.pdf"
