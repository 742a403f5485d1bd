"""CSV, spreadsheet and PDF reports of registered label records."""

from __future__ import annotations

import csv
from datetime import date
import logging
from typing import IO, Any, BinaryIO, Iterable, List, Optional, Sequence, Tuple, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .records import LabelRecord

logger = logging.getLogger(__name__)

HEADER_COLOR = "000080"
ALT_ROW_COLOR = "F0F0F0"

# (heading, column width)
COLUMNS: Tuple[Tuple[str, int], ...] = (
    ("ID", 8),
    ("Date/Time", 20),
    ("Part Code", 15),
    ("Batch", 15),
    ("Total Pieces", 12),
    ("Pieces per Package", 18),
    ("Packages per Pallet", 18),
    ("Extra Pieces", 12),
    ("Labels Needed", 18),
    ("Labels Used", 15),
    ("Notes", 30),
)

EXPORT_KINDS = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pdf": "application/pdf",
}


def headings() -> List[str]:
    return [heading for heading, _ in COLUMNS]


def record_row(record: LabelRecord) -> List[Any]:
    return [
        record.id,
        record.date_created.replace("\n", " "),
        record.part_code,
        record.batch_number,
        record.total_pieces,
        record.pieces_per_package,
        record.packages_per_pallet,
        record.extra_pieces,
        record.total_labels,
        record.used_labels,
        record.notes,
    ]


def export_filename(kind: str, today: date) -> str:
    if kind not in EXPORT_KINDS:
        valid = ", ".join(sorted(EXPORT_KINDS))
        raise ValueError(f"Unsupported export kind '{kind}'. Valid values: {valid}.")
    return f"Label_Report_{today.strftime('%d-%m-%Y')}.{kind}"


def export_csv(records: Iterable[LabelRecord], stream: IO[str]) -> int:
    """Write ``records`` as CSV to a text stream and return the row count."""

    writer = csv.writer(stream)
    writer.writerow(headings())
    count = 0
    for record in records:
        writer.writerow(record_row(record))
        count += 1
    logger.info("Exported %s records to CSV", count)
    return count


def _style_header(worksheet, columns: Sequence[Tuple[str, int]]) -> None:
    thin = Side(style="thin")
    for col_idx, (heading, width) in enumerate(columns, 1):
        cell = worksheet.cell(row=1, column=col_idx, value=heading)
        cell.font = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid")
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)
        worksheet.column_dimensions[get_column_letter(col_idx)].width = width


def export_xlsx(records: Iterable[LabelRecord], target: Union[str, BinaryIO]) -> int:
    """Write ``records`` to a "Labels" worksheet at ``target`` (path or binary stream)."""

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Labels"
    _style_header(worksheet, COLUMNS)

    count = 0
    for row_idx, record in enumerate(records, 2):
        for col_idx, value in enumerate(record_row(record), 1):
            cell = worksheet.cell(row=row_idx, column=col_idx, value=value)
            if (row_idx - 2) % 2 == 1:
                cell.fill = PatternFill(
                    start_color=ALT_ROW_COLOR, end_color=ALT_ROW_COLOR, fill_type="solid"
                )
        count += 1

    worksheet.freeze_panes = "A2"
    worksheet.auto_filter.ref = f"A1:{get_column_letter(len(COLUMNS))}1"
    workbook.save(target)
    logger.info("Exported %s records to XLSX", count)
    return count


def _pdf_table(records: Iterable[LabelRecord]) -> Tuple[Table, int]:
    data: List[List[Any]] = [headings()]
    for record in records:
        data.append([str(value) for value in record_row(record)])
    widths = [width * 1.5 * mm for _, width in COLUMNS]
    table = Table(data, colWidths=widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(f"#{HEADER_COLOR}")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 7),
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor(f"#{ALT_ROW_COLOR}")]),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    return table, len(data) - 1


def export_pdf(
    records: Iterable[LabelRecord],
    target: Union[str, BinaryIO],
    today: Optional[date] = None,
) -> int:
    """Write ``records`` as a landscape PDF table to ``target`` (path or binary stream)."""

    today = today or date.today()
    doc = SimpleDocTemplate(
        target,
        pagesize=landscape(A4),
        leftMargin=10 * mm,
        rightMargin=10 * mm,
        topMargin=10 * mm,
        bottomMargin=10 * mm,
        title="Label Report",
        pageCompression=0,
    )
    styles = getSampleStyleSheet()
    table, count = _pdf_table(records)
    doc.build(
        [
            Paragraph(f"Label Report - generated {today.strftime('%d/%m/%Y')}", styles["Title"]),
            Spacer(1, 4 * mm),
            table,
        ]
    )
    logger.info("Exported %s records to PDF", count)
    return count
