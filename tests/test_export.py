from datetime import date, datetime
import csv
import io

from openpyxl import load_workbook
import pytest

from label_calc import compute
from label_calc.export import export_csv, export_filename, export_pdf, export_xlsx, headings
from label_calc.records import RecordStore


def build_records():
    store = RecordStore()
    store.add("999-00031", "L001", compute(1025, 50, 10), notes="rush",
              created_at=datetime(2024, 3, 5, 14, 7, 9))
    return store.all()


def test_csv_export_has_report_columns():
    stream = io.StringIO()
    assert export_csv(build_records(), stream) == 1
    rows = list(csv.reader(io.StringIO(stream.getvalue())))
    assert rows[0] == headings()
    row = dict(zip(rows[0], rows[1]))
    assert row["Labels Needed"] == "21"
    assert row["Extra Pieces"] == "25"
    assert row["Date/Time"] == "05/03/2024 14:07:09"
    assert row["Notes"] == "rush"


def test_xlsx_export_writes_labels_sheet():
    buffer = io.BytesIO()
    assert export_xlsx(build_records(), buffer) == 1
    buffer.seek(0)
    sheet = load_workbook(buffer)["Labels"]
    header = [cell.value for cell in sheet[1]]
    assert header == headings()
    values = dict(zip(header, [cell.value for cell in sheet[2]]))
    assert values["Labels Needed"] == 21
    assert values["Extra Pieces"] == 25


def test_export_filename():
    assert export_filename("csv", date(2024, 3, 5)) == "Label_Report_05-03-2024.csv"
    assert export_filename("xlsx", date(2024, 3, 5)) == "Label_Report_05-03-2024.xlsx"
    with pytest.raises(ValueError):
        export_filename("docx", date(2024, 3, 5))


def test_pdf_export_contains_report_table():
    buffer = io.BytesIO()
    assert export_pdf(build_records(), buffer, today=date(2024, 3, 5)) == 1
    data = buffer.getvalue()
    assert data.startswith(b"%PDF")
    assert b"(Labels Needed)" in data
    assert b"(999-00031)" in data
    assert export_filename("pdf", date(2024, 3, 5)) == "Label_Report_05-03-2024.pdf"
