import csv
import io

from openpyxl import load_workbook

from fieldreport.services.export_service import export_service, format_cell
from fieldreport.services.submission_query import SubmissionFilters
from fieldreport.services.submission_service import export_columns

ROWS = [
    {
        "id": 7,
        "type": "dealer",
        "area": "Station Road",
        "user_email": "field@example.com",
        "submitted_at": "2026-06-02T10:00:00",
        "dealer_name": "Sharma, Sons & Co",
        "dues_amount": 150.5,
        "competition_newspapers": [{"name": "Daily Star", "number": "5"}, {"name": "Morning Post"}],
    },
]


def test_format_cell():
    assert format_cell(None) == ""
    assert format_cell(["Daily Star", "Morning Post"]) == "Daily Star; Morning Post"
    assert format_cell([{"name": "Daily Star", "number": "5"}, {"name": "Morning Post"}]) == "Daily Star (5); Morning Post"
    assert format_cell(12.5) == 12.5
    assert format_cell(-3) == -3


def test_format_cell_neutralises_formulas():
    assert format_cell("=SUM(A1:A9)") == "'=SUM(A1:A9)"
    assert format_cell("+91 98765 43210") == "'+91 98765 43210"
    assert format_cell("-2+3") == "'-2+3"
    assert format_cell("@cmd") == "'@cmd"
    assert format_cell(["=1+1", "Daily Star"]) == "'=1+1; Daily Star"
    assert format_cell("Sharma = Sons") == "Sharma = Sons"


def test_export_columns_follow_selected_types():
    dealer = export_columns(SubmissionFilters(type="dealer"))
    assert dealer[:5] == ["id", "type", "area", "user_email", "submitted_at"]
    assert "dealer_name" in dealer
    assert "stall_owner" not in dealer

    everything = export_columns(SubmissionFilters())
    assert len(everything) == len(set(everything))
    assert {"person_met", "vendor_name", "stall_owner", "segment"} <= set(everything)


def test_csv_quotes_and_flattens():
    columns = export_columns(SubmissionFilters(type="dealer"))
    content = export_service.to_csv(ROWS, columns)
    rows = list(csv.DictReader(io.StringIO(content)))
    assert rows[0]["Dealer Name"] == "Sharma, Sons & Co"
    assert rows[0]["Competition Newspapers"] == "Daily Star (5); Morning Post"
    assert rows[0]["Outcome"] == ""


def test_xlsx_has_styled_frozen_header():
    columns = export_columns(SubmissionFilters(type="dealer"))
    ws = load_workbook(io.BytesIO(export_service.to_xlsx(ROWS, columns))).active
    assert ws.title == "Submissions"
    assert ws.freeze_panes == "A2"
    assert ws["A1"].value == "ID"
    assert ws["A1"].font.bold
    assert ws["A2"].value == 7


def test_filename_extension():
    name = export_service.filename("xlsx")
    assert name.startswith("submissions_")
    assert name.endswith(".xlsx")
