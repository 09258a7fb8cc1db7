"""Export service - CSV and Excel renderings of submission rows"""

import csv
import io
import logging
from datetime import datetime
from typing import Any, Dict, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def _header_label(column: str) -> str:
    return column.replace("_", " ").title().replace("Id", "ID")


def _escape_formula(text: str) -> str:
    # Spreadsheet apps evaluate cells starting with these as formulas
    if text.startswith(FORMULA_PREFIXES):
        return "'" + text
    return text


def format_cell(value: Any) -> Any:
    """Flatten JSON list columns and keep scalars spreadsheet-friendly."""
    if value is None:
        return ""
    if isinstance(value, list):
        parts = []
        for item in value:
            if isinstance(item, dict):
                name = item.get("name", "")
                number = item.get("number")
                parts.append(f"{name} ({number})" if number else str(name))
            else:
                parts.append(str(item))
        return _escape_formula("; ".join(parts))
    if isinstance(value, str):
        return _escape_formula(value)
    return value


class ExportService:
    """Render submission rows as downloadable files"""

    @staticmethod
    def filename(extension: str) -> str:
        return f"submissions_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{extension}"

    @staticmethod
    def to_csv(rows: List[Dict[str, Any]], columns: List[str]) -> str:
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow([_header_label(column) for column in columns])
        for row in rows:
            writer.writerow([format_cell(row.get(column)) for column in columns])

        return output.getvalue()

    @staticmethod
    def to_xlsx(rows: List[Dict[str, Any]], columns: List[str]) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = "Submissions"

        ws.append([_header_label(column) for column in columns])

        # Style headers
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        header_font = Font(bold=True, color="FFFFFF")

        for cell in ws[1]:
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal="center", vertical="center")

        for row in rows:
            ws.append([format_cell(row.get(column)) for column in columns])

        # Auto-adjust column widths
        for column in ws.columns:
            max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
            ws.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

        ws.freeze_panes = "A2"

        buffer = io.BytesIO()
        wb.save(buffer)
        logger.info("Generated submissions workbook with %s rows", len(rows))
        return buffer.getvalue()


# Singleton instance
export_service = ExportService()
