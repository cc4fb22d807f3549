"""
Spreadsheet export of a user's expenses:
- "Expense Details": one row per expense with a readable split summary
- "Category Summary": total per category
"""
import csv
import logging
from decimal import Decimal
from io import BytesIO, StringIO
from typing import Dict, Iterable, List, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from exceptions import ExportError

logger = logging.getLogger(__name__)

DETAIL_HEADERS = ["Amount", "Category", "Description", "SplitWith"]
SUMMARY_HEADERS = ["Category", "TotalSpent"]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def split_summary(expense) -> str:
    """e.g. "Bob (Unpaid), Alice (Paid)" """
    return ", ".join(
        f"{d.name} ({'Paid' if d.has_paid else 'Unpaid'})"
        for d in expense.split_details
    )


def build_report_rows(expenses: Iterable) -> Tuple[List[list], List[list]]:
    detail_rows = []
    category_totals: Dict[str, Decimal] = {}
    for e in expenses:
        amount = Decimal(e.amount)
        detail_rows.append([amount, e.category, e.description, split_summary(e)])
        category_totals[e.category] = category_totals.get(e.category, Decimal(0)) + amount
    category_rows = [[category, total] for category, total in category_totals.items()]
    return detail_rows, category_rows


def _write_sheet(ws, headers, rows, money_col):
    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    ws.freeze_panes = "A2"

    widths = [len(h) for h in headers]
    for row in rows:
        # openpyxl writes Decimal cells as numbers
        ws.append(row)
        widths = [max(w, len(str(v or ""))) for w, v in zip(widths, row)]
        ws.cell(ws.max_row, money_col).number_format = "0.00"

    for col, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(col)].width = min(width + 2, 60)


def render_workbook(detail_rows: List[list], category_rows: List[list]) -> bytes:
    try:
        wb = Workbook()
        ws = wb.active
        ws.title = "Expense Details"
        _write_sheet(ws, DETAIL_HEADERS, detail_rows, money_col=1)
        _write_sheet(wb.create_sheet("Category Summary"), SUMMARY_HEADERS, category_rows, money_col=2)

        buffer = BytesIO()
        wb.save(buffer)
    except Exception as e:
        logger.exception("Failed to render expense workbook")
        raise ExportError() from e
    return buffer.getvalue()


def render_csv(detail_rows: List[list], category_rows: List[list]) -> str:
    """Both tables in one CSV, separated by a blank row."""
    try:
        csv_data = StringIO()
        writer = csv.writer(csv_data)
        writer.writerow(DETAIL_HEADERS)
        writer.writerows(detail_rows)
        writer.writerow([])
        writer.writerow(SUMMARY_HEADERS)
        writer.writerows(category_rows)
    except csv.Error as e:
        logger.exception("Failed to render expense CSV")
        raise ExportError() from e
    return csv_data.getvalue()
