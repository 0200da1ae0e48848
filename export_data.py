#!/usr/bin/env python3
"""Export the cached timesheet to an Excel workbook."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

import storage
from engine import compute_totals
from models import PeriodTotals, TimesheetData

logger = logging.getLogger(__name__)

HEADERS = ["#", "Day", "Date", "In - 1", "Out - 1", "Break", "In - 2", "Out - 2",
           "Hours", "O.T. Hours", "Sales", "Tips"]


def export_workbook(data: TimesheetData, totals: PeriodTotals, path: Path, title: str = "TIME SHEET") -> Path:
    """Write the timesheet grid, header and totals to an .xlsx file."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Timesheet"

    bold = Font(bold=True)
    ws.append([title])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append(["Name:", data.employee_name, "", "Pay Period Ending:", data.pay_period_ending])
    ws.append([])

    ws.append(HEADERS)
    header_row = ws.max_row
    for cell in ws[header_row]:
        cell.font = bold
        cell.alignment = Alignment(horizontal="center")

    band = PatternFill(start_color="FFEDD5", end_color="FFEDD5", fill_type="solid")
    for entry in data.rows:
        ws.append([
            entry.id + 1, entry.day, entry.date,
            entry.in1, entry.out1, entry.break_time, entry.in2, entry.out2,
            entry.hours, entry.ot_hours, entry.sales, entry.tips,
        ])
        if entry.id % 2:
            for cell in ws[ws.max_row]:
                cell.fill = band

    ws.append(["", "", "", "", "", "", "", "Totals",
               totals.reg_hours, totals.ot_hours, totals.total_sales, totals.total_tips])
    for cell in ws[ws.max_row]:
        cell.font = bold

    for column, width in zip("ABCDEFGHIJKL", (4, 7, 12, 10, 10, 7, 10, 10, 8, 10, 11, 11)):
        ws.column_dimensions[column].width = width

    path = Path(path)
    wb.save(path)
    logger.info("Exported timesheet to %s", path)
    return path


def export_cached(path: Path) -> Path:
    """Export the snapshot currently held in the database."""
    storage.init_db()
    data = storage.load_snapshot()
    config = storage.get_config()
    return export_workbook(data, compute_totals(data.rows), path, title=f"{config.business_name.upper()} TIME SHEET")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("timesheet.xlsx")
    export_cached(target)
    print(f"Exported to {target}")
