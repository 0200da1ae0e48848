"""Custom widgets for the timesheet application."""

from __future__ import annotations

from textual.widgets import Static
from rich.text import Text

from models import PeriodTotals


class TimesheetHeader(Static):
    """Business title, employee name and the derived pay period ending."""

    def __init__(self, business_name: str, **kwargs):
        super().__init__(**kwargs)
        self.business_name = business_name

    def update_display(self, employee_name: str, period_ending: str, text_entry_mode: bool):
        text = Text()
        text.append(f"{self.business_name.upper()}\n", style="bold")
        text.append("TIME SHEET", style="bold")
        mode = "TEXT ENTRY MODE" if text_entry_mode else "DROPDOWN MODE"
        text.append(f"    [{mode}]\n\n", style="bold magenta" if text_entry_mode else "bold blue")

        text.append("Name: ", style="bold")
        text.append(employee_name or "________________", style="" if employee_name else "dim")
        text.append("        Pay Period Ending: ", style="bold")
        # Read-only: always derived from the grid
        text.append(period_ending or "MM/DD/YYYY", style="" if period_ending else "dim")

        self.update(text)


class TotalsFooter(Static):
    """Period totals under the grid."""

    def update_display(self, totals: PeriodTotals):
        text = Text()
        text.append("TOTALS   ", style="bold")
        text.append(f"Hours {totals.reg_hours:>8}   ")
        text.append(f"O.T. {totals.ot_hours:>7}   ", style="dim" if totals.ot_hours == "0.00" else "bold")
        text.append(f"Sales {totals.total_sales:>10}   ")
        text.append(f"Tips {totals.total_tips:>9}")
        self.update(text)
