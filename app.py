#!/usr/bin/env python3
"""Timesheet TUI application."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.logging import TextualHandler
from textual.widgets import Footer, DataTable
from textual.coordinate import Coordinate
from rich.text import Text

import storage
from engine import apply_edit, build_timesheet, compute_totals, locked_fields, recover_date, reset_all
from models import (
    MONEY_FIELDS,
    AutoCorrectNotice,
    EditResult,
    InvalidFinancialInput,
    TimeEntry,
    TimesheetData,
    WeekdayMismatch,
)
from review import ReviewError, review_timesheet
from screens import ConfirmScreen, DateMismatchScreen, EditFieldScreen, NameScreen, ReviewScreen
from utils import format_currency_input, is_valid_financial
from widgets import TimesheetHeader, TotalsFooter

logger = logging.getLogger(__name__)

# (label, width, editable field or None for derived columns)
COLUMNS = [
    ("#", 3, None),
    ("Day", 6, None),
    ("Date", 11, "date"),
    ("In - 1", 9, "in1"),
    ("Out - 1", 9, "out1"),
    ("Break", 6, None),
    ("In - 2", 9, "in2"),
    ("Out - 2", 9, "out2"),
    ("Hours", 6, None),
    ("O.T.", 6, None),
    ("Sales", 10, "sales"),
    ("Tips", 10, "tips"),
]

RESET_MESSAGE = "Are you sure you want to clear the form? This will delete all your hard work."


def row_style(row_id: int, text_entry_mode: bool) -> str:
    """Alternating row band; purple while in text entry mode."""
    if text_entry_mode:
        return "on #3b2752" if row_id % 2 else "on #2a1d3b"
    return "on #4a2c12" if row_id % 2 else ""


class TimesheetApp(App):
    """Main timesheet application."""

    CSS = """
    Screen {
        background: $surface;
    }

    #timesheet-header {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
    }

    #grid {
        height: auto;
        margin: 1 2;
    }

    #totals-footer {
        height: auto;
        padding: 0 2;
        color: $text;
    }

    .hidden {
        display: none;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("n", "edit_name", "Name"),
        Binding("e", "edit_cell", "Edit"),
        Binding("t", "toggle_text_mode", "Text/Dropdown"),
        Binding("s", "save", "Save"),
        Binding("p", "screenshot", "Image"),
        Binding("r", "review", "Review"),
        Binding("P", "period_info", "Period", show=False),
        Binding("ctrl+r", "reset", "Clear Form"),
    ]

    def __init__(self):
        super().__init__()
        storage.init_db()
        self.config = storage.get_config()

        data = storage.load_snapshot()
        self.employee_name = data.employee_name
        self.rows: tuple[TimeEntry, ...] = data.rows
        self.text_entry_mode = self.config.text_entry_mode

        # Pending messages attached to a row
        self.validation_error: WeekdayMismatch | None = None
        self.auto_correct_notice: AutoCorrectNotice | None = None

    def compose(self) -> ComposeResult:
        yield TimesheetHeader(self.config.business_name, id="timesheet-header")
        yield Container(DataTable(id="grid"), id="grid-container")
        yield TotalsFooter(id="totals-footer")
        yield Footer(classes="no-screenshot")

    def on_mount(self):
        table = self.query_one("#grid", DataTable)
        table.cursor_type = "cell"
        table.zebra_stripes = False
        for label, width, _field in COLUMNS:
            table.add_column(label, width=width)
        self._refresh_display()
        table.move_cursor(row=0, column=2)
        table.focus()

    # --- State ---

    def timesheet(self) -> TimesheetData:
        return build_timesheet(self.employee_name, self.rows)

    def _persist(self) -> None:
        storage.save_snapshot(self.timesheet())

    def _apply_edit(self, row_id: int, field: str, value: str) -> EditResult:
        """Run an edit through the engine and keep the accepted snapshot."""
        if field in MONEY_FIELDS and value.strip() and is_valid_financial(value):
            # Normalise like leaving the field: "12.5" -> "$12.50"
            value = format_currency_input(value)
        result = apply_edit(
            self.rows,
            row_id,
            field,
            value,
            text_entry_mode=self.text_entry_mode,
            overtime_threshold=self.config.overtime_threshold,
        )
        if not result.accepted:
            if isinstance(result.error, WeekdayMismatch):
                self.validation_error = result.error
            return result

        if field == "date":
            self._clear_row_messages(row_id)
        if result.notice:
            self.auto_correct_notice = result.notice
        self.rows = result.rows
        self._persist()
        return result

    def _clear_row_messages(self, row_id: int) -> None:
        if self.validation_error and self.validation_error.row_id == row_id:
            self.validation_error = None
        if self.auto_correct_notice and self.auto_correct_notice.row_id == row_id:
            self.auto_correct_notice = None

    def _reset(self) -> None:
        self.rows = reset_all()
        self.employee_name = ""
        self.validation_error = None
        self.auto_correct_notice = None
        self._persist()

    # --- Display ---

    def _refresh_display(self):
        header = self.query_one("#timesheet-header", TimesheetHeader)
        data = self.timesheet()
        header.update_display(data.employee_name, data.pay_period_ending, self.text_entry_mode)

        footer = self.query_one("#totals-footer", TotalsFooter)
        footer.update_display(compute_totals(self.rows))

        table = self.query_one("#grid", DataTable)
        cursor = table.cursor_coordinate
        table.clear()
        for entry in self.rows:
            style = row_style(entry.id, self.text_entry_mode)
            date_style = style
            if self.auto_correct_notice and self.auto_correct_notice.row_id == entry.id:
                date_style = f"bold blue {style}".strip()
            table.add_row(
                Text(str(entry.id + 1), style=f"bold {style}".strip()),
                Text(entry.day, style=f"bold {style}".strip()),
                Text(entry.date, style=date_style),
                Text(entry.in1, style=style),
                Text(entry.out1, style=style),
                Text(entry.break_time, style=f"dim {style}".strip()),
                Text(entry.in2, style=style),
                Text(entry.out2, style=style),
                Text(entry.hours, style=f"bold yellow {style}".strip()),
                Text(entry.ot_hours, style=f"bold yellow {style}".strip()),
                Text(entry.sales, style=f"green {style}".strip()),
                Text(entry.tips, style=f"green {style}".strip()),
                key=str(entry.id),
            )
        table.move_cursor(row=cursor.row, column=cursor.column)

    def _after_change(self) -> None:
        if self.is_running:
            self._refresh_display()

    # --- Editing ---

    def _selected_cell(self) -> tuple[int, str | None]:
        table = self.query_one("#grid", DataTable)
        coordinate: Coordinate = table.cursor_coordinate
        return coordinate.row, COLUMNS[coordinate.column][2]

    def on_data_table_cell_selected(self, event: DataTable.CellSelected) -> None:
        self.action_edit_cell()

    def action_edit_cell(self) -> None:
        row_id, field = self._selected_cell()
        if field is None:
            self.notify("This column is calculated automatically", severity="warning")
            return

        entry = self.rows[row_id]
        reason = locked_fields(entry, self.employee_name).get(field)
        if reason:
            title = "Name Required!" if field == "date" else "Hold on!"
            self.notify(reason, title=title, severity="warning")
            return

        self.push_screen(
            EditFieldScreen(entry, field, self.text_entry_mode),
            lambda value: self._on_field_edited(row_id, field, value),
        )

    def _on_field_edited(self, row_id: int, field: str, value: str | None) -> None:
        if value is None:
            return
        result = self._apply_edit(row_id, field, value)
        self._report(result, row_id)
        self._after_change()

    def _report(self, result: EditResult, row_id: int) -> None:
        """Show the outcome of an edit to the user."""
        if isinstance(result.error, WeekdayMismatch):
            weekday = self.rows[row_id].weekday.full_name
            self.push_screen(
                DateMismatchScreen(result.error, weekday),
                lambda use_previous: self._on_mismatch_closed(row_id, use_previous),
            )
        elif isinstance(result.error, InvalidFinancialInput):
            self.notify(result.error.message, severity="error")
        elif result.notice:
            self.notify(result.notice.message, title="Auto-Corrected!")

    def _on_mismatch_closed(self, row_id: int, use_previous: bool | None) -> None:
        error = self.validation_error
        self.validation_error = None
        if not use_previous or error is None:
            return
        corrected = recover_date(self.rows[row_id], error.rejected_value)
        if corrected is None:
            return
        result = self._apply_edit(row_id, "date", corrected)
        self._report(result, row_id)
        self._after_change()

    def action_edit_name(self) -> None:
        self.push_screen(NameScreen(self.employee_name), self._on_name_edited)

    def _on_name_edited(self, name: str | None) -> None:
        if name is None:
            return
        self.employee_name = name
        self._persist()
        self._after_change()

    # --- Commands ---

    def action_toggle_text_mode(self) -> None:
        self.text_entry_mode = not self.text_entry_mode
        self.config.text_entry_mode = self.text_entry_mode
        storage.save_config(self.config)
        self.notify("Text Entry Mode" if self.text_entry_mode else "Dropdown Mode")
        self._after_change()

    def action_save(self) -> None:
        self._persist()
        self.notify("Saved!")

    def action_period_info(self) -> None:
        period = self.timesheet().pay_period_ending
        if not any(row.date.strip() for row in self.rows):
            self.notify("Enter a date in the grid first.", title="Period Ending", severity="warning")
        else:
            self.notify(f"Pay period ending {period}", title="Period Ending")

    def action_reset(self) -> None:
        self.push_screen(ConfirmScreen(RESET_MESSAGE, confirm_label="Yes, Clear"), self._on_reset_confirmed)

    def _on_reset_confirmed(self, confirmed: bool | None) -> None:
        if not confirmed:
            return
        self._reset()
        self.notify("Form cleared")
        self._after_change()

    def action_screenshot(self) -> None:
        """Capture the grid to an SVG without the key bar."""
        for widget in self.query(".no-screenshot"):
            widget.add_class("hidden")
        self.call_after_refresh(self._capture_screenshot)

    def _capture_screenshot(self) -> None:
        target = Path(os.environ.get("TIMESHEET_SCREENSHOTS", "."))
        try:
            path = self.save_screenshot(path=str(target))
        except OSError:
            logger.exception("Screenshot failed")
            self.notify("Failed to save the timesheet image.", severity="error")
        else:
            self.notify(f"Image saved to {path}")
        finally:
            for widget in self.query(".no-screenshot"):
                widget.remove_class("hidden")

    def action_review(self) -> None:
        self.notify("Asking the manager to review...")
        self._run_review(self.timesheet())

    @work(thread=True, exclusive=True)
    def _run_review(self, data: TimesheetData) -> None:
        try:
            result = review_timesheet(
                data,
                compute_totals(data.rows),
                self.config.business_name,
                model=self.config.review_model,
            )
        except ReviewError as e:
            self.call_from_thread(self.notify, str(e), title="Review failed", severity="error")
            return
        self.call_from_thread(self.push_screen, ReviewScreen(result))


def main():
    logging.basicConfig(level=logging.INFO, handlers=[TextualHandler()])
    app = TimesheetApp()
    app.run()


if __name__ == "__main__":
    main()
