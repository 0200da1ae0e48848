"""Modal screens for the timesheet application."""

from __future__ import annotations

from datetime import date

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, Select
from textual.screen import ModalScreen

from models import MONEY_FIELDS, ReviewResult, TimeEntry, WeekdayMismatch
from utils import TIME_OPTIONS, date_options, mask_date_input, options_after

FIELD_LABELS = {
    "date": "Date",
    "in1": "In - 1",
    "out1": "Out - 1",
    "in2": "In - 2",
    "out2": "Out - 2",
    "sales": "Sales",
    "tips": "Tips",
}

# Field whose value bounds the dropdown choices of the key
PREVIOUS_FIELD = {
    "out1": "in1",
    "in2": "out1",
    "out2": "in2",
}

DIALOG_CSS = """
    .dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    .dialog-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .dialog-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    .dialog-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
"""


class ConfirmScreen(ModalScreen[bool]):
    """Simple confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-title {
        color: $error;
        text-style: bold;
        margin-bottom: 1;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    #confirm-buttons Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, message: str, title: str = "Wait a sec!", confirm_label: str = "Yes (Y)"):
        super().__init__()
        self.message = message
        self.title_text = title
        self.confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.title_text, id="confirm-title")
            yield Label(self.message)
            with Horizontal(id="confirm-buttons"):
                yield Button("Cancel (N)", variant="default", id="no")
                yield Button(self.confirm_label, variant="error", id="yes")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class NameScreen(ModalScreen[str | None]):
    """Modal screen for entering the employee name."""

    CSS = "NameScreen { align: center middle; }" + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, name: str):
        super().__init__()
        self.employee_name = name

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Name", classes="dialog-title")
            yield Input(value=self.employee_name, placeholder="Employee name", id="name")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#name", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save":
            self.dismiss(self.query_one("#name", Input).value.strip())
        else:
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class EditFieldScreen(ModalScreen[str | None]):
    """Edit one cell of the grid.

    Text entry mode uses a free-text Input. Dropdown mode offers the valid
    dates for the row's weekday, or times after the previous field's value.
    Sales and tips are always typed.
    """

    CSS = "EditFieldScreen { align: center middle; }" + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, entry: TimeEntry, field: str, text_entry_mode: bool, today: date | None = None):
        super().__init__()
        self.entry = entry
        self.field = field
        self.text_entry_mode = text_entry_mode
        self.today = today or date.today()
        self._previous_text = getattr(entry, field)

    @property
    def uses_dropdown(self) -> bool:
        return not self.text_entry_mode and self.field not in MONEY_FIELDS

    def dropdown_options(self) -> list[str]:
        if self.field == "date":
            return date_options(self.entry.weekday, self.today)
        previous = PREVIOUS_FIELD.get(self.field)
        if previous is None:
            return list(TIME_OPTIONS)
        return options_after(TIME_OPTIONS, getattr(self.entry, previous))

    def compose(self) -> ComposeResult:
        current = getattr(self.entry, self.field)
        with Vertical(classes="dialog"):
            yield Label(
                f"{FIELD_LABELS[self.field]}: row {self.entry.id + 1} ({self.entry.day})",
                classes="dialog-title",
            )
            if self.uses_dropdown:
                options = self.dropdown_options()
                if current and current not in options:
                    options = [current] + options
                yield Select(
                    [("Delete", "")] + [(o, o) for o in options],
                    value=current,
                    allow_blank=False,
                    id="value",
                )
            else:
                yield Input(
                    value=current,
                    placeholder=self._placeholder(),
                    max_length=10 if self.field == "date" else 0,
                    id="value",
                )
            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def _placeholder(self) -> str:
        if self.field == "date":
            return "MM/DD/YYYY"
        if self.field in MONEY_FIELDS:
            return "$0.00"
        return "9:00 AM"

    def on_mount(self) -> None:
        self.query_one("#value").focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        """Mask typed dates into MM/DD/YYYY."""
        if self.field != "date":
            return
        masked = mask_date_input(self._previous_text, event.value)
        self._previous_text = masked
        if masked != event.value:
            event.input.value = masked
            event.input.cursor_position = len(masked)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save":
            self.dismiss(self._current_value())
        else:
            self.dismiss(None)

    def _current_value(self) -> str:
        if self.uses_dropdown:
            return str(self.query_one("#value", Select).value)
        return self.query_one("#value", Input).value.strip()

    def action_cancel(self) -> None:
        self.dismiss(None)


class DateMismatchScreen(ModalScreen[bool]):
    """Explains a rejected date and offers the nearest earlier matching day."""

    CSS = "DateMismatchScreen { align: center middle; }" + DIALOG_CSS + """
    .dialog {
        border: thick $error;
    }

    .dialog-title {
        color: $error;
    }
    """

    BINDINGS = [
        Binding("escape", "dismiss_error", "OK"),
        Binding("p", "use_previous", "Previous"),
    ]

    def __init__(self, error: WeekdayMismatch, weekday_name: str):
        super().__init__()
        self.error = error
        self.weekday_name = weekday_name

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("DATE MISMATCH!", classes="dialog-title")
            yield Label(self.error.message)
            with Horizontal(classes="dialog-buttons"):
                yield Button(f"Previous {self.weekday_name} (P)", variant="primary", id="previous")
                yield Button("OK, I'll fix it", variant="error", id="dismiss")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "previous")

    def action_use_previous(self) -> None:
        self.dismiss(True)

    def action_dismiss_error(self) -> None:
        self.dismiss(False)


class ReviewScreen(ModalScreen[None]):
    """Shows the manager's advisory review."""

    CSS = "ReviewScreen { align: center middle; }" + DIALOG_CSS + """
    .dialog {
        width: 70;
    }

    .issue {
        color: $warning;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
    ]

    def __init__(self, result: ReviewResult):
        super().__init__()
        self.result = result

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Manager's Review", classes="dialog-title")
            yield Label(self.result.manager_comment or "No comment.")
            for issue in self.result.detected_issues:
                yield Label(f"• {issue}", classes="issue")
            if self.result.suggested_total_hours is not None:
                yield Label(f"Suggested total hours: {self.result.suggested_total_hours}")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Close", variant="primary", id="close")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)
