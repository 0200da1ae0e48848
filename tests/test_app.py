"""Tests for the app module."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

import storage
from models import AutoCorrectNotice, WeekdayMismatch
from screens import ConfirmScreen, DateMismatchScreen, EditFieldScreen


@pytest.fixture
def app(clean_db):
    """A TimesheetApp that is never run, with notify and push_screen mocked."""
    from app import TimesheetApp

    with patch.object(TimesheetApp, "run"):
        instance = TimesheetApp()
        instance.notify = MagicMock()
        instance.push_screen = MagicMock()
        yield instance


def _fill(app, *edits):
    for row_id, field, value in edits:
        app._on_field_edited(row_id, field, value)


class TestAppInit:
    """Tests for loading state at start-up."""

    def test_starts_empty(self, app):
        assert app.employee_name == ""
        assert len(app.rows) == 14
        assert all(row.date == "" for row in app.rows)
        assert app.text_entry_mode is False

    def test_restores_snapshot(self, clean_db, worked_rows):
        from app import TimesheetApp
        from engine import build_timesheet

        storage.save_snapshot(build_timesheet("Pat", worked_rows))
        with patch.object(TimesheetApp, "run"):
            app = TimesheetApp()

        assert app.employee_name == "Pat"
        assert app.rows == worked_rows

    def test_corrupt_cache_starts_empty(self, clean_db, empty_rows):
        from app import TimesheetApp

        conn = storage.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO snapshots (key, value, updated_at) VALUES (?, ?, ?)",
            (storage.STORAGE_KEY, '{"rows": [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0]}', "2025-03-10T12:00:00"),
        )
        conn.commit()
        conn.close()

        with patch.object(TimesheetApp, "run"):
            app = TimesheetApp()

        assert app.rows == empty_rows

    def test_restores_text_mode(self, clean_db, sample_config):
        from app import TimesheetApp

        storage.save_config(sample_config)
        with patch.object(TimesheetApp, "run"):
            app = TimesheetApp()

        assert app.text_entry_mode is True
        assert app.config.business_name == "Test Diner"


class TestEditing:
    """Tests for edits committed through the app."""

    def test_date_cascades_and_persists(self, app):
        app.employee_name = "Pat"
        _fill(app, (0, "date", "3/10/2025"))

        assert app.rows[13].date == "03/23/2025"
        assert app.timesheet().pay_period_ending == "03/23/2025"
        assert storage.load_snapshot().rows == app.rows

    def test_cancelled_edit_ignored(self, app):
        _fill(app, (0, "date", "3/10/2025"))
        app._on_field_edited(0, "date", None)
        assert app.rows[0].date == "03/10/2025"

    def test_hours_calculated(self, app):
        _fill(app, (0, "date", "3/10/2025"), (0, "in1", "9:00 AM"), (0, "out1", "5:30 PM"))
        assert app.rows[0].hours == "8.50"
        assert app.rows[0].ot_hours == "0.50"

    def test_money_normalised(self, app):
        _fill(app, (0, "sales", "12.5"), (0, "tips", "$3"))
        assert app.rows[0].sales == "$12.50"
        assert app.rows[0].tips == "$3.00"

    def test_money_applied_once(self, app):
        """A sales edit goes through the engine once, already normalised."""
        import app as app_module

        with patch.object(app_module, "apply_edit", wraps=app_module.apply_edit) as spy:
            _fill(app, (0, "sales", "12.5"))

        spy.assert_called_once()
        assert spy.call_args[0][3] == "$12.50"
        assert app.rows[0].sales == "$12.50"

    def test_money_cleared(self, app):
        _fill(app, (0, "sales", "12.5"), (0, "sales", ""))
        assert app.rows[0].sales == ""

    def test_invalid_money_reported(self, app):
        _fill(app, (0, "sales", "12.5"), (0, "sales", "12x"))

        assert app.rows[0].sales == "$12.50"
        message = app.notify.call_args[0][0]
        assert "Sales" in message
        assert app.notify.call_args[1]["severity"] == "error"

    def test_mismatch_opens_dialog(self, app):
        _fill(app, (0, "date", "3/10/2025"), (2, "date", "3/14/2025"))

        assert isinstance(app.validation_error, WeekdayMismatch)
        assert app.validation_error.row_id == 2
        assert app.rows[2].date == "03/12/2025"
        screen = app.push_screen.call_args[0][0]
        assert isinstance(screen, DateMismatchScreen)
        assert screen.weekday_name == "Wednesday"

    def test_use_previous_weekday(self, app):
        _fill(app, (2, "date", "3/21/2025"))
        app._on_mismatch_closed(2, True)

        assert app.validation_error is None
        assert app.rows[2].date == "03/19/2025"
        assert app.rows[0].date == "03/17/2025"

    def test_dismiss_mismatch(self, app):
        _fill(app, (2, "date", "3/21/2025"))
        app._on_mismatch_closed(2, False)

        assert app.validation_error is None
        assert app.rows[2].date == ""

    def test_auto_correct_in_text_mode(self, app):
        app.text_entry_mode = True
        _fill(app, (0, "date", "3/11/2025"))

        assert app.rows[0].date == "03/10/2025"
        assert isinstance(app.auto_correct_notice, AutoCorrectNotice)
        assert app.notify.call_args[1]["title"] == "Auto-Corrected!"

    def test_accepted_date_clears_row_messages(self, app):
        app.text_entry_mode = True
        _fill(app, (0, "date", "3/11/2025"), (0, "date", "3/17/2025"))
        assert app.auto_correct_notice is None

    def test_other_row_keeps_notice(self, app):
        app.text_entry_mode = True
        _fill(app, (0, "date", "3/11/2025"), (0, "in1", "9:00 AM"))
        assert app.auto_correct_notice.row_id == 0


class TestEditCell:
    """Tests for opening the edit dialog."""

    def test_calculated_column(self, app):
        with patch.object(type(app), "_selected_cell", return_value=(0, None)):
            app.action_edit_cell()

        app.push_screen.assert_not_called()
        assert "calculated" in app.notify.call_args[0][0]

    def test_name_required_for_date(self, app):
        with patch.object(type(app), "_selected_cell", return_value=(0, "date")):
            app.action_edit_cell()

        app.push_screen.assert_not_called()
        assert app.notify.call_args[1]["title"] == "Name Required!"

    def test_date_required_for_times(self, app):
        app.employee_name = "Pat"
        with patch.object(type(app), "_selected_cell", return_value=(0, "in1")):
            app.action_edit_cell()

        app.push_screen.assert_not_called()

    def test_opens_editor(self, app):
        app.employee_name = "Pat"
        with patch.object(type(app), "_selected_cell", return_value=(4, "date")):
            app.action_edit_cell()

        screen = app.push_screen.call_args[0][0]
        assert isinstance(screen, EditFieldScreen)
        assert screen.entry.id == 4
        assert screen.field == "date"


class TestCommands:
    """Tests for key bindings that do not edit cells."""

    def test_name_edit(self, app):
        app._on_name_edited("Pat")
        assert app.employee_name == "Pat"
        assert storage.load_snapshot().employee_name == "Pat"

    def test_name_edit_cancelled(self, app):
        app.employee_name = "Pat"
        app._on_name_edited(None)
        assert app.employee_name == "Pat"

    def test_toggle_text_mode_persists(self, app):
        app.action_toggle_text_mode()
        assert app.text_entry_mode is True
        assert storage.get_config().text_entry_mode is True

        app.action_toggle_text_mode()
        assert storage.get_config().text_entry_mode is False

    def test_save(self, app):
        app.employee_name = "Pat"
        app.action_save()
        assert storage.load_snapshot().employee_name == "Pat"
        app.notify.assert_called_once_with("Saved!")

    def test_period_info_without_dates(self, app):
        app.action_period_info()
        assert app.notify.call_args[0][0] == "Enter a date in the grid first."

    def test_period_info(self, app):
        _fill(app, (0, "date", "3/10/2025"))
        app.action_period_info()
        assert "03/23/2025" in app.notify.call_args[0][0]

    def test_reset_asks_first(self, app):
        app.action_reset()
        assert isinstance(app.push_screen.call_args[0][0], ConfirmScreen)

    def test_reset_confirmed(self, app, empty_rows):
        app.employee_name = "Pat"
        _fill(app, (0, "date", "3/10/2025"))
        app._on_reset_confirmed(True)

        assert app.employee_name == ""
        assert app.rows == empty_rows
        assert storage.load_snapshot().rows == empty_rows

    def test_reset_declined(self, app):
        _fill(app, (0, "date", "3/10/2025"))
        app._on_reset_confirmed(False)
        assert app.rows[0].date == "03/10/2025"


class TestErrorTypes:
    """The app distinguishes the two rejection kinds."""

    def test_financial_error_is_not_a_date_error(self, app):
        _fill(app, (0, "tips", "abc"))
        assert app.validation_error is None
        assert app.rows[0].tips == ""
        app.push_screen.assert_not_called()
