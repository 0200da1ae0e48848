"""Tests for the screens module."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from models import ReviewResult, TimeEntry, Weekday, WeekdayMismatch
from screens import (
    ConfirmScreen,
    DateMismatchScreen,
    EditFieldScreen,
    NameScreen,
    ReviewScreen,
)
from utils import TIME_OPTIONS, parse_date


class TestConfirmScreen:
    """Tests for the ConfirmScreen."""

    def test_init_with_message(self):
        """Test ConfirmScreen initialisation with message."""
        screen = ConfirmScreen("Are you sure?")
        assert screen.message == "Are you sure?"
        assert screen.title_text == "Wait a sec!"

    def test_bindings_defined(self):
        screen = ConfirmScreen("Clear everything?")
        binding_keys = [getattr(b, "key", None) for b in screen.BINDINGS]

        assert "escape" in binding_keys
        assert "y" in binding_keys
        assert "n" in binding_keys


class TestNameScreen:
    """Tests for the NameScreen."""

    def test_init(self):
        screen = NameScreen("Pat")
        assert screen.employee_name == "Pat"


class TestEditFieldScreen:
    """Tests for the EditFieldScreen."""

    def test_dropdown_mode(self):
        screen = EditFieldScreen(TimeEntry(id=0), "in1", text_entry_mode=False)
        assert screen.uses_dropdown

    def test_text_mode(self):
        screen = EditFieldScreen(TimeEntry(id=0), "in1", text_entry_mode=True)
        assert not screen.uses_dropdown

    def test_money_always_typed(self):
        """Sales and tips never use a dropdown."""
        screen = EditFieldScreen(TimeEntry(id=0), "sales", text_entry_mode=False)
        assert not screen.uses_dropdown

    def test_in1_offers_all_times(self):
        screen = EditFieldScreen(TimeEntry(id=0), "in1", text_entry_mode=False)
        assert screen.dropdown_options() == TIME_OPTIONS

    def test_out1_after_in1(self):
        entry = TimeEntry(id=0, date="03/10/2025", in1="3:45 PM")
        screen = EditFieldScreen(entry, "out1", text_entry_mode=False)
        assert screen.dropdown_options() == ["4:00 PM", "4:15 PM", "4:30 PM"]

    def test_out2_after_in2(self):
        entry = TimeEntry(id=0, date="03/10/2025", in1="9:00 AM", out1="1:00 PM", in2="4:15 PM")
        screen = EditFieldScreen(entry, "out2", text_entry_mode=False)
        assert screen.dropdown_options() == ["4:30 PM"]

    def test_date_options_match_row_weekday(self):
        screen = EditFieldScreen(TimeEntry(id=3), "date", text_entry_mode=False, today=date(2025, 3, 12))
        options = screen.dropdown_options()
        assert options
        for value in options:
            assert Weekday.of(parse_date(value)) == Weekday.THURSDAY

    def test_default_today(self):
        screen = EditFieldScreen(TimeEntry(id=0), "date", text_entry_mode=True)
        assert screen.today == date.today()


class TestDateMismatchScreen:
    """Tests for the DateMismatchScreen."""

    def test_init(self):
        error = WeekdayMismatch(row_id=2, message="3/14/2025 is a Friday, but this row is for Wed.",
                                rejected_value="3/14/2025")
        screen = DateMismatchScreen(error, "Wednesday")
        assert screen.error == error
        assert screen.weekday_name == "Wednesday"

    def test_bindings_defined(self):
        error = WeekdayMismatch(row_id=0, message="", rejected_value="")
        screen = DateMismatchScreen(error, "Monday")
        binding_keys = [getattr(b, "key", None) for b in screen.BINDINGS]

        assert "escape" in binding_keys
        assert "p" in binding_keys


class TestReviewScreen:
    """Tests for the ReviewScreen."""

    def test_init(self):
        result = ReviewResult(manager_comment="Swell, sugar.", detected_issues=["No name"],
                              suggested_total_hours=Decimal("17"))
        screen = ReviewScreen(result)
        assert screen.result == result
