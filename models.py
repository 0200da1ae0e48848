from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import IntEnum


ROW_COUNT = 14


class Weekday(IntEnum):
    """Days of the timesheet cycle, Monday first (matches date.weekday())."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def for_row(cls, row_id: int) -> Weekday:
        return cls(row_id % 7)

    @classmethod
    def of(cls, d: date) -> Weekday:
        return cls(d.weekday())

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def full_name(self) -> str:
        return self.name.capitalize()


_LABELS = {
    Weekday.MONDAY: "Mon.",
    Weekday.TUESDAY: "Tues.",
    Weekday.WEDNESDAY: "Wed.",
    Weekday.THURSDAY: "Thurs.",
    Weekday.FRIDAY: "Fri.",
    Weekday.SATURDAY: "Sat.",
    Weekday.SUNDAY: "Sun.",
}

TIME_FIELDS = ("in1", "out1", "in2", "out2")
MONEY_FIELDS = ("sales", "tips")
EDITABLE_FIELDS = ("date",) + TIME_FIELDS + MONEY_FIELDS


@dataclass(frozen=True)
class TimeEntry:
    id: int
    date: str = ""
    in1: str = ""
    out1: str = ""
    in2: str = ""
    out2: str = ""
    break_time: str = ""
    hours: str = ""
    ot_hours: str = ""
    sales: str = ""
    tips: str = ""

    @property
    def weekday(self) -> Weekday:
        return Weekday.for_row(self.id)

    @property
    def day(self) -> str:
        """Row label, e.g. "Mon."."""
        return self.weekday.label


@dataclass(frozen=True)
class PeriodTotals:
    reg_hours: str = "0.00"
    ot_hours: str = "0.00"
    total_sales: str = "$0.00"
    total_tips: str = "$0.00"


@dataclass(frozen=True)
class TimesheetData:
    employee_name: str = ""
    pay_period_ending: str = ""
    rows: tuple[TimeEntry, ...] = ()


@dataclass(frozen=True)
class WeekdayMismatch:
    row_id: int
    message: str
    rejected_value: str


@dataclass(frozen=True)
class InvalidFinancialInput:
    row_id: int
    message: str
    rejected_value: str


@dataclass(frozen=True)
class AutoCorrectNotice:
    row_id: int
    message: str
    corrected_value: str


@dataclass(frozen=True)
class EditResult:
    """Outcome of a single edit: the new rows plus any error or notice.

    ``accepted`` is False only when the edit was rejected, in which case
    ``rows`` is the unchanged input.
    """

    rows: tuple[TimeEntry, ...]
    error: WeekdayMismatch | InvalidFinancialInput | None = None
    notice: AutoCorrectNotice | None = None
    accepted: bool = True


@dataclass(frozen=True)
class ReviewResult:
    manager_comment: str = ""
    detected_issues: list[str] = field(default_factory=list)
    suggested_total_hours: Decimal | None = None


@dataclass
class Config:
    business_name: str = "Nancy May's 50's Cafe"
    overtime_threshold: Decimal = Decimal("8")
    text_entry_mode: bool = False
    review_model: str = "gemini-2.5-flash"
