"""Derivation and validation rules for the 14-row timesheet grid.

Every function here is pure: it takes a snapshot of the rows (a tuple of
frozen TimeEntry objects) and returns a new snapshot, never mutating its
input. The app keeps the current snapshot and replaces it after each edit.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

from models import (
    EDITABLE_FIELDS,
    MONEY_FIELDS,
    ROW_COUNT,
    TIME_FIELDS,
    AutoCorrectNotice,
    EditResult,
    InvalidFinancialInput,
    PeriodTotals,
    TimeEntry,
    TimesheetData,
    Weekday,
    WeekdayMismatch,
)
from utils import (
    format_date,
    format_money,
    is_valid_financial,
    parse_amount,
    parse_clock_time,
    parse_date,
    preceding_weekday,
    quantize,
)


OVERTIME_THRESHOLD = Decimal("8")
MINUTES_PER_DAY = 1440

NAME_REQUIRED = "Fill out Name before entering date information."
DATE_REQUIRED = "Please fill out date first."
SKIPPED_BREAK = "Please fill out your final clock out time on Out - 1 if you haven't taken a break."


def reset_all() -> tuple[TimeEntry, ...]:
    """The empty template: ids 0-13, everything else blank."""
    return tuple(TimeEntry(id=i) for i in range(ROW_COUNT))


def split_overtime(total_hours: Decimal, threshold: Decimal = OVERTIME_THRESHOLD) -> str:
    """Overtime portion of total_hours, or "" when it does not exceed threshold."""
    if total_hours > threshold:
        return str(quantize(total_hours - threshold))
    return ""


def _segment_minutes(start: int | None, end: int | None) -> int | None:
    if start is None or end is None:
        return None
    diff = end - start
    if diff < 0:
        # shift crossed midnight
        diff += MINUTES_PER_DAY
    return diff


def calculate_row(
    entry: TimeEntry,
    field: str,
    overtime_threshold: Decimal = OVERTIME_THRESHOLD,
) -> TimeEntry:
    """Recompute break, hours and overtime after field changed.

    The break has no midnight wraparound: a zero or negative gap between
    out1 and in2 records no break, unlike the worked-hours segments.
    """
    in1 = parse_clock_time(entry.in1)
    out1 = parse_clock_time(entry.out1)
    in2 = parse_clock_time(entry.in2)
    out2 = parse_clock_time(entry.out2)

    break_time = entry.break_time
    if out1 is not None and in2 is not None:
        gap = in2 - out1
        break_time = f"{gap // 60}:{gap % 60:02d}" if gap > 0 else ""
    elif field in ("out1", "in2"):
        break_time = ""

    segments = [m for m in (_segment_minutes(in1, out1), _segment_minutes(in2, out2)) if m is not None]
    if not segments:
        return replace(entry, break_time=break_time, hours="", ot_hours="")

    total_hours = Decimal(sum(segments)) / Decimal(60)
    return replace(
        entry,
        break_time=break_time,
        hours=str(quantize(total_hours)),
        ot_hours=split_overtime(total_hours, overtime_threshold),
    )


def cascade_dates(rows: tuple[TimeEntry, ...], row_id: int, value: str) -> tuple[TimeEntry, ...]:
    """Re-derive all 14 dates so row_id carries value and each row is one day apart.

    Unparseable or empty values leave the rows untouched.
    """
    parsed = parse_date(value)
    if parsed is None:
        return rows
    anchor = parsed - timedelta(days=row_id)
    return tuple(replace(row, date=format_date(anchor + timedelta(days=row.id))) for row in rows)


def validate_date(
    entry: TimeEntry,
    value: str,
    text_entry_mode: bool = False,
) -> tuple[str | None, WeekdayMismatch | None, AutoCorrectNotice | None]:
    """Check a candidate date against the row's weekday.

    Returns (value_to_store, error, notice). value_to_store is None when the
    edit is rejected. Unparseable values pass through unvalidated.
    """
    parsed = parse_date(value)
    if parsed is None:
        return value, None, None

    actual = Weekday.of(parsed)
    expected = entry.weekday
    if actual == expected:
        return value, None, None

    if text_entry_mode and expected == Weekday.MONDAY:
        corrected = format_date(preceding_weekday(parsed, Weekday.MONDAY))
        notice = AutoCorrectNotice(
            row_id=entry.id,
            message=f"Date adjusted to previous Monday ({corrected}) to maintain weekly schedule.",
            corrected_value=corrected,
        )
        return corrected, None, notice

    error = WeekdayMismatch(
        row_id=entry.id,
        message=f"{value} is a {actual.full_name}, but this row is for {entry.day}",
        rejected_value=value,
    )
    return None, error, None


def recover_date(entry: TimeEntry, rejected_value: str) -> str | None:
    """The nearest earlier date on the row's weekday, for a rejected value."""
    parsed = parse_date(rejected_value)
    if parsed is None:
        return None
    return format_date(preceding_weekday(parsed, entry.weekday))


def apply_edit(
    rows: tuple[TimeEntry, ...],
    row_id: int,
    field: str,
    raw_value: str,
    text_entry_mode: bool = False,
    overtime_threshold: Decimal = OVERTIME_THRESHOLD,
) -> EditResult:
    """Apply one user edit and return the resulting snapshot.

    Raises ValueError for an unknown row id or field; rejected values are
    reported through EditResult.error instead.
    """
    if len(rows) != ROW_COUNT:
        raise ValueError(f"Expected {ROW_COUNT} rows, got {len(rows)}")
    if not 0 <= row_id < ROW_COUNT:
        raise ValueError(f"Row id out of range: {row_id}")
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Field is not editable: {field}")

    target = rows[row_id]
    value = raw_value
    notice = None

    if field in MONEY_FIELDS and not is_valid_financial(value):
        error = InvalidFinancialInput(
            row_id=row_id,
            message=f"{field.capitalize()} may only contain digits, one decimal point and a leading $",
            rejected_value=raw_value,
        )
        return EditResult(rows=rows, error=error, accepted=False)

    if field == "date" and value != "":
        checked, error, notice = validate_date(target, value, text_entry_mode)
        if checked is None:
            return EditResult(rows=rows, error=error, accepted=False)
        value = checked

    updated = replace(target, **{field: value})
    if field in TIME_FIELDS:
        updated = calculate_row(updated, field, overtime_threshold)
    new_rows = rows[:row_id] + (updated,) + rows[row_id + 1:]

    if field == "date" and value != "":
        new_rows = cascade_dates(new_rows, row_id, value)

    return EditResult(rows=new_rows, notice=notice)


def _sum_decimal(values: list[str], strip_pattern: str | None = None) -> Decimal:
    total = Decimal("0")
    for raw in values:
        text = re.sub(strip_pattern, "", raw) if strip_pattern else raw
        amount = parse_amount(text)
        if amount is not None:
            total += amount
    return total


def compute_totals(rows: tuple[TimeEntry, ...]) -> PeriodTotals:
    """Full recomputation of the footer totals."""
    money_noise = r"[^0-9.\-]+"
    return PeriodTotals(
        reg_hours=str(quantize(_sum_decimal([r.hours for r in rows]))),
        ot_hours=str(quantize(_sum_decimal([r.ot_hours for r in rows]))),
        total_sales=format_money(_sum_decimal([r.sales for r in rows], money_noise)),
        total_tips=format_money(_sum_decimal([r.tips for r in rows], money_noise)),
    )


def period_ending(rows: tuple[TimeEntry, ...]) -> str:
    """Last row's date, else the last entered date, else ""."""
    if rows and rows[-1].date:
        return rows[-1].date
    dated = [row.date for row in rows if row.date.strip()]
    return dated[-1] if dated else ""


def build_timesheet(employee_name: str, rows: tuple[TimeEntry, ...]) -> TimesheetData:
    return TimesheetData(
        employee_name=employee_name,
        pay_period_ending=period_ending(rows),
        rows=rows,
    )


def locked_fields(entry: TimeEntry, employee_name: str) -> dict[str, str]:
    """Fields that cannot be edited yet, mapped to the reason shown to the user."""
    locked: dict[str, str] = {}
    if not employee_name.strip():
        locked["date"] = NAME_REQUIRED
    if not entry.date:
        locked["in1"] = DATE_REQUIRED
    if not entry.in1:
        locked["out1"] = "Fill out In - 1 first."
    if not entry.out1:
        locked["in2"] = "Fill out Out - 1 first."
        locked["out2"] = SKIPPED_BREAK
    elif not entry.in2:
        locked["out2"] = "Fill out In - 2 first."
    return locked
