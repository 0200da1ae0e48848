"""Parsing and formatting helpers for timesheet values."""

from __future__ import annotations

import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from models import Weekday


CENTS = Decimal("0.01")

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})\s+(AM|PM)$", re.IGNORECASE)
_SLASH_RE = re.compile(r"^(\d+)/(\d+)/(\d+)$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_US_DASH_RE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_FINANCIAL_RE = re.compile(r"\$?[0-9]*\.?[0-9]*")
_LEADING_NUMBER_RE = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_clock_time(value: str | None) -> int | None:
    """Convert "h:mm AM/PM" to minutes since midnight.

    Returns None for empty or malformed input; callers treat that as
    "time not entered".
    """
    if not value:
        return None
    match = _CLOCK_RE.match(value.strip())
    if not match:
        return None

    hour, minute = int(match.group(1)), int(match.group(2))
    if not 1 <= hour <= 12 or minute > 59:
        return None

    meridiem = match.group(3).upper()
    if hour == 12:
        hour = 0
    if meridiem == "PM":
        hour += 12
    return hour * 60 + minute


def format_clock_time(minutes: int) -> str:
    """Format minutes since midnight as "h:mm AM/PM"."""
    hour, minute = divmod(minutes % 1440, 60)
    meridiem = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{minute:02d} {meridiem}"


def parse_date(value: str | None) -> datetime | None:
    """Parse M/D/YYYY, YYYY-MM-DD or MM-DD-YYYY into a datetime at noon.

    The slash form needs a year of at least four digits so a partly typed
    year is not read as a short one. Anything else, including impossible
    calendar dates, returns None.
    """
    if not value:
        return None
    text = value.strip()

    parts: tuple[int, int, int] | None = None
    if match := _SLASH_RE.match(text):
        month, day, year = (int(g) for g in match.groups())
        if year > 999:
            parts = (year, month, day)
    elif match := _ISO_RE.match(text):
        year, month, day = (int(g) for g in match.groups())
        parts = (year, month, day)
    elif match := _US_DASH_RE.match(text):
        month, day, year = (int(g) for g in match.groups())
        parts = (year, month, day)

    if parts is None:
        return None
    try:
        return datetime(parts[0], parts[1], parts[2], 12, 0, 0)
    except ValueError:
        return None


def format_date(d: date) -> str:
    """Format as canonical MM/DD/YYYY."""
    return f"{d.month:02d}/{d.day:02d}/{d.year:04d}"


def preceding_weekday(d: date, target: Weekday) -> date:
    """Nearest date strictly before d that falls on the target weekday."""
    days_back = (Weekday.of(d) - target) % 7 or 7
    return d - timedelta(days=days_back)


def _build_time_options() -> list[str]:
    # 4:30 AM to 4:30 PM in 15 minute steps
    return [format_clock_time(m) for m in range(4 * 60 + 30, 16 * 60 + 30 + 1, 15)]


TIME_OPTIONS = _build_time_options()


def options_after(options: list[str], previous: str) -> list[str]:
    """Options that come after the previous field's value.

    The full list is returned when previous is empty or not an option.
    """
    if not previous or previous not in options:
        return list(options)
    return options[options.index(previous) + 1:]


def date_options(weekday: Weekday, today: date) -> list[str]:
    """Dates falling on weekday, from two weeks ago to six months ahead."""
    start = today - timedelta(days=14)
    end_year, end_month = divmod(today.month - 1 + 6, 12)
    end_year += today.year
    end_month += 1
    end = date(end_year, end_month, monthrange(end_year, end_month)[1])

    current = start + timedelta(days=(weekday - Weekday.of(start)) % 7)
    options = []
    while current <= end:
        options.append(format_date(current))
        current += timedelta(days=7)
    return options


def mask_date_input(previous: str, value: str) -> str:
    """Reformat growing text-mode date input into MM/DD/YYYY.

    Deletions are returned unchanged so the user can backspace over slashes.
    """
    if len(value) <= len(previous):
        return value
    digits = re.sub(r"\D", "", value)
    if len(digits) < 2:
        return digits
    if len(digits) < 4:
        return f"{digits[:2]}/{digits[2:]}"
    return f"{digits[:2]}/{digits[2:4]}/{digits[4:8]}"


def is_valid_financial(value: str) -> bool:
    """Optional leading $, digits and at most one decimal point."""
    return bool(_FINANCIAL_RE.fullmatch(value))


def parse_amount(value: str | None) -> Decimal | None:
    """Read the leading number of value, ignoring any trailing text."""
    if not value:
        return None
    match = _LEADING_NUMBER_RE.match(value.strip())
    if not match:
        return None
    return Decimal(match.group(0))


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    return f"${quantize(value)}"


def format_currency_input(value: str) -> str:
    """Normalise a committed sales/tips value to $N.NN; blank stays blank."""
    if not value.strip():
        return value
    amount = parse_amount(re.sub(r"[^0-9.]", "", value))
    if amount is None:
        return value
    return format_money(amount)
