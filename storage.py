from __future__ import annotations

import json
import logging
import os
import sqlite3
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from engine import period_ending, reset_all
from models import ROW_COUNT, Config, TimeEntry, TimesheetData

logger = logging.getLogger(__name__)

STORAGE_KEY = "nancy_mays_timesheet_v1"

# Snapshot JSON key -> TimeEntry attribute
_ROW_KEYS = {
    "id": "id",
    "date": "date",
    "in1": "in1",
    "out1": "out1",
    "in2": "in2",
    "out2": "out2",
    "break": "break_time",
    "hours": "hours",
    "otHours": "ot_hours",
    "sales": "sales",
    "tips": "tips",
}


def _get_db_path() -> Path:
    """Get database path from environment variable or default location."""
    if env_path := os.environ.get("TIMESHEET_DB"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "timesheet.db"


DB_PATH = _get_db_path()


def get_connection() -> sqlite3.Connection:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create tables if they don't exist."""
    conn = get_connection()
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS snapshots (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
    """)
    conn.commit()
    conn.close()


def entry_to_dict(entry: TimeEntry) -> dict:
    data = {key: getattr(entry, attr) for key, attr in _ROW_KEYS.items()}
    data["day"] = entry.day
    return data


def _dict_to_entry(data: dict) -> TimeEntry:
    if not isinstance(data, dict):
        raise TypeError(f"Row must be an object, got {type(data).__name__}")
    values = {attr: data.get(key, "") for key, attr in _ROW_KEYS.items()}
    values["id"] = int(data["id"])
    for attr, val in values.items():
        if attr != "id" and not isinstance(val, str):
            raise TypeError(f"{attr} must be a string, got {type(val).__name__}")
    return TimeEntry(**values)


def _rows_from_json(raw_rows) -> tuple[TimeEntry, ...]:
    if not isinstance(raw_rows, list) or len(raw_rows) != ROW_COUNT:
        raise ValueError("Snapshot must hold exactly 14 rows")
    rows = tuple(sorted((_dict_to_entry(r) for r in raw_rows), key=lambda e: e.id))
    if [r.id for r in rows] != list(range(ROW_COUNT)):
        raise ValueError("Snapshot row ids must be 0-13")
    return rows


def snapshot_to_json(data: TimesheetData) -> str:
    return json.dumps({
        "name": data.employee_name,
        "periodEnding": data.pay_period_ending,
        "rows": [entry_to_dict(r) for r in data.rows],
    })


def snapshot_from_json(text: str | None) -> TimesheetData:
    """Decode a cached snapshot, falling back to the empty template.

    Name and rows are restored independently, so a damaged rows list does not
    lose a good name. The period ending is always re-derived from the rows.
    """
    name = ""
    rows = reset_all()
    if not text:
        return TimesheetData(rows=rows)

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Ignoring corrupt timesheet cache")
        return TimesheetData(rows=rows)
    if not isinstance(parsed, dict):
        logger.warning("Ignoring timesheet cache that is not an object")
        return TimesheetData(rows=rows)

    if isinstance(parsed.get("name"), str):
        name = parsed["name"]
    if parsed.get("rows"):
        try:
            rows = _rows_from_json(parsed["rows"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Failed to load rows from cache", exc_info=True)

    return TimesheetData(employee_name=name, pay_period_ending=period_ending(rows), rows=rows)


def save_snapshot(data: TimesheetData, key: str = STORAGE_KEY) -> None:
    """Insert or replace the cached snapshot."""
    conn = get_connection()
    conn.execute(
        "INSERT OR REPLACE INTO snapshots (key, value, updated_at) VALUES (?, ?, ?)",
        (key, snapshot_to_json(data), datetime.now().isoformat(timespec="seconds")),
    )
    conn.commit()
    conn.close()


def load_snapshot(key: str = STORAGE_KEY) -> TimesheetData:
    """Load the cached snapshot, or the empty template if there is none."""
    conn = get_connection()
    row = conn.execute("SELECT value FROM snapshots WHERE key = ?", (key,)).fetchone()
    conn.close()
    return snapshot_from_json(row["value"] if row else None)


def clear_snapshot(key: str = STORAGE_KEY) -> None:
    conn = get_connection()
    conn.execute("DELETE FROM snapshots WHERE key = ?", (key,))
    conn.commit()
    conn.close()


def get_config() -> Config:
    """Load config from database."""
    conn = get_connection()
    rows = conn.execute("SELECT key, value FROM config").fetchall()
    conn.close()

    config = Config()
    for row in rows:
        if row["key"] == "business_name":
            config.business_name = row["value"]
        elif row["key"] == "overtime_threshold":
            config.overtime_threshold = Decimal(row["value"])
        elif row["key"] == "text_entry_mode":
            config.text_entry_mode = row["value"] == "1"
        elif row["key"] == "review_model":
            config.review_model = row["value"]

    return config


def save_config(config: Config):
    """Save config to database."""
    conn = get_connection()
    conn.execute("INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
                 ("business_name", config.business_name))
    conn.execute("INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
                 ("overtime_threshold", str(config.overtime_threshold)))
    conn.execute("INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
                 ("text_entry_mode", "1" if config.text_entry_mode else "0"))
    conn.execute("INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
                 ("review_model", config.review_model))
    conn.commit()
    conn.close()
