"""Shared fixtures for tests."""

from __future__ import annotations

import os
import sqlite3
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Generator

import pytest

# Set up test database before importing storage
_test_db_fd, _test_db_path = tempfile.mkstemp(suffix=".db")
os.environ["TIMESHEET_DB"] = _test_db_path


@pytest.fixture(scope="session", autouse=True)
def setup_test_db() -> Generator[Path, None, None]:
    """Set up a test database for the entire test session."""
    import storage

    # Reinitialise storage module with test db path
    storage.DB_PATH = Path(_test_db_path)
    storage.init_db()

    yield Path(_test_db_path)

    # Cleanup
    os.close(_test_db_fd)
    os.unlink(_test_db_path)


@pytest.fixture
def db_connection(setup_test_db: Path) -> Generator[sqlite3.Connection, None, None]:
    """Provide a database connection for tests."""
    import storage

    conn = storage.get_connection()
    yield conn
    conn.close()


@pytest.fixture
def clean_db(setup_test_db: Path) -> Generator[None, None, None]:
    """Clean database tables before each test."""
    import storage

    storage.init_db()
    conn = storage.get_connection()
    conn.execute("DELETE FROM snapshots")
    conn.execute("DELETE FROM config")
    conn.commit()
    conn.close()

    yield


@pytest.fixture
def empty_rows():
    """The 14-row empty template."""
    from engine import reset_all

    return reset_all()


@pytest.fixture
def dated_rows(empty_rows):
    """Rows cascaded from Monday 03/10/2025 on row 0."""
    from engine import apply_edit

    return apply_edit(empty_rows, 0, "date", "3/10/2025").rows


@pytest.fixture
def worked_rows(dated_rows):
    """Two worked days: 9:00-5:00 on row 0 and 9:00-6:00 on row 1, with sales."""
    from engine import apply_edit

    rows = dated_rows
    for row_id, field, value in [
        (0, "in1", "9:00 AM"),
        (0, "out1", "5:00 PM"),
        (0, "sales", "$10.00"),
        (1, "in1", "9:00 AM"),
        (1, "out1", "6:00 PM"),
        (1, "sales", "$5.50"),
        (1, "tips", "$2.25"),
    ]:
        rows = apply_edit(rows, row_id, field, value).rows
    return rows


@pytest.fixture
def sample_config():
    """Create a sample Config for testing."""
    from models import Config

    return Config(
        business_name="Test Diner",
        overtime_threshold=Decimal("8"),
        text_entry_mode=True,
        review_model="gemini-test",
    )
