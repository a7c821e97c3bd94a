# Shared fixtures: every test gets a fresh SQLite file with the schema applied

from contextlib import contextmanager
from datetime import date, time, timedelta

import pytest

from council_planner.app.core.config import settings
from council_planner.app.core.db import get_cursor, init_db
from council_planner.app.core.roles import EventRole, EventStatus, UserRole
from council_planner.app.schemas.user import UserRead, user_from_row


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the application at a temporary database and migrate it."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "test.db"))
    init_db()
    yield


@pytest.fixture
def make_user():
    """Insert a user row directly, the way accounts are seeded outside the API."""
    counter = {"n": 0}

    def _make_user(login=None, role=UserRole.MEMBER, archived=False, password="hash", name="User"):
        counter["n"] += 1
        login = login or f"user{counter['n']}"
        with get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO users (login, password, surname, name, study_group, phone, contacts, role, archived)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (login, password, "Surname", name, "A", 1234567890, f"{login}@site", int(role), int(archived)),
            )
            row = cursor.execute("SELECT * FROM users WHERE id = ?", (cursor.lastrowid,)).fetchone()
            return user_from_row(row)

    return _make_user


@pytest.fixture
def make_event():
    """Insert an event row directly, without any membership rows."""

    def _make_event(title="Event", status=EventStatus.PLANNED, start=None, days=1, location="Room 1"):
        start = start or date.today()
        with get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO events (title, description, status, start_date, end_date, event_time, location)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    "Desc",
                    int(status),
                    start.isoformat(),
                    (start + timedelta(days=days)).isoformat(),
                    time(10, 0).isoformat(),
                    location,
                ),
            )
            return cursor.lastrowid

    return _make_event


@pytest.fixture
def add_membership():
    def _add(event_id: int, user: UserRead, role: EventRole):
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO event_users (event_id, user_id, role) VALUES (?, ?, ?)",
                (event_id, user.id, int(role)),
            )

    return _add


class _BlindCursor:
    """Cursor wrapper that answers one lookup with no rows."""

    def __init__(self, cursor, hidden_sql):
        self._cursor = cursor
        self._hidden_sql = hidden_sql

    def execute(self, sql, params=()):
        if sql.strip().startswith(self._hidden_sql):
            return self._cursor.execute("SELECT 1 WHERE 0")
        return self._cursor.execute(sql, params)

    def __getattr__(self, name):
        return getattr(self._cursor, name)


@pytest.fixture
def skip_lookup(monkeypatch):
    """Make a service miss its own duplicate lookup so only the UNIQUE constraint is left."""

    def _skip(module, hidden_sql):
        original = module.get_cursor

        @contextmanager
        def _get_cursor(*args, **kwargs):
            with original(*args, **kwargs) as cursor:
                yield _BlindCursor(cursor, hidden_sql)

        monkeypatch.setattr(module, "get_cursor", _get_cursor)

    return _skip
