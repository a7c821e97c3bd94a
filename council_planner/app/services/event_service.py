"""
Business logic for events.

Events own a set of membership rows (``event_users``) that grant a
user a role within that event: participant, organizer or main
organizer.  The creator of an event becomes its main organizer.  Adds
and removals are strict: adding an existing membership or removing a
missing one fails instead of silently succeeding.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.db import get_connection, get_cursor, like_pattern
from ..core.roles import EventRole
from ..schemas.event import (
    EventCreate,
    EventDetail,
    EventListQuery,
    EventRead,
    EventUpdate,
    EventUserRead,
    event_from_row,
)


logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = {
    "title",
    "description",
    "status",
    "start_date",
    "end_date",
    "event_time",
    "location",
    "number_of_participants",
}


def _to_db(value):
    """Convert enum and date/time values to what the ``events`` table stores."""
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, int):
        return int(value)
    return value


class EventService:
    """Сервис для управления мероприятиями и их участниками."""

    @classmethod
    async def list_events(cls, query: Optional[EventListQuery] = None) -> List[EventRead]:
        """Return events matching ``query``, ordered by start date.

        - ``status`` keeps only events in that lifecycle state.
        - ``date_from``/``date_to`` keep events whose date range overlaps
          the given window.
        - ``search`` is a substring of the title, description or location.
        """
        query = query or EventListQuery()
        sql = "SELECT * FROM events"
        params: list = []
        where_clauses: list[str] = []
        if query.status is not None:
            where_clauses.append("status = ?")
            params.append(int(query.status))
        if query.date_from:
            where_clauses.append("end_date >= ?")
            params.append(query.date_from.isoformat())
        if query.date_to:
            where_clauses.append("start_date <= ?")
            params.append(query.date_to.isoformat())
        if query.search:
            where_clauses.append(
                "(title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\' OR location LIKE ? ESCAPE '\\')"
            )
            pattern = like_pattern(query.search)
            params.extend([pattern, pattern, pattern])
        if where_clauses:
            sql += " WHERE " + " AND ".join(where_clauses)
        sql += " ORDER BY start_date, id LIMIT ? OFFSET ?"
        params.extend([query.limit, query.offset])
        conn = get_connection()
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
            return [event_from_row(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_event(cls, event_id: int) -> Optional[EventDetail]:
        """Retrieve an event with its membership rows, or ``None``."""
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM events WHERE id = ?", (event_id,)).fetchone()
            if not row:
                return None
            members = conn.execute(
                "SELECT event_id, user_id, role FROM event_users WHERE event_id = ? ORDER BY id",
                (event_id,),
            ).fetchall()
            return EventDetail(
                **event_from_row(row).model_dump(),
                members=[
                    EventUserRead(event_id=m["event_id"], user_id=m["user_id"], role=EventRole(m["role"]))
                    for m in members
                ],
            )
        finally:
            conn.close()

    @classmethod
    async def create_event(cls, data: EventCreate, creator_id: int) -> int:
        """Create an event and make ``creator_id`` its main organizer.

        The event row and the membership row are committed together.
        Returns the new event id.
        """
        with get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO events (title, description, status, start_date, end_date, event_time,
                                    location, number_of_participants, created_by)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    data.title,
                    data.description,
                    int(data.status),
                    data.start_date.isoformat(),
                    data.end_date.isoformat(),
                    _to_db(data.event_time),
                    data.location,
                    data.number_of_participants,
                    creator_id,
                ),
            )
            event_id = cursor.lastrowid
            cursor.execute(
                "INSERT INTO event_users (event_id, user_id, role) VALUES (?, ?, ?)",
                (event_id, creator_id, int(EventRole.MAIN_ORGANIZER)),
            )
        logger.info("User %s created event %s '%s'", creator_id, event_id, data.title)
        return event_id

    @classmethod
    async def update_event(cls, event_id: int, updates: EventUpdate) -> bool:
        """Update the fields present in ``updates``.

        Returns ``False`` if the event does not exist or if the merged
        dates would put the start after the end.
        """
        changes = {
            key: value
            for key, value in updates.model_dump(exclude_unset=True).items()
            if key in _UPDATABLE_COLUMNS
        }
        # Required columns cannot be cleared.
        for key in ("title", "status", "start_date", "end_date", "number_of_participants"):
            if key in changes and changes[key] is None:
                del changes[key]
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT start_date, end_date FROM events WHERE id = ?", (event_id,)
            ).fetchone()
            if not row:
                return False
            start = _to_db(changes.get("start_date")) or row["start_date"]
            end = _to_db(changes.get("end_date")) or row["end_date"]
            if start > end:
                logger.warning("Event %s update rejected: start %s after end %s", event_id, start, end)
                return False
            if changes:
                fields = [f"{key} = ?" for key in changes]
                values = [_to_db(value) for value in changes.values()]
                values.append(event_id)
                sql = f"UPDATE events SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?"
                cursor.execute(sql, tuple(values))
        logger.info("Event %s updated: %s", event_id, sorted(changes))
        return True

    @classmethod
    async def list_members(cls, event_id: int, role: Optional[EventRole] = None) -> List[EventUserRead]:
        """Return the event's membership rows, optionally of one role."""
        sql = "SELECT event_id, user_id, role FROM event_users WHERE event_id = ?"
        params: list = [event_id]
        if role is not None:
            sql += " AND role = ?"
            params.append(int(role))
        sql += " ORDER BY id"
        conn = get_connection()
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
            return [
                EventUserRead(event_id=r["event_id"], user_id=r["user_id"], role=EventRole(r["role"]))
                for r in rows
            ]
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Membership management
    # ------------------------------------------------------------------
    @classmethod
    async def _add_member(cls, event_id: int, user_id: int, role: EventRole) -> bool:
        try:
            with get_cursor() as cursor:
                event = cursor.execute("SELECT id FROM events WHERE id = ?", (event_id,)).fetchone()
                user = cursor.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
                if not event or not user:
                    return False
                exists = cursor.execute(
                    "SELECT id FROM event_users WHERE event_id = ? AND user_id = ? AND role = ?",
                    (event_id, user_id, int(role)),
                ).fetchone()
                if exists:
                    logger.warning("User %s is already %s of event %s", user_id, role.name, event_id)
                    return False
                cursor.execute(
                    "INSERT INTO event_users (event_id, user_id, role) VALUES (?, ?, ?)",
                    (event_id, user_id, int(role)),
                )
        except sqlite3.IntegrityError:
            # Lost a race against an identical concurrent add.
            logger.warning("User %s is already %s of event %s", user_id, role.name, event_id)
            return False
        logger.info("User %s added to event %s as %s", user_id, event_id, role.name)
        return True

    @classmethod
    async def _remove_member(cls, event_id: int, user_id: int, role: EventRole) -> bool:
        with get_cursor() as cursor:
            result = cursor.execute(
                "DELETE FROM event_users WHERE event_id = ? AND user_id = ? AND role = ?",
                (event_id, user_id, int(role)),
            )
            if result.rowcount == 0:
                logger.warning("User %s is not %s of event %s", user_id, role.name, event_id)
                return False
        logger.info("User %s removed from event %s as %s", user_id, event_id, role.name)
        return True

    @classmethod
    async def add_participant(cls, event_id: int, user_id: int) -> bool:
        return await cls._add_member(event_id, user_id, EventRole.PARTICIPANT)

    @classmethod
    async def remove_participant(cls, event_id: int, user_id: int) -> bool:
        return await cls._remove_member(event_id, user_id, EventRole.PARTICIPANT)

    @classmethod
    async def add_organizer(cls, event_id: int, user_id: int) -> bool:
        return await cls._add_member(event_id, user_id, EventRole.ORGANIZER)

    @classmethod
    async def remove_organizer(cls, event_id: int, user_id: int) -> bool:
        return await cls._remove_member(event_id, user_id, EventRole.ORGANIZER)
