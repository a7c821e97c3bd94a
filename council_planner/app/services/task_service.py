"""
Business logic for event tasks.

A task is attached to one event and carries two membership rows in
``task_users``: its creator and its executor.  Permissions are local
to the task or its event rather than derived from the global user
role:

* creating a task requires an organizer (or main organizer) membership
  on the event;
* the creator may edit the task and delegate a partner;
* the executor may only move the task through its statuses.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.db import get_connection, get_cursor
from ..core.roles import TASK_CREATOR_EVENT_ROLES, TaskRole
from ..schemas.task import (
    TaskCreate,
    TaskListQuery,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
    TaskUserRead,
    task_from_row,
)


logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = {"title", "description", "start_date", "end_date", "status"}


def _has_task_role(cursor: sqlite3.Cursor, task_id: int, user_id: int, role: TaskRole) -> bool:
    row = cursor.execute(
        "SELECT id FROM task_users WHERE task_id = ? AND user_id = ? AND role = ?",
        (task_id, user_id, int(role)),
    ).fetchone()
    return row is not None


def _members(conn: sqlite3.Connection, task_id: int) -> List[TaskUserRead]:
    rows = conn.execute(
        "SELECT task_id, user_id, role FROM task_users WHERE task_id = ? ORDER BY role, id",
        (task_id,),
    ).fetchall()
    return [TaskUserRead(task_id=r["task_id"], user_id=r["user_id"], role=TaskRole(r["role"])) for r in rows]


class TaskService:
    """Service for creating, editing and delegating event tasks."""

    @classmethod
    async def create_task(cls, data: TaskCreate, creator_id: int) -> Optional[int]:
        """Create a task on ``data.event_id``.

        ``creator_id`` must be an organizer or main organizer of the
        event and the executor must be an existing user; otherwise
        ``None`` is returned and nothing is written.  The task row and
        its creator and executor rows are committed together.
        """
        with get_cursor() as cursor:
            placeholders = ", ".join("?" for _ in TASK_CREATOR_EVENT_ROLES)
            membership = cursor.execute(
                f"SELECT id FROM event_users WHERE event_id = ? AND user_id = ? AND role IN ({placeholders})",
                (data.event_id, creator_id, *[int(r) for r in TASK_CREATOR_EVENT_ROLES]),
            ).fetchone()
            if not membership:
                logger.warning("User %s may not create tasks on event %s", creator_id, data.event_id)
                return None
            executor = cursor.execute(
                "SELECT id FROM users WHERE id = ?", (data.executor_user_id,)
            ).fetchone()
            if not executor:
                logger.warning("Executor %s does not exist", data.executor_user_id)
                return None
            cursor.execute(
                """
                INSERT INTO tasks (event_id, title, description, status, start_date, end_date)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    data.event_id,
                    data.title,
                    data.description,
                    int(data.status),
                    data.start_date.isoformat(),
                    data.end_date.isoformat(),
                ),
            )
            task_id = cursor.lastrowid
            cursor.executemany(
                "INSERT INTO task_users (task_id, user_id, role) VALUES (?, ?, ?)",
                [
                    (task_id, creator_id, int(TaskRole.CREATOR)),
                    (task_id, data.executor_user_id, int(TaskRole.EXECUTOR)),
                ],
            )
        logger.info("User %s created task %s on event %s", creator_id, task_id, data.event_id)
        return task_id

    @classmethod
    async def get_task(cls, task_id: int) -> Optional[TaskRead]:
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
            if not row:
                return None
            return task_from_row(row, _members(conn, task_id))
        finally:
            conn.close()

    @classmethod
    async def list_tasks(cls, query: Optional[TaskListQuery] = None) -> List[TaskRead]:
        """Return tasks filtered by event, member and status, ordered by id."""
        query = query or TaskListQuery()
        sql = "SELECT * FROM tasks"
        params: list = []
        where_clauses: list[str] = []
        if query.event_id is not None:
            where_clauses.append("event_id = ?")
            params.append(query.event_id)
        if query.status is not None:
            where_clauses.append("status = ?")
            params.append(int(query.status))
        if query.user_id is not None:
            member_sql = "SELECT task_id FROM task_users WHERE user_id = ?"
            params.append(query.user_id)
            if query.role is not None:
                member_sql += " AND role = ?"
                params.append(int(query.role))
            where_clauses.append(f"id IN ({member_sql})")
        if where_clauses:
            sql += " WHERE " + " AND ".join(where_clauses)
        sql += " ORDER BY id LIMIT ? OFFSET ?"
        params.extend([query.limit, query.offset])
        conn = get_connection()
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
            return [task_from_row(row, _members(conn, row["id"])) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def update_task(cls, task_id: int, updates: TaskUpdate, caller_id: int) -> bool:
        """Apply the creator's partial update.

        Only the task's creator may use this path.  A new
        ``executor_user_id`` replaces the executor membership row.
        Returns ``False`` without writing anything when the caller is
        not the creator, the executor does not exist or the merged
        dates are out of order.
        """
        changes = updates.model_dump(exclude_unset=True)
        new_executor = changes.pop("executor_user_id", None)
        for key in ("title", "status", "start_date", "end_date"):
            if key in changes and changes[key] is None:
                del changes[key]
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT start_date, end_date FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
            if not row:
                return False
            if not _has_task_role(cursor, task_id, caller_id, TaskRole.CREATOR):
                logger.warning("User %s is not the creator of task %s", caller_id, task_id)
                return False
            start = changes["start_date"].isoformat() if "start_date" in changes else row["start_date"]
            end = changes["end_date"].isoformat() if "end_date" in changes else row["end_date"]
            if start > end:
                logger.warning("Task %s update rejected: start %s after end %s", task_id, start, end)
                return False
            if new_executor is not None:
                user = cursor.execute("SELECT id FROM users WHERE id = ?", (new_executor,)).fetchone()
                if not user:
                    logger.warning("Executor %s does not exist", new_executor)
                    return False
                cursor.execute(
                    "DELETE FROM task_users WHERE task_id = ? AND role = ?",
                    (task_id, int(TaskRole.EXECUTOR)),
                )
                cursor.execute(
                    "INSERT INTO task_users (task_id, user_id, role) VALUES (?, ?, ?)",
                    (task_id, new_executor, int(TaskRole.EXECUTOR)),
                )
            fields = []
            values = []
            for key, value in changes.items():
                if key not in _UPDATABLE_COLUMNS:
                    continue
                if key in ("start_date", "end_date"):
                    value = value.isoformat()
                elif key == "status":
                    value = int(value)
                fields.append(f"{key} = ?")
                values.append(value)
            if fields:
                values.append(task_id)
                sql = f"UPDATE tasks SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?"
                cursor.execute(sql, tuple(values))
        logger.info("Task %s updated by %s", task_id, caller_id)
        return True

    @classmethod
    async def update_task_status(cls, task_id: int, data: TaskStatusUpdate, caller_id: int) -> bool:
        """Change the status of a task; only its executor may do this."""
        with get_cursor() as cursor:
            if not _has_task_role(cursor, task_id, caller_id, TaskRole.EXECUTOR):
                logger.warning("User %s is not the executor of task %s", caller_id, task_id)
                return False
            cursor.execute(
                "UPDATE tasks SET status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (int(data.status), task_id),
            )
        logger.info("Task %s status set to %s by %s", task_id, data.status.name, caller_id)
        return True

    @classmethod
    async def set_partner(cls, task_id: int, partner_user_id: int, caller_id: int) -> bool:
        """Delegate a partner to the task; only its creator may do this.

        Any previously set partner is replaced.
        """
        with get_cursor() as cursor:
            if not _has_task_role(cursor, task_id, caller_id, TaskRole.CREATOR):
                logger.warning("User %s is not the creator of task %s", caller_id, task_id)
                return False
            partner = cursor.execute("SELECT id FROM users WHERE id = ?", (partner_user_id,)).fetchone()
            if not partner:
                logger.warning("Partner %s does not exist", partner_user_id)
                return False
            cursor.execute(
                "UPDATE tasks SET partner_id = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (partner_user_id, task_id),
            )
        logger.info("Task %s partner set to %s by %s", task_id, partner_user_id, caller_id)
        return True
