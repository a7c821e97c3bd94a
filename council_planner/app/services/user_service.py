"""
Business logic for user accounts.

Listing and profile reads are open; profile edits are allowed to the
account owner and to administrators; archival, restoration and role
changes are administrator-only.  The store must always keep at least
one active (non-archived) administrator, so archiving or demoting the
last one is refused.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.db import get_connection, get_cursor, like_pattern
from ..core.roles import UserRole
from ..core.security import hash_password
from ..schemas.user import UserListQuery, UserRead, UserUpdate, user_from_row


logger = logging.getLogger(__name__)

# Patch field -> ``users`` column.
_UPDATABLE_COLUMNS = {
    "login": "login",
    "surname": "surname",
    "name": "name",
    "patronymic": "patronymic",
    "group": "study_group",
    "phone": "phone",
    "contacts": "contacts",
    "password": "password",
}


def _is_admin(caller: UserRead) -> bool:
    return caller.role == UserRole.ADMIN


def _is_last_active_admin(cursor: sqlite3.Cursor, row: sqlite3.Row) -> bool:
    """Whether ``row`` is the only non-archived administrator left."""
    if row["role"] != UserRole.ADMIN or row["archived"]:
        return False
    count = cursor.execute(
        "SELECT COUNT(*) AS count FROM users WHERE role = ? AND archived = 0",
        (int(UserRole.ADMIN),),
    ).fetchone()["count"]
    return count <= 1


class UserService:
    """Сервис для работы с пользователями.

    Все проверки прав выполняются по явно переданному ``caller``;
    отказ возвращается как ``False``, а не исключение.
    """

    @classmethod
    async def list_users(cls, query: Optional[UserListQuery] = None) -> List[UserRead]:
        """Return accounts matching the filters in ``query``, ordered by id."""
        query = query or UserListQuery()
        sql = "SELECT * FROM users"
        params: list = []
        where_clauses: list[str] = []
        if query.role is not None:
            where_clauses.append("role = ?")
            params.append(int(query.role))
        if query.archived is not None:
            where_clauses.append("archived = ?")
            params.append(1 if query.archived else 0)
        if query.group:
            where_clauses.append("study_group = ?")
            params.append(query.group)
        if query.search:
            where_clauses.append(
                "(login LIKE ? ESCAPE '\\' OR surname LIKE ? ESCAPE '\\' OR name LIKE ? ESCAPE '\\')"
            )
            pattern = like_pattern(query.search)
            params.extend([pattern, pattern, pattern])
        if where_clauses:
            sql += " WHERE " + " AND ".join(where_clauses)
        sql += " ORDER BY id LIMIT ? OFFSET ?"
        params.extend([query.limit, query.offset])
        conn = get_connection()
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
            return [user_from_row(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_user(cls, user_id: int) -> Optional[UserRead]:
        """Retrieve a user by ID, or ``None`` if there is no such user."""
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return user_from_row(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def update_user(cls, user_id: int, updates: UserUpdate, caller: UserRead) -> bool:
        """Apply a partial profile update.

        Allowed when ``caller`` is the target account or an
        administrator.  Only fields present in ``updates`` are written;
        a new password is hashed, and a login already used by another
        account is refused.
        """
        if caller.id != user_id and not _is_admin(caller):
            logger.warning("User %s may not edit user %s", caller.id, user_id)
            return False
        changes = updates.model_dump(exclude_unset=True)
        if "password" in changes and changes["password"] is None:
            del changes["password"]
        if "login" in changes and changes["login"] is None:
            del changes["login"]
        try:
            with get_cursor() as cursor:
                row = cursor.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
                if not row:
                    return False
                if "login" in changes:
                    taken = cursor.execute(
                        "SELECT id FROM users WHERE login = ? AND id != ?",
                        (changes["login"], user_id),
                    ).fetchone()
                    if taken:
                        logger.warning("Login %s is already taken", changes["login"])
                        return False
                if changes:
                    fields = []
                    values = []
                    for key, value in changes.items():
                        if key == "password":
                            value = hash_password(value)
                        fields.append(f"{_UPDATABLE_COLUMNS[key]} = ?")
                        values.append(value)
                    values.append(user_id)
                    sql = f"UPDATE users SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?"
                    cursor.execute(sql, tuple(values))
        except sqlite3.IntegrityError:
            logger.warning("Login %s is already taken", changes.get("login"))
            return False
        logger.info("User %s updated by %s: %s", user_id, caller.id, sorted(changes))
        return True

    @classmethod
    async def archive_user(cls, user_id: int, caller: UserRead) -> bool:
        """Archive an account (administrators only).

        Refused when the target is the last active administrator, even
        if the caller archives themselves.
        """
        if not _is_admin(caller):
            logger.warning("User %s may not archive users", caller.id)
            return False
        with get_cursor(immediate=True) as cursor:
            row = cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                return False
            if _is_last_active_admin(cursor, row):
                logger.warning("Refusing to archive the last active administrator %s", user_id)
                return False
            cursor.execute(
                "UPDATE users SET archived = 1, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (user_id,),
            )
        logger.info("User %s archived by %s", user_id, caller.id)
        return True

    @classmethod
    async def restore_user(cls, user_id: int, caller: UserRead) -> bool:
        """Clear the archived flag (administrators only)."""
        if not _is_admin(caller):
            logger.warning("User %s may not restore users", caller.id)
            return False
        with get_cursor() as cursor:
            result = cursor.execute(
                "UPDATE users SET archived = 0, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (user_id,),
            )
            if result.rowcount == 0:
                return False
        logger.info("User %s restored by %s", user_id, caller.id)
        return True

    @classmethod
    async def change_role(cls, user_id: int, role: int, caller: UserRead) -> bool:
        """Change an account's global role (administrators only).

        Demoting the last active administrator is refused, and so is a
        role value outside ``UserRole``.
        """
        if not _is_admin(caller):
            logger.warning("User %s may not change roles", caller.id)
            return False
        try:
            role = UserRole(role)
        except ValueError:
            logger.warning("Unknown role %r requested for user %s", role, user_id)
            return False
        with get_cursor(immediate=True) as cursor:
            row = cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                return False
            if role != UserRole.ADMIN and _is_last_active_admin(cursor, row):
                logger.warning("Refusing to demote the last active administrator %s", user_id)
                return False
            cursor.execute(
                "UPDATE users SET role = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (int(role), user_id),
            )
        logger.info("User %s role changed to %s by %s", user_id, role.name, caller.id)
        return True
