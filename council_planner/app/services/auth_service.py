"""
Registration and login.

``AuthService.register`` creates accounts with the default member role
and ``AuthService.login`` exchanges credentials for a signed session
token.  Both return ``None`` instead of raising when the request is
rejected.
"""

import logging
import sqlite3
from typing import Optional

from ..core.db import get_connection, get_cursor
from ..core.roles import UserRole
from ..core.security import create_access_token, hash_password, verify_password
from ..schemas.user import LoginResult, UserLogin, UserRead, UserRegister, user_from_row


logger = logging.getLogger(__name__)


class AuthService:
    """Сервис регистрации и входа пользователей."""

    @classmethod
    async def register(cls, data: UserRegister) -> Optional[UserRead]:
        """Register a new account.

        Returns ``None`` if the login is already taken; the existing
        account is left untouched.  The password is stored as a salted
        PBKDF2 hash.
        """
        try:
            with get_cursor() as cursor:
                exists = cursor.execute(
                    "SELECT id FROM users WHERE login = ?", (data.login,)
                ).fetchone()
                if exists:
                    logger.warning("Registration rejected: login %s is taken", data.login)
                    return None
                cursor.execute(
                    """
                    INSERT INTO users (login, password, surname, name, patronymic, study_group, phone, contacts, role)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        data.login,
                        hash_password(data.password),
                        data.surname,
                        data.name,
                        data.patronymic,
                        data.group,
                        data.phone,
                        data.contacts,
                        int(UserRole.MEMBER),
                    ),
                )
                user_id = cursor.lastrowid
        except sqlite3.IntegrityError:
            # A concurrent registration won the UNIQUE(login) race.
            logger.warning("Registration rejected: login %s is taken", data.login)
            return None
        logger.info("Registered user %s (id=%s)", data.login, user_id)
        return UserRead(id=user_id, role=UserRole.MEMBER, archived=False, **data.model_dump(exclude={"password"}))

    @classmethod
    async def login(cls, data: UserLogin) -> Optional[LoginResult]:
        """Authenticate by login and password.

        Returns ``None`` for an unknown login, a wrong password or an
        archived account.  On success the token subject is the user id
        and the ``role`` claim carries the account role.
        """
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM users WHERE login = ?", (data.login,)
            ).fetchone()
        finally:
            conn.close()
        if not row or not verify_password(data.password, row["password"]):
            logger.warning("Failed login attempt for %s", data.login)
            return None
        if row["archived"]:
            logger.warning("Login rejected for archived user %s", data.login)
            return None
        user = user_from_row(row)
        token = create_access_token({"sub": str(user.id), "role": int(user.role)})
        return LoginResult(token=token, user=user)
