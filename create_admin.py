#!/usr/bin/env python3
"""
Create or promote an administrator in the Council Planner database.

Accounts registered through the API start with the member role, so a
fresh deployment needs one administrator created out of band.  If the
login exists, the account is promoted to administrator, restored from
the archive and, when a password is given, has it reset.  Otherwise a
new administrator account is created.

Usage:
    python create_admin.py --login admin --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import sys

from council_planner.app.core.config import settings
from council_planner.app.core.db import get_cursor, init_db
from council_planner.app.core.roles import UserRole
from council_planner.app.core.security import hash_password


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Create or promote a Council Planner administrator.")
    ap.add_argument("--db", help="Path to SQLite DB file (defaults to DATABASE_URL)")
    ap.add_argument("--login", required=True, help="Administrator login")
    ap.add_argument("--password", help="Password. If omitted, you'll be prompted securely.")
    ap.add_argument("--surname", default=None)
    ap.add_argument("--name", default=None)
    args = ap.parse_args(argv)

    if args.db:
        settings.database_url = args.db
    init_db()

    with get_cursor() as cursor:
        row = cursor.execute("SELECT id FROM users WHERE login = ?", (args.login,)).fetchone()
        if row:
            cursor.execute(
                "UPDATE users SET role = ?, archived = 0, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (int(UserRole.ADMIN), row["id"]),
            )
            if args.password:
                cursor.execute(
                    "UPDATE users SET password = ? WHERE id = ?",
                    (hash_password(args.password), row["id"]),
                )
            print(f"[+] User promoted to administrator: {args.login}")
            return 0

        password = args.password or getpass.getpass("Enter password: ")
        if not password:
            print("[!] Empty password is not allowed.", file=sys.stderr)
            return 1
        cursor.execute(
            "INSERT INTO users (login, password, surname, name, role) VALUES (?, ?, ?, ?, ?)",
            (args.login, hash_password(password), args.surname, args.name, int(UserRole.ADMIN)),
        )
    print(f"[+] Administrator created: {args.login}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
