# Tests for registration and login

from asyncio import run

from council_planner.app.core.roles import UserRole
from council_planner.app.core.security import decode_access_token, hash_password
from council_planner.app.schemas.user import UserLogin, UserRegister
from council_planner.app.core.db import get_cursor
from council_planner.app.services import auth_service
from council_planner.app.services.auth_service import AuthService
from council_planner.app.services.user_service import UserService


def _register_payload(login="user1", password="Password123", **overrides):
    data = {
        "login": login,
        "password": password,
        "surname": "Ivanov",
        "name": "Ivan",
        "patronymic": "Ivanovich",
        "group": "A1",
        "phone": 1234567890,
        "contacts": "tg",
    }
    data.update(overrides)
    return UserRegister(**data)


def test_register_creates_member():
    result = run(AuthService.register(_register_payload()))

    assert result is not None
    assert result.login == "user1"
    assert result.role == UserRole.MEMBER
    assert result.archived is False
    stored = run(UserService.get_user(result.id))
    assert stored.surname == "Ivanov"
    assert stored.group == "A1"


def test_register_rejects_duplicate_login(make_user):
    existing = make_user(login="user1", name="Ivan")

    result = run(AuthService.register(_register_payload(name="Petr", surname="Petrov")))

    assert result is None
    stored = run(UserService.get_user(existing.id))
    assert stored.name == "Ivan"
    assert len(run(UserService.list_users())) == 1


def test_login_returns_token_for_valid_credentials(make_user):
    user = make_user(login="user1", password=hash_password("Password123"))

    result = run(AuthService.login(UserLogin(login="user1", password="Password123")))

    assert result is not None
    assert result.token.strip()
    assert result.user.login == "user1"
    payload = decode_access_token(result.token)
    assert payload["sub"] == str(user.id)
    assert payload["role"] == int(UserRole.MEMBER)


def test_login_after_register():
    run(AuthService.register(_register_payload(login="fresh", password="secret")))

    result = run(AuthService.login(UserLogin(login="fresh", password="secret")))

    assert result is not None
    assert result.user.login == "fresh"


def test_login_rejects_wrong_password(make_user):
    make_user(login="user1", password=hash_password("Password123"))

    assert run(AuthService.login(UserLogin(login="user1", password="WrongPassword"))) is None


def test_login_rejects_unknown_login():
    assert run(AuthService.login(UserLogin(login="ghost", password="x"))) is None


def test_login_rejects_archived_account(make_user):
    make_user(login="gone", password=hash_password("pw"), archived=True)

    assert run(AuthService.login(UserLogin(login="gone", password="pw"))) is None


def test_register_duplicate_rejected_by_unique_constraint(skip_lookup):
    assert run(AuthService.register(_register_payload("taken"))) is not None

    skip_lookup(auth_service, "SELECT id FROM users WHERE login")

    assert run(AuthService.register(_register_payload("taken", password="Other1"))) is None
    with get_cursor() as cursor:
        count = cursor.execute("SELECT COUNT(*) AS count FROM users WHERE login = ?", ("taken",)).fetchone()["count"]
    assert count == 1
