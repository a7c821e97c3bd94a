"""
Pydantic models for user data.

Defines schemas for registering users, logging in, reading the public
projection of an account, patching profiles and filtering user lists.
The password hash never leaves the service layer.
"""

import sqlite3
from typing import Optional

from pydantic import BaseModel, Field

from ..core.roles import UserRole


class UserBase(BaseModel):
    login: str = Field(..., min_length=1, examples=["ivanov"])
    surname: Optional[str] = Field(None, examples=["Иванов"])
    name: Optional[str] = Field(None, examples=["Иван"])
    patronymic: Optional[str] = Field(None, examples=["Иванович"])
    group: Optional[str] = Field(None, examples=["A1"])
    phone: Optional[int] = Field(None, examples=[1234567890])
    contacts: Optional[str] = Field(None, examples=["tg: @ivanov"])


class UserRegister(UserBase):
    """Schema for registering an account."""

    password: str = Field(..., min_length=1, examples=["Password123"])


class UserLogin(BaseModel):
    login: str
    password: str


class UserRead(UserBase):
    """Public projection of an account."""

    id: int
    role: UserRole = UserRole.MEMBER
    archived: bool = False

    model_config = {
        "from_attributes": True,
    }


class UserUpdate(BaseModel):
    """Partial profile update.

    Only fields explicitly present in the payload are written; use
    ``model_dump(exclude_unset=True)`` to obtain them.  A present
    ``None`` clears the optional profile field.
    """

    login: Optional[str] = Field(None, min_length=1)
    surname: Optional[str] = None
    name: Optional[str] = None
    patronymic: Optional[str] = None
    group: Optional[str] = None
    phone: Optional[int] = None
    contacts: Optional[str] = None
    password: Optional[str] = Field(None, min_length=1)


class UserListQuery(BaseModel):
    role: Optional[UserRole] = None
    archived: Optional[bool] = None
    group: Optional[str] = None
    # Substring matched against login, surname and name.
    search: Optional[str] = None
    limit: int = Field(100, ge=1, le=1000)
    offset: int = Field(0, ge=0)


class RoleChange(BaseModel):
    role: UserRole


class LoginResult(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


def user_from_row(row: sqlite3.Row) -> UserRead:
    """Build the public projection from a ``users`` row."""
    return UserRead(
        id=row["id"],
        login=row["login"],
        surname=row["surname"],
        name=row["name"],
        patronymic=row["patronymic"],
        group=row["study_group"],
        phone=row["phone"],
        contacts=row["contacts"],
        role=UserRole(row["role"]),
        archived=bool(row["archived"]),
    )
