"""
User endpoints for API v1.

Listing and reading accounts requires any authenticated caller.
Permission rules for edits, archival and role changes live in
``UserService``; a refused operation on an existing account maps to
HTTP 403.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from council_planner.app.core.security import get_current_user
from council_planner.app.schemas.user import RoleChange, UserListQuery, UserRead, UserUpdate
from council_planner.app.services.user_service import UserService


router = APIRouter()


async def _existing_user(user_id: int) -> UserRead:
    user = await UserService.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/", response_model=List[UserRead])
async def list_users(
    query: UserListQuery = Depends(),
    current_user: UserRead = Depends(get_current_user),
) -> List[UserRead]:
    """Получить список пользователей с фильтрами по роли, архиву и группе."""
    return await UserService.list_users(query)


@router.get("/me", response_model=UserRead)
async def read_me(current_user: UserRead = Depends(get_current_user)) -> UserRead:
    return current_user


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, current_user: UserRead = Depends(get_current_user)) -> UserRead:
    return await _existing_user(user_id)


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    updates: UserUpdate,
    current_user: UserRead = Depends(get_current_user),
) -> UserRead:
    """Update a profile.  Allowed to the owner and to administrators."""
    await _existing_user(user_id)
    if not await UserService.update_user(user_id, updates, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Update refused")
    return await _existing_user(user_id)


@router.post("/{user_id}/archive", response_model=UserRead)
async def archive_user(user_id: int, current_user: UserRead = Depends(get_current_user)) -> UserRead:
    """Archive an account.  The last active administrator cannot be archived."""
    await _existing_user(user_id)
    if not await UserService.archive_user(user_id, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Archival refused")
    return await _existing_user(user_id)


@router.post("/{user_id}/restore", response_model=UserRead)
async def restore_user(user_id: int, current_user: UserRead = Depends(get_current_user)) -> UserRead:
    await _existing_user(user_id)
    if not await UserService.restore_user(user_id, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Restore refused")
    return await _existing_user(user_id)


@router.put("/{user_id}/role", response_model=UserRead)
async def change_role(
    user_id: int,
    body: RoleChange,
    current_user: UserRead = Depends(get_current_user),
) -> UserRead:
    await _existing_user(user_id)
    if not await UserService.change_role(user_id, body.role, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Role change refused")
    return await _existing_user(user_id)
