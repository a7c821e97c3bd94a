"""
Task endpoints for API v1.

All handlers pass the authenticated caller's id to ``TaskService``,
which decides from the task's own membership rows whether the caller
may act.  A refusal on an existing task maps to HTTP 403.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from council_planner.app.core.security import get_current_user
from council_planner.app.schemas.task import (
    PartnerAssign,
    TaskCreate,
    TaskListQuery,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from council_planner.app.schemas.user import UserRead
from council_planner.app.services.task_service import TaskService


router = APIRouter()


async def _existing_task(task_id: int) -> TaskRead:
    task = await TaskService.get_task(task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(data: TaskCreate, current_user: UserRead = Depends(get_current_user)) -> TaskRead:
    """Create a task.  The caller must organize the task's event."""
    task_id = await TaskService.create_task(data, current_user.id)
    if task_id is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Task creation refused")
    return await _existing_task(task_id)


@router.get("/", response_model=List[TaskRead])
async def list_tasks(
    query: TaskListQuery = Depends(),
    current_user: UserRead = Depends(get_current_user),
) -> List[TaskRead]:
    return await TaskService.list_tasks(query)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task_id: int, current_user: UserRead = Depends(get_current_user)) -> TaskRead:
    return await _existing_task(task_id)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int,
    updates: TaskUpdate,
    current_user: UserRead = Depends(get_current_user),
) -> TaskRead:
    """Full edit, available to the task creator only."""
    await _existing_task(task_id)
    if not await TaskService.update_task(task_id, updates, current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Update refused")
    return await _existing_task(task_id)


@router.patch("/{task_id}/status", response_model=TaskRead)
async def update_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    current_user: UserRead = Depends(get_current_user),
) -> TaskRead:
    """Status change, available to the task executor only."""
    await _existing_task(task_id)
    if not await TaskService.update_task_status(task_id, data, current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Status change refused")
    return await _existing_task(task_id)


@router.put("/{task_id}/partner", response_model=TaskRead)
async def set_partner(
    task_id: int,
    data: PartnerAssign,
    current_user: UserRead = Depends(get_current_user),
) -> TaskRead:
    await _existing_task(task_id)
    if not await TaskService.set_partner(task_id, data.partner_user_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Partner assignment refused")
    return await _existing_task(task_id)
