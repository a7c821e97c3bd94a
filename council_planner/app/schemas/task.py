"""
Pydantic models for tasks.

A task belongs to exactly one event and has two mandatory members, a
creator and an executor, plus an optional partner the creator may
delegate to.  ``TaskUpdate`` is the creator's full patch;
``TaskStatusUpdate`` is the only change an executor may make.
"""

import sqlite3
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..core.roles import TaskRole, TaskStatus


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, examples=["Book the hall"])
    description: Optional[str] = None
    event_id: int
    executor_user_id: int
    start_date: date
    end_date: date
    status: TaskStatus = TaskStatus.OPEN

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class TaskUpdate(BaseModel):
    """Partial update available to the task creator."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[TaskStatus] = None
    executor_user_id: Optional[int] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class PartnerAssign(BaseModel):
    partner_user_id: int


class TaskUserRead(BaseModel):
    task_id: int
    user_id: int
    role: TaskRole


class TaskRead(BaseModel):
    id: int
    event_id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    start_date: date
    end_date: date
    partner_id: Optional[int] = None
    members: List[TaskUserRead] = []

    model_config = {
        "from_attributes": True,
    }


class TaskListQuery(BaseModel):
    event_id: Optional[int] = None
    # Restrict to tasks where ``user_id`` holds a membership row,
    # optionally only in the given role.
    user_id: Optional[int] = None
    role: Optional[TaskRole] = None
    status: Optional[TaskStatus] = None
    limit: int = Field(100, ge=1, le=1000)
    offset: int = Field(0, ge=0)


def task_from_row(row: sqlite3.Row, members: List[TaskUserRead]) -> TaskRead:
    return TaskRead(
        id=row["id"],
        event_id=row["event_id"],
        title=row["title"],
        description=row["description"],
        status=TaskStatus(row["status"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        partner_id=row["partner_id"],
        members=members,
    )
