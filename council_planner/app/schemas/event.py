"""
Pydantic models for event data.

``EventBase`` contains shared fields; ``EventCreate`` is the creation
payload and ``EventRead`` adds the identifier for responses.
``EventDetail`` additionally carries the event's membership rows.
"""

import sqlite3
from datetime import date, time
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..core.roles import EventRole, EventStatus


class EventBase(BaseModel):
    title: str = Field(..., min_length=1, examples=["Welcome Day"])
    description: Optional[str] = Field(None, examples=["Freshers' welcome event"])
    status: EventStatus = EventStatus.PLANNED
    start_date: date = Field(..., examples=["2025-09-01"])
    end_date: date = Field(..., examples=["2025-09-02"])
    event_time: Optional[time] = Field(None, examples=["10:00:00"])
    location: Optional[str] = Field(None, examples=["Room 1"])
    number_of_participants: int = Field(0, ge=0, examples=[50])

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class EventCreate(EventBase):
    """Schema for creating an event."""
    pass


class EventRead(EventBase):
    """Schema for reading an event."""

    id: int
    created_by: Optional[int] = None

    model_config = {
        "from_attributes": True,
    }


class EventUpdate(BaseModel):
    """Schema for updating an event.

    All fields are optional; only fields present in the payload are
    updated.  Date order is checked against the merged result by
    ``EventService.update_event``.
    """
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[EventStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    event_time: Optional[time] = None
    location: Optional[str] = None
    number_of_participants: Optional[int] = Field(None, ge=0)


class EventListQuery(BaseModel):
    status: Optional[EventStatus] = None
    # Events whose date range overlaps [date_from, date_to] are returned.
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None
    limit: int = Field(100, ge=1, le=1000)
    offset: int = Field(0, ge=0)


class EventUserRead(BaseModel):
    event_id: int
    user_id: int
    role: EventRole


class EventDetail(EventRead):
    members: List[EventUserRead] = []


def event_from_row(row: sqlite3.Row) -> EventRead:
    """Build an ``EventRead`` from an ``events`` row."""
    return EventRead(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        status=EventStatus(row["status"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        event_time=row["event_time"],
        location=row["location"],
        number_of_participants=row["number_of_participants"],
        created_by=row["created_by"],
    )
