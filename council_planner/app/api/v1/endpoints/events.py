"""
Event endpoints for API v1.

Reading events requires any authenticated caller.  Creating and
editing events and managing organizers is open to accounts with the
global organizer or administrator role; any caller may join or leave
an event as a participant on their own behalf.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from council_planner.app.core.roles import EventRole, UserRole
from council_planner.app.core.security import get_current_user, require_roles
from council_planner.app.schemas.event import (
    EventCreate,
    EventDetail,
    EventListQuery,
    EventRead,
    EventUpdate,
    EventUserRead,
)
from council_planner.app.schemas.user import UserRead
from council_planner.app.services.event_service import EventService


router = APIRouter()

organizers_only = require_roles(UserRole.ORGANIZER, UserRole.ADMIN)


def _check_self_or_organizer(user_id: int, current_user: UserRead) -> None:
    if current_user.id != user_id and current_user.role not in (UserRole.ORGANIZER, UserRole.ADMIN):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


@router.get("/", response_model=List[EventRead])
async def list_events(
    query: EventListQuery = Depends(),
    current_user: UserRead = Depends(get_current_user),
) -> List[EventRead]:
    """Получить список мероприятий с фильтрами по статусу, датам и тексту."""
    return await EventService.list_events(query)


@router.post("/", response_model=EventDetail, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    current_user: UserRead = Depends(organizers_only),
) -> EventDetail:
    """Create an event; the caller becomes its main organizer."""
    event_id = await EventService.create_event(event, current_user.id)
    return await EventService.get_event(event_id)


@router.get("/{event_id}", response_model=EventDetail)
async def get_event(event_id: int, current_user: UserRead = Depends(get_current_user)) -> EventDetail:
    event = await EventService.get_event(event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.patch("/{event_id}", response_model=EventDetail)
async def update_event(
    event_id: int,
    updates: EventUpdate,
    current_user: UserRead = Depends(organizers_only),
) -> EventDetail:
    """Partially update an event.  Unspecified fields remain unchanged."""
    if not await EventService.get_event(event_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    if not await EventService.update_event(event_id, updates):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="start_date must not be after end_date")
    return await EventService.get_event(event_id)


@router.get("/{event_id}/members", response_model=List[EventUserRead])
async def list_members(
    event_id: int,
    role: Optional[EventRole] = Query(None),
    current_user: UserRead = Depends(get_current_user),
) -> List[EventUserRead]:
    return await EventService.list_members(event_id, role)


@router.post("/{event_id}/participants/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_participant(
    event_id: int,
    user_id: int,
    current_user: UserRead = Depends(get_current_user),
) -> None:
    _check_self_or_organizer(user_id, current_user)
    if not await EventService.add_participant(event_id, user_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Participant not added")


@router.delete("/{event_id}/participants/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_participant(
    event_id: int,
    user_id: int,
    current_user: UserRead = Depends(get_current_user),
) -> None:
    _check_self_or_organizer(user_id, current_user)
    if not await EventService.remove_participant(event_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Participant not found")


@router.post("/{event_id}/organizers/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_organizer(
    event_id: int,
    user_id: int,
    current_user: UserRead = Depends(organizers_only),
) -> None:
    if not await EventService.add_organizer(event_id, user_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Organizer not added")


@router.delete("/{event_id}/organizers/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_organizer(
    event_id: int,
    user_id: int,
    current_user: UserRead = Depends(organizers_only),
) -> None:
    if not await EventService.remove_organizer(event_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organizer not found")
