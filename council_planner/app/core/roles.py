"""
Role and status enumerations.

Each axis has its own type: a user's global role, a membership role
within one event and a membership role within one task are unrelated
even where their integer values coincide (``EventRole.ORGANIZER`` and
``TaskRole.EXECUTOR`` are both ``1``).  Values are stored as integers
in the database.
"""

from enum import IntEnum


class UserRole(IntEnum):
    """Global account role."""

    MEMBER = 0
    ORGANIZER = 1
    ADMIN = 2


class EventRole(IntEnum):
    """Membership role of a user within a single event."""

    PARTICIPANT = 0
    ORGANIZER = 1
    # Assigned to the user who created the event.
    MAIN_ORGANIZER = 2


class TaskRole(IntEnum):
    """Membership role of a user within a single task."""

    CREATOR = 0
    EXECUTOR = 1


class EventStatus(IntEnum):
    PLANNED = 0
    IN_PROGRESS = 1
    FINISHED = 2
    CANCELLED = 3


class TaskStatus(IntEnum):
    OPEN = 0
    IN_PROGRESS = 1
    DONE = 2


# Event membership roles allowed to create tasks on that event.
TASK_CREATOR_EVENT_ROLES = (EventRole.ORGANIZER, EventRole.MAIN_ORGANIZER)
