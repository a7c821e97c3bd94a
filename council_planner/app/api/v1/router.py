"""
Top‑level router for version 1 of the API.

Aggregates the domain routers under a unified prefix.
"""

from fastapi import APIRouter

from .endpoints import auth, events, tasks, users


router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(events.router, prefix="/events", tags=["events"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
