"""
Application package initializer.

The project is split by domain: accounts and authentication, users,
events and tasks.  Each domain has its Pydantic schemas in ``schemas``,
its business rules in ``services`` and a thin router in
``api/v1/endpoints``.  Services never call each other; they share the
SQLite store defined in ``core.db``.
"""

from .main import app  # noqa: F401
