"""
Pydantic schema definitions for service inputs and outputs.

Each domain (users, events, tasks) defines its own Pydantic models for
create payloads, partial-update patches, list queries and read
projections.  Services accept and return only these shapes, never raw
database rows.
"""
