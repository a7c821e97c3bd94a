"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
application and the test suite start without any environment at all.
In a production deployment override at least ``SECRET_KEY``.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Council Planner API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file; empty means console only.
    log_file: str = os.getenv("LOG_FILE", "")

    # Token signing.  ``issuer`` and ``audience`` are embedded into every
    # token and checked on decode, so tokens minted for another
    # deployment sharing the same key are rejected.
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    jwt_issuer: str = os.getenv("JWT_ISSUER", "council_planner")
    jwt_audience: str = os.getenv("JWT_AUDIENCE", "council_planner_clients")

    # Path or connection string for the SQLite database.  If a relative
    # path is provided, it will be resolved relative to the package root
    # by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "council_planner.db")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
