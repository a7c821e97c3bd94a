"""Entry point for serving the Council Planner API.

Host, port and log level are read from environment variables
``API_HOST``, ``API_PORT`` and ``LOG_LEVEL``; everything else comes
from ``council_planner.app.core.config``.

Usage:
    python run.py
"""
import os

from uvicorn import Config, Server

from council_planner.app.main import app


def main() -> None:
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level=os.getenv("LOG_LEVEL", "info").lower())
    Server(config).run()


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
