"""
Logging setup for the council planner.

``setup_logging`` is called once by ``create_app``.  Services only ask
for module loggers (``logging.getLogger(__name__)``); permission
refusals are logged at WARNING and successful mutations at INFO, so
the default level shows both.
"""

import logging
from pathlib import Path
from typing import List, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Send application logs to stderr and, if ``logfile`` is set, to that file.

    An existing root configuration (pytest capture, a second
    ``create_app`` call, uvicorn's ``--log-config``) is left untouched.
    Unknown level names fall back to ``INFO``; the directory of
    ``logfile`` is created when missing.
    """
    if logging.getLogger().handlers:
        return

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
    )
