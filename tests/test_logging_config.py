# Tests for the root logger setup

import logging

import pytest

from council_planner.app.core.logging_config import setup_logging


@pytest.fixture
def bare_root(monkeypatch):
    """Return a callable that strips the root logger of handlers for this test.

    pytest attaches its capture handlers when the test body starts, so
    the test calls this first thing.
    """
    root = logging.getLogger()
    created = []

    def _strip():
        handlers = []
        monkeypatch.setattr(root, "handlers", handlers)
        monkeypatch.setattr(root, "level", root.level)
        created.append(handlers)
        return root

    yield _strip
    for handlers in created:
        for handler in list(handlers):
            handler.close()


def test_writes_to_log_file_in_new_directory(bare_root, tmp_path):
    root = bare_root()
    logfile = tmp_path / "logs" / "app.log"

    setup_logging("debug", str(logfile))
    logging.getLogger("council_planner.test").info("archived user %s", 5)
    for handler in root.handlers:
        handler.flush()

    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2
    assert "[INFO] council_planner.test: archived user 5" in logfile.read_text(encoding="utf-8")


def test_unknown_level_falls_back_to_info(bare_root):
    root = bare_root()

    setup_logging("chatty")

    assert root.level == logging.INFO
    assert len(root.handlers) == 1


def test_existing_configuration_is_kept(bare_root):
    root = bare_root()
    existing = logging.NullHandler()
    root.addHandler(existing)

    setup_logging("DEBUG")

    assert root.handlers == [existing]
