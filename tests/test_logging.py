# tests/test_logging.py
from __future__ import annotations

import logging

import pytest
import structlog

from buildnumber.logging import setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_setup_logging_routes_stdlib_records(restore_root, capsys):
    setup_logging("DEBUG", json_logs=True)

    logging.getLogger("buildnumber.services.revision").info("Storing buildNumber: %s", "42", extra={"commit": "abc"})

    err = capsys.readouterr().err
    assert restore_root.level == logging.DEBUG
    assert '"event": "Storing buildNumber: 42"' in err
    assert '"commit": "abc"' in err


def test_unknown_level_defaults_to_info(restore_root):
    setup_logging("chatty")
    assert restore_root.level == logging.INFO
