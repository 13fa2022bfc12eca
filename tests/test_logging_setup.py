"""Tests for setup_logging."""

import json
import logging

import pytest

from speechtext.logging_setup import UVICORN_LOGGERS, setup_logging


@pytest.fixture
def restore_loggers():
    names = ["", *UVICORN_LOGGERS]
    saved = {
        name: (logging.getLogger(name).handlers[:], logging.getLogger(name).level, logging.getLogger(name).propagate)
        for name in names
    }
    yield
    for name, (handlers, level, propagate) in saved.items():
        target = logging.getLogger(name)
        target.handlers = handlers
        target.setLevel(level)
        target.propagate = propagate


class TestSetupLogging:
    """Tests for the JSON log format."""

    def test_extra_fields_become_json_keys(self, restore_loggers, capsys):
        setup_logging()

        logging.getLogger("speechtext.pipeline").info("Run finished", extra={"run_id": "abc123", "segment_count": 3})

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["message"] == "Run finished"
        assert record["levelname"] == "INFO"
        assert record["name"] == "speechtext.pipeline"
        assert record["run_id"] == "abc123"
        assert record["segment_count"] == 3

    def test_uvicorn_loggers_share_root_handler(self, restore_loggers):
        root = setup_logging(logging.WARNING)

        assert root.level == logging.WARNING
        for name in UVICORN_LOGGERS:
            server_logger = logging.getLogger(name)
            assert server_logger.handlers == root.handlers
            assert server_logger.propagate is False
