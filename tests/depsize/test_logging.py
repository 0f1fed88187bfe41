"""Tests for logging setup."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

import structlog

from depsize.core.logging import setup_logging


class TestSetupLogging:
    def teardown_method(self):
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def test_default_level_is_warning(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("DEPSIZE_LOG_LEVEL", None)
            setup_logging()
        assert logging.getLogger("depsize").level == logging.WARNING

    def test_verbose_forces_debug(self):
        with patch.dict(os.environ, {"DEPSIZE_LOG_LEVEL": "ERROR"}):
            setup_logging(verbose=True)
        assert logging.getLogger("depsize").level == logging.DEBUG

    def test_env_level(self):
        with patch.dict(os.environ, {"DEPSIZE_LOG_LEVEL": "info"}):
            setup_logging()
        assert logging.getLogger("depsize").level == logging.INFO

    def test_json_format_uses_json_renderer(self):
        with patch.dict(os.environ, {"DEPSIZE_LOG_FORMAT": "json"}):
            setup_logging()
        handler = next(
            h
            for h in logging.getLogger().handlers
            if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
        )
        assert any(
            isinstance(p, structlog.processors.JSONRenderer) for p in handler.formatter.processors
        )

    def test_json_event_fields(self, capsys):
        with patch.dict(os.environ, {"DEPSIZE_LOG_FORMAT": "json", "DEPSIZE_LOG_LEVEL": "INFO"}):
            setup_logging()
        structlog.get_logger("depsize.engine").warning("traversal.not_found", package="ghost")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "traversal.not_found"
        assert event["package"] == "ghost"
        assert event["level"] == "warning"
        assert event["logger"] == "depsize.engine"
        assert "timestamp" in event
