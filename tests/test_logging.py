"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from portfolio_core.config import LoggingConfig
from portfolio_core.indicators import risk_metrics
from portfolio_core.logging import get_logger, setup_logging, setup_logging_from_config
from portfolio_core.logging.setup import RENDERERS


def _lines(err: str) -> list[dict]:
    return [json.loads(line) for line in err.strip().splitlines()]


class TestSetupLogging:
    def test_json_format(self, capsys):
        setup_logging(level="INFO", log_format="json")
        logger = get_logger("test_json")
        logger.info("test message", asset="BTC")

        line = json.loads(capsys.readouterr().err.strip())
        assert line["event"] == "test message"
        assert line["asset"] == "BTC"
        assert line["level"] == "info"
        assert line["logger"] == "test_json"
        assert "timestamp" in line

    def test_console_format(self, capsys):
        setup_logging(level="INFO", log_format="console")
        logger = get_logger("test_console")
        logger.info("hello console", profile="degen")

        captured = capsys.readouterr()
        assert "hello console" in captured.err
        assert "degen" in captured.err

    def test_invalid_format(self):
        with pytest.raises(ValueError):
            setup_logging(log_format="xml")

    @pytest.mark.parametrize("log_format", sorted(RENDERERS))
    def test_every_renderer_replaces_root_handler(self, log_format, capsys):
        setup_logging(log_format=log_format)
        setup_logging(log_format=log_format)
        assert len(logging.getLogger().handlers) == 1
        get_logger("test_renderers").info("rendered", fmt=log_format)
        assert capsys.readouterr().err.count("rendered") == 1

    def test_log_level_filtering(self, capsys):
        setup_logging(level="WARNING", log_format="json")
        logger = get_logger("test_level")
        logger.info("should be hidden")
        logger.warning("should appear")

        captured = capsys.readouterr()
        assert "should be hidden" not in captured.err
        assert "should appear" in captured.err

    def test_get_logger_with_context(self, capsys):
        setup_logging(level="INFO", log_format="json")
        logger = get_logger("test_ctx", portfolio="p1", risk_profile="balanced")
        logger.info("context test")

        line = json.loads(capsys.readouterr().err.strip())
        assert line["portfolio"] == "p1"
        assert line["risk_profile"] == "balanced"

    def test_contextvars_binding(self, capsys):
        setup_logging(level="INFO", log_format="json")
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(run_id="abc123")

        get_logger("test_ctxvars").info("with context var")

        line = json.loads(capsys.readouterr().err.strip())
        assert line["run_id"] == "abc123"

        structlog.contextvars.clear_contextvars()

    def test_from_config(self, capsys):
        setup_logging_from_config(LoggingConfig(level="ERROR", format="json"))
        logger = get_logger("test_cfg")
        logger.warning("filtered")
        logger.error("kept")

        lines = _lines(capsys.readouterr().err)
        assert [line["event"] for line in lines] == ["kept"]


class TestEngineEvents:
    def test_degenerate_ratio_warning(self, capsys):
        setup_logging(level="WARNING", log_format="json")
        result = risk_metrics(100, 100, 110, account_size=10_000)

        assert result.degenerate
        line = json.loads(capsys.readouterr().err.strip())
        assert line["event"] == "degenerate_ratio"
        assert line["level"] == "warning"
        assert line["logger"] == "indicators.levels"
