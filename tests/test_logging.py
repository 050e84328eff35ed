"""Tests for apidocs logging setup."""

from __future__ import annotations

from pathlib import Path

import pytest

from apidocs.logging import configure_logging, get_logger


def test_console_shows_stage_and_hides_debug(capsys: pytest.CaptureFixture[str]) -> None:
    logger = configure_logging()
    try:
        get_logger("pipeline").info("Finding sources")
        get_logger("runner").debug("hidden detail")
        get_logger().warning("top level")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[apidocs:pipeline] INFO Finding sources" in captured.err
        assert "[apidocs:cli] WARNING top level" in captured.err
        assert "hidden detail" not in captured.err
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


def test_log_file_records_debug_with_thread(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "build.log"
    logger = configure_logging(log_file=log_file)
    try:
        get_logger("parsers.hack").debug("parsed vec.hhi")
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "DEBUG parsers.hack [MainThread]: parsed vec.hhi" in text
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
