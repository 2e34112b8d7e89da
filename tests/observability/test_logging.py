"""Tests for shared observability logging."""

import logging
import time

import pytest

from skinfit.observability.logging import get_logger, set_log_level


def test_get_logger_formats_utc_timestamps(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    fixed = time.struct_time((2020, 1, 2, 3, 4, 5, 3, 2, 0))

    def fake_gmtime(_: float | None = None) -> time.struct_time:
        return fixed

    monkeypatch.setattr(time, "gmtime", fake_gmtime)

    name = "skinfit.test.logging"
    logger = get_logger(name)
    logger.info("Hello")

    captured = capsys.readouterr()
    assert "2020-01-02T03:04:05+0000 INFO skinfit.test.logging: Hello" in captured.err


def test_get_logger_is_singleton_per_name() -> None:
    name = "skinfit.test.logging.singleton"
    logger = get_logger(name)
    logger_again = get_logger(name)

    assert logger is logger_again
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_set_log_level_only_touches_project_loggers() -> None:
    ours = get_logger("skinfit.test.logging.level")
    theirs = logging.getLogger("thirdparty.test.logging.level")
    theirs.setLevel(logging.WARNING)

    try:
        set_log_level(logging.DEBUG)

        assert ours.level == logging.DEBUG
        assert theirs.level == logging.WARNING
    finally:
        set_log_level(logging.INFO)
