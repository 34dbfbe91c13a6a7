"""Tests for canopy.server.terminal_errors — readable 500 logging."""

import logging

import pytest

from canopy.server.terminal_errors import (
    format_compact_traceback,
    format_minimal_error,
    log_error,
)


def _raise() -> None:
    raise ValueError("bad input")


def _caught() -> ValueError:
    try:
        _raise()
    except ValueError as exc:
        return exc
    raise AssertionError("unreachable")


class TestFormatting:
    def test_compact_lists_app_frames(self) -> None:
        text = format_compact_traceback(_caught())
        assert text.startswith("ValueError: bad input")
        assert "in _raise" in text

    def test_compact_without_traceback(self) -> None:
        assert format_compact_traceback(ValueError("x")) == "ValueError: x"

    def test_minimal_is_one_line(self) -> None:
        text = format_minimal_error(_caught())
        assert "\n" not in text
        assert text.startswith("ValueError at ")
        assert text.endswith(": bad input")


class TestLogError:
    @pytest.mark.parametrize("style", ["compact", "minimal", "full"])
    def test_styles_log_at_error(
        self,
        style: str,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        monkeypatch.setenv("CANOPY_TRACEBACK", style)
        with caplog.at_level(logging.ERROR, logger="canopy.server"):
            log_error(_caught())
        (record,) = caplog.records
        assert record.levelno == logging.ERROR
        assert record.getMessage().startswith("Server error")

    def test_full_attaches_exc_info(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setenv("CANOPY_TRACEBACK", "full")
        with caplog.at_level(logging.ERROR, logger="canopy.server"):
            log_error(_caught())
        assert caplog.records[0].exc_info is not None
