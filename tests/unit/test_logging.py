"""Unit tests for femtologging integration helpers.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from minideploy.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_info,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("input_level", "expected_level", "expected_invalid"),
    [
        ("warning", "WARNING", False),
        (" debug ", "DEBUG", False),
        (None, "INFO", True),
        ("", "INFO", True),
        ("nope", "INFO", True),
        ("warn", "WARNING", False),
        ("Fatal", "CRITICAL", False),
    ],
)
def test_normalize_log_level(
    input_level: str | None, expected_level: str, *, expected_invalid: bool
) -> None:
    """Normalize log levels and flag invalid inputs."""
    level, invalid = normalize_log_level(input_level)

    assert level == expected_level, (
        f"Expected {input_level!r} to normalize to {expected_level}."
    )
    assert invalid is expected_invalid


def test_format_log_message_uses_percent_formatting() -> None:
    """Percent formatting produces the expected message."""
    message = format_log_message("cloning %s (%d)", "repo", 3)
    assert message == "cloning repo (3)"


def test_format_log_message_without_args_is_verbatim() -> None:
    """A template without arguments is not interpolated."""
    assert format_log_message("100% done") == "100% done"


def test_log_info_formats_and_passes_level() -> None:
    """log_info formats messages and emits INFO level."""
    logger = _FakeLogger()

    log_info(logger, "hello %s", "world")

    assert logger.calls == [("INFO", "hello world", None, False)]


def test_log_debug_emits_debug_level() -> None:
    """log_debug emits DEBUG level."""
    logger = _FakeLogger()

    log_debug(logger, "resolved %s", "minikube")

    assert logger.calls == [("DEBUG", "resolved minikube", None, False)]


def test_log_warning_forwards_exc_info() -> None:
    """log_warning forwards exc_info to the logger."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_warning(logger, "warning: %s", "oops", exc_info=exc)

    assert logger.calls == [("WARNING", "warning: oops", exc, False)]


def test_log_error_defaults_stack_info_false() -> None:
    """log_error defaults stack_info to False."""
    logger = _FakeLogger()

    log_error(logger, "error: %s", "oops")

    assert logger.calls == [("ERROR", "error: oops", None, False)]


@pytest.mark.parametrize(
    ("input_level", "expected_normalized", "expected_invalid"),
    [
        ("DEBUG", "DEBUG", False),
        ("nope", "INFO", True),
    ],
)
def test_configure_logging(
    monkeypatch: pytest.MonkeyPatch,
    input_level: str,
    expected_normalized: str,
    *,
    expected_invalid: bool,
) -> None:
    """configure_logging normalizes input levels and flags invalid values."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("minideploy.logging.basicConfig", fake_basic_config)

    normalized, invalid = configure_logging(input_level, force=True)

    assert normalized == expected_normalized
    assert invalid is expected_invalid
    assert captured == {"level": expected_normalized, "force": True}
