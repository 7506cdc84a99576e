"""femtologging setup and percent-style log helpers.

Every minideploy module logs through ``get_logger(__name__)`` and the
``log_*`` helpers below. Messages are interpolated before they reach
femtologging, which accepts only finished strings.

Example:
>>> from minideploy.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Cloning %s", "https://example.com/app.git")

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger

DEFAULT_LEVEL = "INFO"


class LogLevel(enum.StrEnum):
    """Level names accepted by ``--log-level``."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Spellings users commonly type that femtologging knows under another name.
_ALIASES = {"WARN": LogLevel.WARNING, "FATAL": LogLevel.CRITICAL}


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Map a user-supplied level name onto a femtologging level.

    Args:
        level: Raw value from the command line or environment.

    Returns:
        ``(level, invalid)``. Unknown or empty input yields ``INFO`` with
        ``invalid`` set so the caller can warn about it.

    """
    candidate = (level or "").strip().upper()
    if candidate in LogLevel.__members__:
        return (candidate, False)
    if candidate in _ALIASES:
        return (str(_ALIASES[candidate]), False)
    return (DEFAULT_LEVEL, True)


def configure_logging(level: str, *, force: bool = False) -> tuple[str, bool]:
    """Install the root handler at ``level``.

    ``force`` replaces an earlier configuration, which the CLI needs because
    each command configures logging again from its own ``--log-level``.
    The normalized level and the invalid flag are passed back unchanged from
    ``normalize_log_level``.
    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate ``args`` into ``template`` with ``%`` formatting."""
    if not args:
        return template
    return template % args


class _SupportsLog(typ.Protocol):
    """The slice of the femtologging logger API used here."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _emit(
    logger: _SupportsLog,
    level: LogLevel,
    template: str,
    args: tuple[object, ...],
    exc_info: object | None,
) -> None:
    logger.log(
        str(level),
        format_log_message(template, *args),
        exc_info=exc_info,
        stack_info=False,
    )


def log_debug(logger: _SupportsLog, template: str, *args: object) -> None:
    """Log at DEBUG; used for locator decisions."""
    _emit(logger, LogLevel.DEBUG, template, args, None)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a progress line at INFO.

    Args:
        logger: Destination logger.
        template: ``%``-style message template.
        *args: Values for the template placeholders.
        exc_info: Optional exception to attach.

    """
    _emit(logger, LogLevel.INFO, template, args, exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log at WARNING."""
    _emit(logger, LogLevel.WARNING, template, args, exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log at ERROR; stage failures and rejected arguments end up here."""
    _emit(logger, LogLevel.ERROR, template, args, exc_info)


__all__ = [
    "DEFAULT_LEVEL",
    "LogLevel",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
