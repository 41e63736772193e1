"""Logging helpers for femtologging integration.

This module wraps femtologging so the search engine, provider adapters, and
storage layer share one configuration entry point and one percent-style
formatting convention.

Examples
--------
Configure logging once at start-up, then log a provider outcome:

>>> level, used_default = configure_logging("INFO")
>>> log_info(get_logger(__name__), "Provider %s returned %s", "arxiv", 3)
"""

from __future__ import annotations

import enum
import typing as typ
import warnings

from femtologging import basicConfig, get_logger

DEFAULT_LEVEL_NAME = "INFO"


class LogLevel(enum.StrEnum):
    """Level names understood by femtologging.

    ``WARN`` is accepted for backwards compatibility and resolved to
    ``WARNING`` with a ``DeprecationWarning``.
    """

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def normalise_level(level: str | None) -> tuple[LogLevel, bool]:
    """Resolve a requested level name into a supported ``LogLevel``.

    Parameters
    ----------
    level : str | None
        Requested log level name, case-insensitive.

    Returns
    -------
    tuple[LogLevel, bool]
        The resolved level and whether the default (``INFO``) was used
        because the input was missing or unknown.
    """
    name = (level or "").strip().upper()
    if name not in LogLevel.__members__:
        return (LogLevel(DEFAULT_LEVEL_NAME), True)

    if name == LogLevel.WARN:
        warnings.warn(
            "LogLevel.WARN is deprecated; use LogLevel.WARNING instead.",
            DeprecationWarning,
            stacklevel=3,
        )
        return (LogLevel.WARNING, False)
    return (LogLevel(name), False)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Configure femtologging for the process.

    Returns
    -------
    tuple[str, bool]
        The effective level name and whether the default replaced a missing
        or unknown ``level``.
    """
    resolved, used_default = normalise_level(level)
    basicConfig(level=resolved, force=force)
    return (resolved, used_default)


class _SupportsLog(typ.Protocol):
    """Structural type of femtologging loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> None: ...


def _emit(
    logger: _SupportsLog,
    level: LogLevel,
    template: str,
    args: tuple[object, ...],
    exc_info: object | None,
) -> None:
    message = template % args if args else template
    logger.log(level, message, exc_info=exc_info, stack_info=False)


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit ``template % args`` at DEBUG."""
    _emit(logger, LogLevel.DEBUG, template, args, exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit ``template % args`` at INFO.

    Parameters
    ----------
    logger : _SupportsLog
        femtologging logger, usually from ``get_logger(__name__)``.
    template : str
        Percent-style template; emitted verbatim when ``args`` is empty.
    *args : object
        Values interpolated into ``template``.
    exc_info : object | None, optional
        Exception attached to the record.

    Raises
    ------
    TypeError
        If ``args`` do not match the placeholders in ``template``.
    """
    _emit(logger, LogLevel.INFO, template, args, exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit ``template % args`` at WARNING.

    Recovered provider failures use this level so a degraded search stays
    visible without being reported as an error.
    """
    _emit(logger, LogLevel.WARNING, template, args, exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit ``template % args`` at ERROR."""
    _emit(logger, LogLevel.ERROR, template, args, exc_info)


__all__ = (
    "LogLevel",
    "configure_logging",
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "normalise_level",
)
