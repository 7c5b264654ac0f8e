"""Severity normalization helpers."""

from __future__ import annotations

from collections.abc import Iterable

from .models import LogLevel

_LEVEL_ALIASES = {
    "WARN": "WARNING",
    "ERR": "ERROR",
    "FATAL": "CRITICAL",
    "CRIT": "CRITICAL",
    "SEVERE": "CRITICAL",
    "TRACE": "DEBUG",
    "LOG": "INFO",
    "NOTICE": "INFO",
}

ALL_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "UNKNOWN"]


def parse_level(value: str | None) -> LogLevel:
    """Map raw severity text ("info", "WARN", "LOG") onto a LogLevel."""
    if value is None:
        return LogLevel.UNKNOWN
    name = value.strip().upper()
    if not name:
        return LogLevel.UNKNOWN
    name = _LEVEL_ALIASES.get(name, name)
    try:
        return LogLevel[name]
    except KeyError:
        return LogLevel.UNKNOWN


def parse_levels(levels: Iterable[str] | None) -> list[LogLevel] | None:
    """Parse user-supplied level names; unknown names raise ValueError."""
    if levels is None:
        return None
    out: list[LogLevel] = []
    for s in levels:
        name = s.strip().upper()
        if not name:
            continue
        try:
            out.append(LogLevel[_LEVEL_ALIASES.get(name, name)])
        except KeyError as e:
            valid = ", ".join(ALL_LEVELS)
            raise ValueError(
                f"Unknown log level '{s}'. Valid values: {valid}. "
                "Tip: levels is case-insensitive (e.g., 'error', 'WARNING')."
            ) from e
    return out or None
