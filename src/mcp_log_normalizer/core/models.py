"""Core data models for log normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .values import TypedValue


class LogLevel(str, Enum):
    """Normalized severity levels used for filtering."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Normalized log record produced by the tokenizer and envelope parser."""

    message: str
    timestamp: str | None = None  # passthrough, never interpreted
    severity: str | None = None  # raw severity text as found ("info", "ERROR")
    logger_name: str | None = None
    platform: str | None = None
    extension: dict[str, Any] | None = None  # unknown envelope fields, verbatim
    data: dict[str, TypedValue] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ParsedLine:
    """Outcome of normalizing one input line: a record or a line-level error."""

    line_no: int
    record: LogRecord | None
    error: str | None = None
    raw: str | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None
