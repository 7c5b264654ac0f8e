"""Parser interfaces and parse strategies."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from ..models import LogRecord


class LogParser(Protocol):
    """Parser interface: return a LogRecord or raise EnvelopeDecodeError."""

    def parse(self, line: str) -> LogRecord:
        """Normalize one log line."""
        ...


class ParseStrategy(str, Enum):
    """How the outer line is framed."""

    JSON = "json"  # JSON envelope, logfmt inside "message"
    LOGFMT = "logfmt"  # the raw line is the message


class EnvelopeDecodeError(ValueError):
    """The line is not a valid envelope. Fatal for that line only."""
