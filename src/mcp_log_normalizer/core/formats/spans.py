"""Offset-based view of a tokenized line.

The tokenizer records where things are rather than copying them. ``SpanRecord``
keeps the original line plus those offsets and only slices strings out when a
field is read, or when :meth:`SpanRecord.to_record` builds an owned record.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models import LogRecord
from ..values import TypedValue, coerce_value


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open ``[start, end)`` range into a line."""

    start: int
    end: int

    def slice(self, line: str) -> str:
        return line[self.start : self.end]


@dataclass(frozen=True, slots=True)
class LogfmtScan:
    """Offsets found by :func:`~.logfmt.scan_logfmt`."""

    message: Span
    severity: Span | None = None
    logger_name: Span | None = None
    pairs: tuple[tuple[Span, Span], ...] = ()


@dataclass(frozen=True, slots=True)
class SpanRecord:
    line: str
    scan: LogfmtScan

    @property
    def severity(self) -> str | None:
        span = self.scan.severity
        return span.slice(self.line) if span is not None else None

    @property
    def logger_name(self) -> str | None:
        span = self.scan.logger_name
        return span.slice(self.line) if span is not None else None

    @property
    def message(self) -> str:
        return self.scan.message.slice(self.line)

    def pairs(self) -> list[tuple[str, str]]:
        """Raw key/value text in line order, duplicates and empty keys included."""
        return [(k.slice(self.line), v.slice(self.line)) for k, v in self.scan.pairs]

    def data(self) -> dict[str, TypedValue]:
        out: dict[str, TypedValue] = {}
        for key, value in self.pairs():
            if not key:
                continue
            out[key] = coerce_value(value)
        return out

    def to_record(self) -> LogRecord:
        return LogRecord(
            message=self.message,
            severity=self.severity,
            logger_name=self.logger_name,
            data=self.data(),
        )
