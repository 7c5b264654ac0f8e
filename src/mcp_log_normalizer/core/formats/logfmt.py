"""Heuristic logfmt tokenizer for free-text messages.

Handles messages such as::

    INFO server::onboarding::location_availability: Updated profile tz=America/Chicago user=7

The leading severity and logger name are peeled off, trailing ``key=value``
pairs become typed data, and what is left is the message.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models import LogRecord
from .spans import LogfmtScan, Span, SpanRecord

SEVERITY_WORDS = frozenset({"INFO", "WARN", "WARNING", "ERROR", "DEBUG", "TRACE", "LOG"})


@dataclass(slots=True)
class HeaderCursor:
    """Tracks where the message starts while header tokens are peeled off.

    A token only extends the header when it begins exactly at
    ``message_start``; once an ordinary token breaks the run, later tokens
    can no longer move it.
    """

    message_start: int = 0

    def claim(self, token_start: int, token_end: int, gap: int = 1) -> bool:
        """Move past ``line[token_start:token_end]`` plus ``gap`` separator chars."""
        if token_start != self.message_start:
            return False
        self.message_start = token_end + gap
        return True


def _is_logger_name(token: str) -> bool:
    return "." in token or ":" in token


def _read_value(line: str, start: int) -> tuple[Span, int]:
    """Read the value beginning at ``start``; return its span and the resume index."""
    n = len(line)
    if start < n and line[start] == '"':
        j = start + 1
        while j < n:
            ch = line[j]
            if ch == "\\":
                j += 2
                continue
            if ch == '"':
                return Span(start + 1, j), j + 1
            j += 1
        return Span(start + 1, n), n

    j = start
    while j < n:
        ch = line[j]
        if ch == "\\":
            j += 2
            continue
        if ch == " ":
            return Span(start, j), j + 1
        j += 1
    return Span(start, n), n


def scan_logfmt(line: str) -> LogfmtScan:
    """Locate severity, logger name, message and key/value pairs in ``line``."""
    n = len(line)
    header = HeaderCursor()
    severity: Span | None = None
    logger_name: Span | None = None
    token_start = 0
    i = 0

    # Header: severity / logger name tokens until '=' or a "name: " terminator.
    while i < n:
        ch = line[i]
        if ch == "=":
            break
        at_colon = ch == ":" and i + 1 < n and line[i + 1] == " "
        if ch == " " or at_colon:
            token = line[token_start:i]
            gap = 2 if at_colon else 1
            if token in SEVERITY_WORDS:
                if severity is None:
                    severity = Span(token_start, i)
                header.claim(token_start, i, gap)
            elif _is_logger_name(token):
                # Past the header a dotted token is just part of the message.
                if header.claim(token_start, i, gap) and logger_name is None:
                    logger_name = Span(token_start, i)
            token_start = i + 1
        i += 1
        if at_colon:
            break

    # Body: key=value pairs; the message ends before the last run of pairs.
    message_end: int | None = None
    pairs: list[tuple[Span, Span]] = []
    while i < n:
        ch = line[i]
        if ch == " ":
            message_end = None
            token_start = i + 1
            i += 1
        elif ch == "=":
            if message_end is None and token_start > 0:
                message_end = token_start - 1
            key = Span(token_start, i)
            value, i = _read_value(line, i + 1)
            pairs.append((key, value))
            token_start = i
        else:
            i += 1

    start = header.message_start
    end = n if message_end is None else message_end
    return LogfmtScan(
        message=Span(start, max(start, end)),
        severity=severity,
        logger_name=logger_name,
        pairs=tuple(pairs),
    )


def tokenize_message(message: str) -> LogRecord:
    """Split a free-text message into severity, logger name, message and data.

    Never fails: unrecognized input comes back as the message with no data.
    """
    return SpanRecord(message, scan_logfmt(message)).to_record()


@dataclass(frozen=True, slots=True)
class LogfmtLineParser:
    """Tokenize the whole raw line (no envelope)."""

    def parse(self, line: str) -> LogRecord:
        return tokenize_message(line)
