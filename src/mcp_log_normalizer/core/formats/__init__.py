"""Log line parsers.

Contains the heuristic logfmt tokenizer and the JSON envelope that wraps it.
"""

from __future__ import annotations

from .base import EnvelopeDecodeError, LogParser, ParseStrategy
from .envelope import Envelope, EnvelopeParser, decode_envelope, merge_fragment
from .logfmt import HeaderCursor, LogfmtLineParser, scan_logfmt, tokenize_message
from .spans import LogfmtScan, Span, SpanRecord


def parser_for(strategy: ParseStrategy | str) -> LogParser:
    """Return the parser for a strategy name ("json" or "logfmt")."""
    try:
        strategy = ParseStrategy(strategy)
    except ValueError as e:
        allowed = ", ".join(s.value for s in ParseStrategy)
        raise ValueError(f"Unknown strategy '{strategy}'. Allowed: {allowed}.") from e
    if strategy is ParseStrategy.JSON:
        return EnvelopeParser()
    return LogfmtLineParser()


__all__ = [
    "Envelope",
    "EnvelopeDecodeError",
    "EnvelopeParser",
    "HeaderCursor",
    "LogParser",
    "LogfmtLineParser",
    "LogfmtScan",
    "ParseStrategy",
    "Span",
    "SpanRecord",
    "decode_envelope",
    "merge_fragment",
    "parser_for",
    "scan_logfmt",
    "tokenize_message",
]
