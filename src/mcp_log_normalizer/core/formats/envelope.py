"""JSON envelope parser.

Each line is a JSON object such as::

    {"dt": "2023-06-04T01:42:46Z", "level": "info", "message": "INFO a.b: hi user=7", "platform": "Syslog"}

The envelope is decoded with pydantic, its ``message`` runs through the
logfmt tokenizer, and the two records are merged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from ..models import LogRecord
from .base import EnvelopeDecodeError
from .logfmt import tokenize_message


class Envelope(BaseModel):
    """Outer structured log; unknown fields are kept verbatim."""

    model_config = ConfigDict(extra="allow")

    dt: str | None = None
    level: str | None = None
    name: str | None = None
    message: str
    platform: str | None = None

    def extension(self) -> dict[str, Any] | None:
        extra = self.model_extra or {}
        return dict(extra) if extra else None

    def to_record(self) -> LogRecord:
        return LogRecord(
            message=self.message,
            timestamp=self.dt,
            severity=self.level,
            logger_name=self.name,
            platform=self.platform,
            extension=self.extension(),
        )


def decode_envelope(line: str) -> Envelope:
    """Decode one JSON envelope line, raising EnvelopeDecodeError on failure."""
    try:
        return Envelope.model_validate_json(line)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        first = errors[0] if errors else {}
        loc = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
        detail = first.get("msg", "invalid envelope")
        raise EnvelopeDecodeError(f"{loc}: {detail}") from e


def merge_fragment(outer: LogRecord, inner: LogRecord) -> LogRecord:
    """Merge a tokenized message fragment into its envelope record.

    - data: union, inner entries win on conflicting keys
    - logger_name: always taken from the fragment
    - severity: envelope value kept when present, else the fragment's
    - message: replaced by the fragment's residual message
    """
    data = dict(outer.data)
    data.update(inner.data)
    return replace(
        outer,
        severity=outer.severity if outer.severity is not None else inner.severity,
        logger_name=inner.logger_name,
        message=inner.message,
        data=data,
    )


@dataclass(frozen=True, slots=True)
class EnvelopeParser:
    """Decode a JSON envelope and tokenize its message."""

    def parse(self, line: str) -> LogRecord:
        envelope = decode_envelope(line.strip())
        return merge_fragment(envelope.to_record(), tokenize_message(envelope.message))
