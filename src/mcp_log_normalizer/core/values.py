"""Typed values extracted from key=value pairs."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, assert_never

from .humantime import Duration, DurationParseError, parse_duration

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)
# Significant digits in I64_MAX.
_MAX_INT_DIGITS = 19


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str


@dataclass(frozen=True, slots=True)
class IntegerValue:
    value: int


@dataclass(frozen=True, slots=True)
class FloatValue:
    value: float


@dataclass(frozen=True, slots=True)
class DurationValue:
    value: Duration


TypedValue = StringValue | IntegerValue | FloatValue | DurationValue


def _parse_int(raw: str) -> int | None:
    if not _INT_RE.fullmatch(raw):
        return None
    digits = raw.lstrip("+-").lstrip("0") or "0"
    if len(digits) > _MAX_INT_DIGITS:
        return None
    n = -int(digits) if raw.startswith("-") else int(digits)
    if n < I64_MIN or n > I64_MAX:
        return None
    return n


def _parse_float(raw: str) -> float | None:
    if not _FLOAT_RE.fullmatch(raw):
        return None
    return float(raw)


def coerce_value(raw: str) -> TypedValue:
    """Classify a raw token as integer, float, duration or string (first match wins)."""
    n = _parse_int(raw)
    if n is not None:
        return IntegerValue(n)

    f = _parse_float(raw)
    if f is not None:
        return FloatValue(f)

    try:
        return DurationValue(parse_duration(raw))
    except DurationParseError:
        return StringValue(raw)


def value_kind(value: TypedValue) -> str:
    """Return the variant name used in serialized output."""
    match value:
        case StringValue():
            return "string"
        case IntegerValue():
            return "integer"
        case FloatValue():
            return "float"
        case DurationValue():
            return "duration"
        case _:
            assert_never(value)


def value_to_json(value: TypedValue) -> dict[str, Any]:
    """Convert a typed value into a tagged JSON-serializable dict."""
    if isinstance(value, DurationValue):
        payload: Any = {"seconds": value.value.seconds, "nanoseconds": value.value.nanoseconds}
    elif isinstance(value, FloatValue) and not math.isfinite(value.value):
        # JSON has no literal for these.
        payload = repr(value.value)
    else:
        payload = value.value
    return {"type": value_kind(value), "value": payload}
