"""Human-friendly duration parsing ("100.32ms", "1h30m", "2 hours").

A duration string is a sequence of ``<quantity><unit>`` groups. Each group
contributes ``multiplier * quantity`` seconds; the whole seconds and the
sub-second remainder (in nanoseconds) are summed separately across groups.

Two behaviours to be aware of:

- the fraction divisor is derived from the digit count of the accumulated
  fraction value, so leading zeros are lost ("1.05s" reads as 1.5s);
- nanoseconds are never carried into seconds, so ``Duration.nanoseconds``
  can exceed one billion when several groups are summed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta

U64_MAX = 2**64 - 1
U32_MAX = 2**32 - 1

# Seconds per unit. Months are 30.44 days, years 365.25 days.
UNIT_SECONDS: dict[str, float] = {
    "nanos": 1e-9,
    "nsec": 1e-9,
    "ns": 1e-9,
    "usec": 1e-6,
    "us": 1e-6,
    "µs": 1e-6,
    "millis": 1e-3,
    "msec": 1e-3,
    "ms": 1e-3,
    "seconds": 1.0,
    "second": 1.0,
    "secs": 1.0,
    "sec": 1.0,
    "s": 1.0,
    "minutes": 60.0,
    "minute": 60.0,
    "min": 60.0,
    "mins": 60.0,
    "m": 60.0,
    "hours": 3600.0,
    "hour": 3600.0,
    "hr": 3600.0,
    "hrs": 3600.0,
    "h": 3600.0,
    "days": 86400.0,
    "day": 86400.0,
    "d": 86400.0,
    "weeks": 604800.0,
    "week": 604800.0,
    "w": 604800.0,
    "months": 2_630_016.0,
    "month": 2_630_016.0,
    "M": 2_630_016.0,
    "years": 31_557_600.0,
    "year": 31_557_600.0,
    "y": 31_557_600.0,
}


@dataclass(frozen=True, slots=True)
class Duration:
    """Whole seconds plus a nanosecond remainder (not normalized)."""

    seconds: int
    nanoseconds: int = 0

    @property
    def total_nanoseconds(self) -> int:
        return self.seconds * 1_000_000_000 + self.nanoseconds

    def to_timedelta(self) -> timedelta:
        # timedelta only resolves microseconds.
        return timedelta(seconds=self.seconds, microseconds=self.nanoseconds / 1000)


class DurationParseError(ValueError):
    """Base class for duration parsing failures."""


class EmptyInput(DurationParseError):
    """The value was empty or only whitespace."""

    def __init__(self) -> None:
        super().__init__("value was empty")


class InvalidCharacter(DurationParseError):
    """A character outside digits, '.', unit letters and whitespace.

    ``offset`` is the UTF-8 byte offset of the character.
    """

    def __init__(self, offset: int) -> None:
        super().__init__(f"invalid character at {offset}")
        self.offset = offset


class NumberExpected(DurationParseError):
    """A number was expected at ``offset``.

    Part of the error taxonomy; the current grammar never raises it.
    """

    def __init__(self, offset: int) -> None:
        super().__init__(f"expected number at {offset}")
        self.offset = offset


class UnknownUnit(DurationParseError):
    """A well-formed quantity followed by an unrecognized unit."""

    def __init__(self, unit: str, value: int) -> None:
        if unit:
            msg = f"unknown time unit {unit!r}, supported units: {_supported_units()}"
        else:
            msg = f"time unit needed, for example {value}sec or {value}ms"
        super().__init__(msg)
        self.unit = unit
        self.value = value


class NumberOverflow(DurationParseError):
    """A quantity or running total does not fit the 64-bit range."""

    def __init__(self) -> None:
        super().__init__("number is too large")


def _supported_units() -> str:
    return ", ".join(sorted(set(UNIT_SECONDS), key=lambda u: (UNIT_SECONDS[u], len(u))))


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _push_digit(acc: int, ch: str) -> int:
    acc = acc * 10 + (ord(ch) - 48)
    if acc > U64_MAX:
        raise NumberOverflow()
    return acc


def _byte_offset(text: str, index: int) -> int:
    return len(text[:index].encode("utf-8"))


def _round_half_away(x: float) -> int:
    r = math.floor(x)
    if x - r >= 0.5:
        r += 1
    return int(r)


def _group_parts(multiplier: float, integer: int, fraction: int) -> tuple[int, int]:
    """Return (whole seconds, nanoseconds) contributed by one group."""
    places = len(str(fraction))
    quantity = integer + fraction / 10.0**places
    sec = multiplier * quantity
    if sec >= 2.0**64:
        raise NumberOverflow()
    frac, whole = math.modf(sec)
    return int(whole), _round_half_away(frac * 1e9)


class _Parser:
    def __init__(self, src: str) -> None:
        self.src = src
        self.pos = 0
        self.seconds = 0
        self.nanos = 0

    def _fail(self) -> InvalidCharacter:
        return InvalidCharacter(_byte_offset(self.src, self.pos))

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.src) and self.src[self.pos].isspace():
            self.pos += 1

    def _quantity(self) -> tuple[int, int] | None:
        """Read ``digits[.digits]``; None when the input is exhausted first."""
        src = self.src
        integer = 0
        fraction = 0
        digits = 0
        while self.pos < len(src):
            ch = src[self.pos]
            if _is_digit(ch):
                integer = _push_digit(integer, ch)
                digits += 1
                self.pos += 1
            elif ch == ".":
                dot = self.pos
                self.pos += 1
                while self.pos < len(src) and _is_digit(src[self.pos]):
                    fraction = _push_digit(fraction, src[self.pos])
                    digits += 1
                    self.pos += 1
                if not digits:
                    self.pos = dot
                    raise self._fail()
                break
            elif ch.isspace():
                self.pos += 1
            elif ch.isalpha() and digits:
                break
            else:
                raise self._fail()
        if not digits:
            return None
        return integer, fraction

    def _unit(self) -> str:
        start = self.pos
        while self.pos < len(self.src) and self.src[self.pos].isalpha():
            self.pos += 1
        return self.src[start : self.pos]

    def _add(self, unit: str, integer: int, fraction: int) -> None:
        try:
            multiplier = UNIT_SECONDS[unit]
        except KeyError:
            raise UnknownUnit(unit, integer) from None
        whole, nanos = _group_parts(multiplier, integer, fraction)
        self.seconds += whole
        self.nanos += nanos
        if self.seconds > U64_MAX or self.nanos > U32_MAX:
            raise NumberOverflow()

    def parse(self) -> Duration:
        groups = 0
        while True:
            quantity = self._quantity()
            if quantity is None:
                if not groups:
                    raise EmptyInput()
                break
            integer, fraction = quantity
            self._skip_whitespace()
            unit = self._unit()
            if not unit and self.pos < len(self.src):
                raise self._fail()
            self._add(unit, integer, fraction)
            groups += 1
        return Duration(self.seconds, self.nanos)


def parse_duration(text: str) -> Duration:
    """Parse a duration such as ``"189.457178ms"`` or ``"1h 30m"``.

    Raises a :class:`DurationParseError` subclass on malformed input.
    """
    return _Parser(text).parse()
