from __future__ import annotations

from datetime import timedelta

import pytest

from mcp_log_normalizer.core.humantime import (
    Duration,
    DurationParseError,
    EmptyInput,
    InvalidCharacter,
    NumberOverflow,
    UnknownUnit,
    parse_duration,
)


def test_decimal_milliseconds() -> None:
    # 189 ms + 457178 ns
    assert parse_duration("189.457178ms") == Duration(0, 189_000_000 + 457_178)


def test_rounding_to_nearest_nanosecond() -> None:
    # 100 ms + 320 us
    assert parse_duration("100.32ms") == Duration(0, 100_320_000)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2h", Duration(7200)),
        ("15s", Duration(15)),
        ("3 days", Duration(259_200)),
        ("1w", Duration(604_800)),
        ("1M", Duration(2_630_016)),
        ("1y", Duration(31_557_600)),
        ("250us", Duration(0, 250_000)),
        ("250µs", Duration(0, 250_000)),
        ("42ns", Duration(0, 42)),
        ("1.5s", Duration(1, 500_000_000)),
        (".5s", Duration(0, 500_000_000)),
    ],
)
def test_single_group(text: str, expected: Duration) -> None:
    assert parse_duration(text) == expected


def test_groups_accumulate() -> None:
    assert parse_duration("1h30m") == Duration(5400)
    assert parse_duration("1h 30m 15s") == Duration(5415)


def test_surrounding_whitespace_is_ignored() -> None:
    assert parse_duration("  5s  ") == Duration(5)


def test_fraction_leading_zeros_are_dropped() -> None:
    # "05" accumulates to 5 with one digit, so it reads as .5
    assert parse_duration("1.05s") == Duration(1, 500_000_000)


def test_nanoseconds_are_not_carried() -> None:
    d = parse_duration("600ms 600ms")
    assert d == Duration(0, 1_200_000_000)
    assert d.total_nanoseconds == 1_200_000_000


def test_nanosecond_total_overflows_u32() -> None:
    # 900 ms each; the fifth group pushes the sum past 2**32 - 1 ns.
    assert parse_duration("900ms " * 4) == Duration(0, 3_600_000_000)
    with pytest.raises(NumberOverflow):
        parse_duration("900ms " * 5)


def test_missing_unit_fails() -> None:
    with pytest.raises(UnknownUnit) as exc:
        parse_duration("123.1234")
    assert exc.value.unit == ""
    assert exc.value.value == 123


def test_ip_address_is_not_a_duration() -> None:
    with pytest.raises(InvalidCharacter) as exc:
        parse_duration("127.0.0.1")
    assert exc.value.offset == 5


def test_unknown_unit_reports_text_and_value() -> None:
    with pytest.raises(UnknownUnit) as exc:
        parse_duration("5fortnights")
    assert exc.value.unit == "fortnights"
    assert exc.value.value == 5


def test_units_are_case_sensitive() -> None:
    assert parse_duration("1m") == Duration(60)
    assert parse_duration("1M") == Duration(2_630_016)
    with pytest.raises(UnknownUnit):
        parse_duration("1MS")


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_empty(text: str) -> None:
    with pytest.raises(EmptyInput):
        parse_duration(text)


def test_invalid_character_offset_is_in_bytes() -> None:
    with pytest.raises(InvalidCharacter) as exc:
        parse_duration("5µs!")
    # "5" is one byte, "µ" is two, "s" is one
    assert exc.value.offset == 4


@pytest.mark.parametrize("text", ["ms", "-5s", "5s ms", "1/2h", "."])
def test_invalid_structure(text: str) -> None:
    with pytest.raises(InvalidCharacter):
        parse_duration(text)


def test_digit_overflow() -> None:
    with pytest.raises(NumberOverflow):
        parse_duration("18446744073709551616s")


def test_unit_multiplication_overflow() -> None:
    with pytest.raises(NumberOverflow):
        parse_duration("18446744073709551615y")


def test_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        parse_duration("nope")
    assert issubclass(DurationParseError, ValueError)


def test_to_timedelta() -> None:
    assert parse_duration("1h30m").to_timedelta() == timedelta(hours=1, minutes=30)
    assert parse_duration("100.32ms").to_timedelta() == timedelta(milliseconds=100, microseconds=320)
