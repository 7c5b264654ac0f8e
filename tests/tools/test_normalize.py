from __future__ import annotations

import json
from pathlib import Path

import pytest

from mcp_log_normalizer.cli import main as cli_main
from mcp_log_normalizer.core.humantime import UnknownUnit
from mcp_log_normalizer.tools.normalize import (
    HARD_LIMIT,
    normalize_line_impl,
    normalize_log_file_impl,
    parse_duration_impl,
)


def test_normalize_line_impl_envelope() -> None:
    line = json.dumps(
        {"dt": "2023-06-04T01:42:47Z", "message": "Request completed latency=100.32ms", "region": "us"}
    )
    out = normalize_line_impl(line=line)

    assert out["timestamp"] == "2023-06-04T01:42:47Z"
    assert out["message"] == "Request completed"
    assert out["extension"] == {"region": "us"}
    assert out["data"]["latency"] == {
        "type": "duration",
        "value": {"seconds": 0, "nanoseconds": 100_320_000},
    }


def test_normalize_line_impl_logfmt() -> None:
    out = normalize_line_impl(line="WARN cache.lru: evicted n=12 ratio=0.5", strategy="logfmt")

    assert out["severity"] == "WARN"
    assert out["logger_name"] == "cache.lru"
    assert out["data"] == {
        "n": {"type": "integer", "value": 12},
        "ratio": {"type": "float", "value": 0.5},
    }
    assert "extension" not in out


def test_normalize_line_impl_bad_envelope_raises() -> None:
    with pytest.raises(ValueError, match="Could not decode line"):
        normalize_line_impl(line="plain text")


@pytest.mark.asyncio
async def test_normalize_log_file_impl_splits_errors(tmp_path: Path, write_envelope_log) -> None:
    log = tmp_path / "app.log"
    write_envelope_log(log)

    out = await normalize_log_file_impl(log_path=str(log), include_raw=True)

    assert out["count"] == 3
    assert [e["line_no"] for e in out["entries"]] == [1, 2, 3]
    assert out["entries"][0]["record"]["platform"] == "Syslog"
    assert out["errors"][0]["line_no"] == 4
    assert out["errors"][0]["raw"] == "not json at all"


@pytest.mark.asyncio
async def test_normalize_log_file_impl_levels(tmp_path: Path, write_logfmt_log) -> None:
    log = tmp_path / "worker.log"
    write_logfmt_log(log)

    out = await normalize_log_file_impl(
        log_path=str(log), strategy="logfmt", levels=["warning", "error"]
    )

    assert [e["record"]["severity"] for e in out["entries"]] == ["WARN", "ERROR"]
    slow = out["entries"][0]["record"]["data"]["elapsed"]
    assert slow == {"type": "duration", "value": {"seconds": 150, "nanoseconds": 0}}
    assert "raw" not in out["entries"][0]


@pytest.mark.asyncio
async def test_normalize_log_file_impl_rejects_bad_limit(tmp_path: Path, write_logfmt_log) -> None:
    log = tmp_path / "worker.log"
    write_logfmt_log(log)

    with pytest.raises(ValueError, match="limit"):
        await normalize_log_file_impl(log_path=str(log), limit=0)
    assert HARD_LIMIT == 5000


def test_parse_duration_impl() -> None:
    assert parse_duration_impl(text="189.457178ms") == {
        "seconds": 0,
        "nanoseconds": 189_457_178,
        "total_nanoseconds": 189_457_178,
    }
    with pytest.raises(UnknownUnit):
        parse_duration_impl(text="123.1234")


def test_cli_normalize_prints_json_lines(
    tmp_path: Path, write_envelope_log, capsys: pytest.CaptureFixture[str]
) -> None:
    log = tmp_path / "app.log"
    write_envelope_log(log)

    cli_main(["normalize", str(log), "--workers", "1"])

    captured = capsys.readouterr()
    rows = [json.loads(line) for line in captured.out.splitlines() if line.strip()]
    assert [r["line_no"] for r in rows] == [1, 2, 3]
    assert rows[1]["severity"] == "ERROR"
    assert "line 4:" in captured.err


def test_cli_duration(capsys: pytest.CaptureFixture[str]) -> None:
    cli_main(["duration", "1h30m"])
    assert json.loads(capsys.readouterr().out) == {"seconds": 5400, "nanoseconds": 0}


def test_cli_invalid_duration_exits_2(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli_main(["duration", "127.0.0.1"])
    assert exc.value.code == 2
    assert "Invalid duration" in capsys.readouterr().err


def test_cli_missing_file_exits_2(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli_main(["normalize", str(tmp_path / "missing.log")])
    assert exc.value.code == 2


def test_cli_normalize_output_is_strict_json(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    log = tmp_path / "ratios.log"
    log.write_text("ratio computed r=NaN top=inf\n", encoding="utf-8")

    cli_main(["normalize", str(log), "--strategy", "logfmt", "--workers", "1"])

    (row,) = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    data = json.loads(row, parse_constant=lambda c: pytest.fail(f"bare {c} in output"))["data"]
    assert data["r"] == {"type": "float", "value": "nan"}
    assert data["top"] == {"type": "float", "value": "inf"}
