from __future__ import annotations

from pathlib import Path

import pytest

from mcp_log_normalizer.core.formats import EnvelopeParser
from mcp_log_normalizer.resources.registry import (
    SAMPLE_LOG,
    _resolve_resource_path,
    duration_units,
)
from mcp_log_normalizer.server.log_server import mcp


def test_sample_log_normalizes() -> None:
    parser = EnvelopeParser()
    records = [parser.parse(line) for line in SAMPLE_LOG.splitlines()]
    assert [r.platform for r in records] == ["Syslog", "Heroku", "Postgres"]
    assert records[2].severity == "LOG"


def test_duration_units_table() -> None:
    units = duration_units()
    assert units["ms"] == 1e-3
    assert units["M"] == 2_630_016.0
    assert units["y"] == 31_557_600.0


def test_resource_path_must_stay_under_base_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOG_NORMALIZER_BASE_DIR", str(tmp_path))
    (tmp_path / "app.log").write_text("x\n", encoding="utf-8")
    (tmp_path / "secret.key").write_text("x\n", encoding="utf-8")

    assert _resolve_resource_path("app.log") == (tmp_path / "app.log").resolve()
    with pytest.raises(ValueError, match="escapes"):
        _resolve_resource_path("../outside.log")
    with pytest.raises(ValueError, match="not allowed"):
        _resolve_resource_path("secret.key")


@pytest.mark.asyncio
async def test_server_exposes_tools() -> None:
    tools = await mcp.list_tools()
    assert {t.name for t in tools} == {"normalize_line", "normalize_log_file", "parse_duration"}
