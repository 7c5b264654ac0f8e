"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mcp_log_normalizer.core.formats import parser_for
from mcp_log_normalizer.core.humantime import parse_duration
from mcp_log_normalizer.core.levels import parse_levels
from mcp_log_normalizer.core.log_service import get_records, normalize_line
from mcp_log_normalizer.core.models import LogRecord, ParsedLine
from mcp_log_normalizer.core.values import value_to_json

DEFAULT_LIMIT = 200
HARD_LIMIT = 5000


def record_to_dict(record: LogRecord) -> dict[str, Any]:
    """Convert a LogRecord into a JSON-serializable dict."""
    d: dict[str, Any] = {
        "timestamp": record.timestamp,
        "severity": record.severity,
        "logger_name": record.logger_name,
        "message": record.message,
        "platform": record.platform,
        "data": {k: value_to_json(v) for k, v in record.data.items()},
    }
    if record.extension:
        d["extension"] = record.extension
    return d


def parsed_line_to_dict(result: ParsedLine, *, include_raw: bool) -> dict[str, Any]:
    """Convert a ParsedLine into a JSON-serializable dict."""
    d: dict[str, Any] = {"line_no": result.line_no}
    if result.record is not None:
        d["record"] = record_to_dict(result.record)
    else:
        d["error"] = result.error
    if include_raw and result.raw is not None:
        d["raw"] = result.raw
    return d


def normalize_line_impl(*, line: str, strategy: str = "json") -> dict[str, Any]:
    """Implementation for the `normalize_line` MCP tool."""
    result = normalize_line(parser_for(strategy), 1, line)
    if result.record is None:
        raise ValueError(f"Could not decode line: {result.error}")
    return record_to_dict(result.record)


async def normalize_log_file_impl(
    *,
    log_path: str,
    strategy: str = "json",
    levels: Sequence[str] | None = None,
    contains: str | None = None,
    limit: int | None = None,
    include_errors: bool = True,
    include_raw: bool = False,
) -> dict[str, Any]:
    """Implementation for the `normalize_log_file` MCP tool.

    Notes
    -----
    - levels filters records by normalized severity; undecodable lines are
      reported separately and are not subject to the filter.
    - limit is hard-capped at HARD_LIMIT.
    """
    if limit is None:
        limit = DEFAULT_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    if limit > HARD_LIMIT:
        limit = HARD_LIMIT

    results = await get_records(
        log_path,
        limit=limit,
        parser=parser_for(strategy),
        severities=parse_levels(levels),
        contains=contains,
        include_errors=include_errors,
        include_raw=include_raw,
    )

    entries = [parsed_line_to_dict(r, include_raw=include_raw) for r in results if r.ok]
    errors = [parsed_line_to_dict(r, include_raw=include_raw) for r in results if not r.ok]
    return {"count": len(entries), "entries": entries, "errors": errors}


def parse_duration_impl(*, text: str) -> dict[str, Any]:
    """Implementation for the `parse_duration` MCP tool."""
    d = parse_duration(text)
    return {
        "seconds": d.seconds,
        "nanoseconds": d.nanoseconds,
        "total_nanoseconds": d.total_nanoseconds,
    }
