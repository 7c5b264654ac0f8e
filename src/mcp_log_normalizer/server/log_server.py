"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (e.g., normalize a line or a log file)
- Resources: addressable data blobs (e.g., duration units, envelope schema)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_log_normalizer.server.log_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_normalizer.prompts.registry import register_prompts
from mcp_log_normalizer.resources.registry import register_resources
from mcp_log_normalizer.tools.normalize import (
    normalize_line_impl,
    normalize_log_file_impl,
    parse_duration_impl,
)

LOGGER = logging.getLogger(__name__)

LOG_LEVEL_ENV = "LOG_NORMALIZER_LOG_LEVEL"


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("log-normalizer", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
def normalize_line(line: str, strategy: str = "json") -> dict[str, Any]:
    """Normalize a single log line into a structured record.

    Parameters
    ----------
    line:
        The raw log line.
    strategy:
        "json" for a JSON envelope whose `message` holds logfmt-style text,
        "logfmt" to tokenize the raw line directly.

    Returns
    -------
    dict:
        {"timestamp", "severity", "logger_name", "message", "platform", "data", ["extension"]}
        where each data value is {"type": ..., "value": ...}.
    """
    return normalize_line_impl(line=line, strategy=strategy)


@mcp.tool()
async def normalize_log_file(
    log_path: str,
    strategy: str = "json",
    levels: Sequence[str] | None = None,
    contains: str | None = None,
    limit: int | None = None,
    include_errors: bool = True,
    include_raw: bool = False,
) -> dict[str, Any]:
    """Normalize every line of a local log file.

    Parameters
    ----------
    log_path:
        Path to a local log file. Supports plain text and .gz.
    strategy:
        "json" (envelope) or "logfmt" (raw line).
    levels:
        Filter records by severity names (e.g., ["error", "warning"]). Case-insensitive.
    contains:
        Substring filter applied to the raw line.
    limit:
        Maximum number of lines returned (hard-capped in the implementation).
    include_errors:
        Whether lines that could not be decoded are reported under "errors".
    include_raw:
        Whether to include the original raw log line in each result.

    Returns
    -------
    dict:
        {"count": int, "entries": list[dict], "errors": list[dict]}
    """
    return await normalize_log_file_impl(
        log_path=log_path,
        strategy=strategy,
        levels=levels,
        contains=contains,
        limit=limit,
        include_errors=include_errors,
        include_raw=include_raw,
    )


@mcp.tool()
def parse_duration(text: str) -> dict[str, Any]:
    """Parse a human-written duration such as "100.32ms" or "1h30m".

    Returns
    -------
    dict:
        {"seconds": int, "nanoseconds": int, "total_nanoseconds": int}
    """
    return parse_duration_impl(text=text)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
