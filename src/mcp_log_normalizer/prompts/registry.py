"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP


def _format_levels(levels: Sequence[str] | str) -> str:
    """Return levels as a JSON array literal for prompt display."""
    if isinstance(levels, str):
        items = [s.strip().upper() for s in levels.split(",") if s.strip()]
    else:
        items = [str(s).strip().upper() for s in levels if str(s).strip()]
    if not items:
        return "[]"
    quoted = ", ".join(f'"{item}"' for item in items)
    return f"[{quoted}]"


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def summarize_resource(uri: str) -> list[dict[str, Any]]:
        """Build a prompt that summarizes a resource URI."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a precise assistant. Summarize the provided resource clearly and "
                    "concisely. Extract key points, risks, and actionable items."
                ),
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Summarize this resource:"},
                    {"type": "resource", "uri": uri},
                ],
            },
        ]

    @mcp.prompt()
    def normalize_log_file(
        log_path: str,
        strategy: str = "json",
        levels: Sequence[str] | str = (),
    ) -> list[dict[str, Any]]:
        """Build a prompt that normalizes a log file and reports its structured fields."""
        call_lines = [f"- log_path: {log_path}", f"- strategy: {strategy}"]
        levels_display = _format_levels(levels)
        if levels_display != "[]":
            call_lines.append(f"- levels: {levels_display}")
        call_lines.append("- include_raw: true")
        call_block = "\n".join(call_lines)
        return [
            {
                "role": "system",
                "content": (
                    "You are a log analysis assistant. Work only from tool output; "
                    "do not invent fields or values."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Normalize the log file using normalize_log_file. Follow this workflow:\n"
                    "- Call normalize_log_file with the parameters below.\n"
                    "- Levels must be a list of strings (JSON array), e.g., [\"ERROR\"].\n"
                    "- Report lines listed under errors separately, with their line_no.\n"
                    "- Durations are returned as seconds plus nanoseconds; "
                    "show them in the most readable unit.\n\n"
                    "Call normalize_log_file with:\n"
                    f"{call_block}\n\n"
                    "Return this structure:\n"
                    "1) Loggers and severities seen (counts)\n"
                    "2) Most common data keys with their value types\n"
                    "3) Notable values (slowest durations, error messages)\n"
                    "4) Lines that could not be decoded\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": "Optional: if you need raw context, you can read the log via:",
                    },
                    {"type": "resource", "uri": f"file://{log_path}"},
                ],
            },
        ]
