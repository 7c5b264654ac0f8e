"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import asyncio
import gzip
import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_normalizer.core.formats import Envelope
from mcp_log_normalizer.core.formats.logfmt import SEVERITY_WORDS
from mcp_log_normalizer.core.humantime import UNIT_SECONDS

ALLOWED_FILE_SUFFIXES = {".log", ".txt", ".jsonl", ".json"}
BASE_DIR_ENV = "LOG_NORMALIZER_BASE_DIR"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"

SAMPLE_LOG = (
    '{"dt":"2023-06-04T01:42:46.344493Z","level":"info","message":"INFO '
    "server::onboarding::location_availability: Updated profile with postal code "
    'tz=America/Chicago area=- postal_code=76133 user=1023","platform":"Syslog",'
    '"syslog":{"appname":"web-2q9fl","procid":1}}\n'
    '{"dt":"2023-06-04T01:42:47.001Z","message":"Request completed latency=100.32ms '
    'status=200","platform":"Heroku"}\n'
    '{"dt":"2023-06-04T01:42:48.120Z","message":"LOG:  checkpoint complete '
    'elapsed=2.5s","platform":"Postgres"}\n'
)


def _base_dir() -> Path:
    """Return the resolved base directory for file resources."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def _resolve_resource_path(path: str) -> Path:
    """Resolve and validate a resource file path."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    if _allowed_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


def _open_text(path: Path) -> str:
    """Read text from a file, supporting optional gzip compression."""
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            return f.read()
    return path.read_text(encoding=TEXT_ENCODING, errors=TEXT_ERRORS)


def duration_units() -> dict[str, float]:
    """Return the supported duration units and their length in seconds."""
    return dict(UNIT_SECONDS)


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://log-normalizer/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        base = _base_dir()
        return (
            "Resources:\n"
            "- app://log-normalizer/help\n"
            "- app://log-normalizer/examples/sample-log\n"
            "- app://log-normalizer/config/duration-units\n"
            "- app://log-normalizer/config/severity-words\n"
            "- app://log-normalizer/schemas/envelope\n"
            f"- file://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {base}\n"
        )

    @mcp.resource("app://log-normalizer/examples/sample-log")
    def sample_log() -> str:
        """Return a tiny JSON-envelope sample log for demos and tests."""
        return SAMPLE_LOG

    @mcp.resource("app://log-normalizer/config/duration-units")
    def units_resource() -> dict[str, float]:
        """Return the duration units understood by the value coercer."""
        return duration_units()

    @mcp.resource("app://log-normalizer/config/severity-words")
    def severity_words() -> list[str]:
        """Return the header tokens recognized as severities."""
        return sorted(SEVERITY_WORDS)

    @mcp.resource("app://log-normalizer/schemas/envelope")
    def envelope_schema() -> dict[str, Any]:
        """Return the JSON schema for the input envelope."""
        return Envelope.model_json_schema()

    @mcp.resource("file://{path}")
    async def read_file(path: str) -> str:
        """Read a text file from within LOG_NORMALIZER_BASE_DIR."""
        p = _resolve_resource_path(path)
        return await asyncio.to_thread(_open_text, p)
