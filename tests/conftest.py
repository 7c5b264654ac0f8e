from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_envelope_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        lines = [
            {
                "dt": "2023-06-04T01:42:46.344493Z",
                "level": "info",
                "message": (
                    "INFO server::onboarding::location_availability: Updated profile with "
                    "postal code tz=America/Chicago area=- postal_code=76133 user=1023"
                ),
                "platform": "Syslog",
                "syslog": {"appname": "web-2q9fl", "procid": 1},
            },
            {
                "dt": "2023-06-04T01:42:47.001Z",
                "message": "ERROR db.pool: connection lost retries=3 backoff=1.5s",
                "platform": "Heroku",
            },
            {
                "dt": "2023-06-04T01:42:48.120Z",
                "message": "Request completed latency=100.32ms status=200",
            },
        ]
        text = "\n".join(json.dumps(obj) for obj in lines)
        path.write_text(text + "\nnot json at all\n", encoding="utf-8")

    return _write


@pytest.fixture
def write_logfmt_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(
                [
                    "INFO app.worker: job started job=42",
                    "",
                    "WARN app.worker: job slow job=42 elapsed=2m30s",
                    "ERROR app.worker: job failed job=42 reason=\"disk full\"",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

    return _write
