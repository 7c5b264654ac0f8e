from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence

from mcp_log_normalizer.core.formats import ParseStrategy
from mcp_log_normalizer.core.humantime import DurationParseError, parse_duration
from mcp_log_normalizer.core.levels import parse_levels
from mcp_log_normalizer.core.log_service import get_records
from mcp_log_normalizer.tools.normalize import record_to_dict


def _levels_arg(s: str) -> list[str]:
    names = [part for part in s.split(",") if part.strip()]
    try:
        parse_levels(names)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    if not names:
        raise argparse.ArgumentTypeError("At least one level must be provided")
    return names


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Normalize logfmt-style log lines into structured records.")
    sub = p.add_subparsers(dest="command", required=True)

    n = sub.add_parser("normalize", help="Normalize a log file, one JSON object per line")
    n.add_argument("log_path")
    n.add_argument(
        "--strategy",
        choices=[s.value for s in ParseStrategy],
        default=ParseStrategy.JSON.value,
        help="json: JSON envelope with logfmt message (default); logfmt: raw logfmt lines",
    )
    n.add_argument("--levels", type=_levels_arg, default=None, help="Comma-separated (e.g., ERROR,WARNING)")
    n.add_argument("--contains", default=None, help="Only lines containing this substring")
    n.add_argument("--max", dest="max_results", type=int, default=None, help="Max lines to output (default: no cap)")
    n.add_argument("--workers", type=int, default=None, help="Worker threads (default: LOG_NORMALIZER_MAX_WORKERS or CPU count)")
    n.add_argument("--raw", dest="include_raw", action="store_true", help="Include raw line in output")
    n.add_argument("--no-errors", dest="include_errors", action="store_false", help="Do not report undecodable lines")

    d = sub.add_parser("duration", help="Parse a duration such as 100.32ms or 1h30m")
    d.add_argument("text")
    return p


def _run_normalize(args: argparse.Namespace) -> None:
    results = asyncio.run(
        get_records(
            args.log_path,
            limit=args.max_results,
            strategy=args.strategy,
            severities=parse_levels(args.levels),
            contains=args.contains,
            max_workers=args.workers,
            include_errors=args.include_errors,
            include_raw=args.include_raw,
        )
    )

    failed = 0
    for r in results:
        if r.record is None:
            failed += 1
            print(f"line {r.line_no}: {r.error}", file=sys.stderr)
            continue
        out = record_to_dict(r.record)
        out["line_no"] = r.line_no
        if args.include_raw:
            out["raw"] = r.raw
        print(json.dumps(out, ensure_ascii=False, allow_nan=False))

    print(f"\nNormalized {len(results) - failed} lines, {failed} failed.", file=sys.stderr)


def _run_duration(args: argparse.Namespace) -> None:
    d = parse_duration(args.text)
    print(json.dumps({"seconds": d.seconds, "nanoseconds": d.nanoseconds}))


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)

    try:
        if args.command == "duration":
            _run_duration(args)
        else:
            _run_normalize(args)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except DurationParseError as e:
        print(f"Invalid duration: {e}", file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
