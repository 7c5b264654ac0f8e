"""Log file normalization.

This module is the main integration point that reads log files and returns
normalized records, one ``ParsedLine`` per non-blank input line.
"""

from __future__ import annotations

import asyncio
import gzip
import logging
import os
from collections.abc import AsyncIterator, Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from contextlib import aclosing, asynccontextmanager
from functools import partial
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .formats import EnvelopeDecodeError, LogParser, ParseStrategy, parser_for
from .levels import parse_level
from .models import LogLevel, ParsedLine

logger = logging.getLogger(__name__)

MAX_WORKERS_ENV = "LOG_NORMALIZER_MAX_WORKERS"


@asynccontextmanager
async def _open_log(path: Path, *, encoding: str, decode_errors: str):
    """Open ``path`` for async text reading; ``.gz`` files are decompressed."""
    if path.suffix.lower() != ".gz":
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f
        return
    af = wrap(gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors))
    try:
        yield af
    finally:
        await af.close()


async def _read_lines(
    path: Path, *, encoding: str, decode_errors: str, contains: str | None
) -> AsyncIterator[tuple[int, str]]:
    """Yield (line_no, line) for non-blank lines, newline stripped.

    Line numbers count every physical line, blank or filtered ones included.
    """
    async with _open_log(path, encoding=encoding, decode_errors=decode_errors) as f:
        line_no = 0
        async for line in f:
            line_no += 1
            line = line.rstrip("\r\n")
            if not line.strip() or (contains is not None and contains not in line):
                continue
            yield line_no, line


def _worker_count(max_workers: int | None) -> int:
    """Explicit argument first, then $LOG_NORMALIZER_MAX_WORKERS, then the CPU count."""
    source = "max_workers"
    if max_workers is None:
        env = os.getenv(MAX_WORKERS_ENV)
        if not env:
            return min(32, os.cpu_count() or 1)
        source = MAX_WORKERS_ENV
        try:
            max_workers = int(env)
        except ValueError as exc:
            raise ValueError(f"{MAX_WORKERS_ENV} must be an integer") from exc
    if max_workers < 1:
        raise ValueError(f"{source} must be >= 1")
    return max_workers


def normalize_line(
    parser: LogParser,
    line_no: int,
    line: str,
    *,
    include_raw: bool = False,
) -> ParsedLine:
    """Parse one line; an undecodable envelope becomes a line-level error."""
    raw = line if include_raw else None
    try:
        record = parser.parse(line)
    except EnvelopeDecodeError as exc:
        logger.debug("line %d: envelope decode failed: %s", line_no, exc)
        return ParsedLine(line_no=line_no, record=None, error=str(exc), raw=raw)
    return ParsedLine(line_no=line_no, record=record, raw=raw)


async def _normalize_parallel(
    lines: AsyncIterator[tuple[int, str]],
    normalize: Callable[[int, str], ParsedLine],
    *,
    workers: int,
) -> AsyncIterator[ParsedLine]:
    """Run ``normalize`` over ``lines`` on a thread pool, yielding in line order.

    ``workers`` tasks pull from a bounded queue and hand each line to the
    pool; results are buffered until every earlier line has been yielded.
    """
    loop = asyncio.get_running_loop()
    pending_lines: asyncio.Queue[tuple[int, int, str] | None] = asyncio.Queue(
        maxsize=workers * 4
    )
    finished: asyncio.Queue[tuple[int, ParsedLine] | None] = asyncio.Queue(maxsize=workers * 4)
    errors: list[Exception] = []

    async def feed() -> None:
        try:
            seq = 0
            async for line_no, line in lines:
                await pending_lines.put((seq, line_no, line))
                seq += 1
        except Exception as exc:
            errors.append(exc)
        # Not reached on cancellation, when nobody is left to drain the queue.
        for _ in range(workers):
            await pending_lines.put(None)

    async def work(executor: ThreadPoolExecutor) -> None:
        try:
            while (item := await pending_lines.get()) is not None:
                seq, line_no, line = item
                result = await loop.run_in_executor(executor, normalize, line_no, line)
                await finished.put((seq, result))
        except Exception as exc:
            errors.append(exc)
        await finished.put(None)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        tasks = [asyncio.create_task(feed())]
        tasks += [asyncio.create_task(work(executor)) for _ in range(workers)]
        buffered: dict[int, ParsedLine] = {}
        next_seq = 0
        running = workers
        try:
            while running:
                item = await finished.get()
                if item is None:
                    running -= 1
                    continue
                buffered[item[0]] = item[1]
                while next_seq in buffered:
                    yield buffered.pop(next_seq)
                    next_seq += 1
            if errors:
                raise errors[0]
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)


async def iter_records(
    log_path: str | Path,
    *,
    strategy: ParseStrategy | str = ParseStrategy.JSON,
    parser: LogParser | None = None,
    severities: Iterable[LogLevel] | None = None,
    contains: str | None = None,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
    max_workers: int | None = None,
    include_errors: bool = True,
    include_raw: bool = False,
) -> AsyncIterator[ParsedLine]:
    """Yield one ParsedLine per non-blank line, in file order.

    Lines that fail to decode are yielded with ``error`` set (unless
    ``include_errors`` is false) and never stop the iteration. The
    ``severities`` filter applies to records only.
    """
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")

    parser = parser or parser_for(strategy)

    allowed: set[LogLevel] | None = None
    if severities is not None:
        allowed = set(severities)
        if not allowed:
            return

    def keep(result: ParsedLine) -> bool:
        if result.record is None:
            return include_errors
        if allowed is not None and parse_level(result.record.severity) not in allowed:
            return False
        return True

    workers = _worker_count(max_workers)
    lines = _read_lines(path, encoding=encoding, decode_errors=decode_errors, contains=contains)
    normalize = partial(normalize_line, parser, include_raw=include_raw)
    if workers > 1 and path.suffix.lower() != ".gz":
        results = _normalize_parallel(lines, normalize, workers=workers)
    else:
        results = (normalize(line_no, line) async for line_no, line in lines)

    failed = 0
    async with aclosing(lines), aclosing(results):
        async for result in results:
            if not keep(result):
                continue
            if result.error is not None:
                failed += 1
            yield result

    if failed:
        logger.info("%s: %d line(s) could not be decoded", path, failed)


async def get_records(
    log_path: str | Path,
    *,
    limit: int | None = None,
    **iter_kwargs,
) -> list[ParsedLine]:
    """Collect iter_records into a list, stopping after ``limit`` results."""
    out: list[ParsedLine] = []
    if limit is not None and limit <= 0:
        return out
    async with aclosing(iter_records(log_path, **iter_kwargs)) as results:
        async for result in results:
            out.append(result)
            if limit is not None and len(out) >= limit:
                break
    return out
