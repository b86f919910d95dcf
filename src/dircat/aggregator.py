"""
Ordered concatenation of accepted files into one output stream.
"""

from __future__ import annotations

import logging
import sys
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Deque, Iterable, Iterator, TextIO, Tuple

from tqdm import tqdm

from .config import RenderOptions, ScanConfig
from .errors import FileReadError, OutputError
from .matcher import PatternMatcher
from .models import AggregateStats, Candidate, FileContent
from .reader import read_file
from .walker import walk

logger = logging.getLogger(__name__)

SEPARATOR = "// ==========================================="
TRUNCATED_MARKER = "\n// [truncated]"


def format_header(rel: str) -> str:
    return f"\n\n{SEPARATOR}\n// File: {rel}\n{SEPARATOR}\n\n"


def strip_whitespace(text: str) -> str:
    """
    Compact *text* for size-sensitive consumers.

    Blank lines are dropped. ``//`` comment lines are trimmed. Every other
    line keeps its indentation (one space per leading whitespace character)
    and has inner whitespace runs collapsed to a single space.
    """
    out = []
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        if trimmed.startswith("//"):
            out.append(trimmed)
            continue
        indent = len(line) - len(line.lstrip())
        out.append(" " * indent + " ".join(trimmed.split()))
    return "\n".join(out)


class Aggregator:
    """
    Single writer for the concatenated output.

    Files must be handed over in traversal order; the aggregator never
    reorders. Read failures are logged, recorded in ``stats`` and skipped.
    """

    def __init__(self, out: TextIO, options: RenderOptions):
        self.out = out
        self.options = options
        self.stats = AggregateStats()

    def add(self, candidate: Candidate, load: Callable[[], FileContent]) -> bool:
        """Load *candidate* via *load* and append it; False if it was skipped."""
        try:
            content = load()
        except FileReadError as e:
            logger.warning(f"! {e}")
            self.stats.skipped.append((candidate.rel, e.reason))
            return False

        text = content.text
        if self.options.strip_spaces:
            text = strip_whitespace(text)

        if self.options.header:
            self.out.write(format_header(candidate.rel))
        self.out.write(text)
        if content.truncated:
            self.out.write(TRUNCATED_MARKER)
            self.stats.truncated.append(candidate.rel)

        self.stats.files_written += 1
        self.stats.chars_written += len(text)
        logger.debug(f"+ {candidate.rel} ({len(text)} chars)")
        return True


def _ticked(
    candidates: Iterable[Candidate],
    matcher: PatternMatcher,
    stats: AggregateStats,
    bar: tqdm,
) -> Iterator[Candidate]:
    """Tick once per candidate and pass on the accepted ones."""
    for candidate in candidates:
        stats.candidates += 1
        bar.update(1)
        if matcher.accepts(candidate):
            yield candidate
        else:
            logger.debug(f"- {candidate.rel}")


def _run_sequential(accepted: Iterable[Candidate], aggregator: Aggregator, bar: tqdm) -> None:
    opts = aggregator.options
    for candidate in accepted:
        aggregator.add(
            candidate,
            lambda: read_file(candidate.path, encoding=opts.encoding, max_bytes=opts.max_bytes),
        )
        bar.set_postfix(written=aggregator.stats.files_written, refresh=False)


def _run_threaded(accepted: Iterable[Candidate], aggregator: Aggregator, bar: tqdm) -> None:
    # Reads overlap on the pool; results are drained strictly in discovery order.
    opts = aggregator.options
    window = opts.jobs * 4
    pending: Deque[Tuple[Candidate, Future]] = deque()

    def drain(force: bool) -> None:
        while pending and (force or len(pending) >= window or pending[0][1].done()):
            candidate, future = pending.popleft()
            aggregator.add(candidate, future.result)
            bar.set_postfix(written=aggregator.stats.files_written, refresh=False)

    with ThreadPoolExecutor(max_workers=opts.jobs, thread_name_prefix="dircat-read") as pool:
        for candidate in accepted:
            future = pool.submit(
                read_file, candidate.path, encoding=opts.encoding, max_bytes=opts.max_bytes
            )
            pending.append((candidate, future))
            drain(force=False)
        drain(force=True)


def aggregate(
    config: ScanConfig,
    options: RenderOptions,
    out: TextIO,
    progress: bool = True,
    skip: Iterable[Path] = (),
) -> AggregateStats:
    """
    Walk ``config.root``, filter, read and write every accepted file to *out*.

    Args:
        config: What to scan and which files to keep
        options: Reading and rendering options
        out: Text stream receiving the concatenated output
        progress: Show a tqdm counter on stderr (auto-disabled off a TTY)
        skip: Resolved paths never treated as candidates (e.g. the output file)

    Returns:
        AggregateStats for the run

    Raises:
        InvalidRootError: root missing, not a directory or unreadable;
            raised before anything is written
        OutputError: writing to *out* failed
    """
    matcher = PatternMatcher(config)
    candidates = walk(config, prune=matcher.is_excluded_dir, skip=skip)
    aggregator = Aggregator(out, options)

    bar = tqdm(
        desc="Scanning",
        unit="file",
        file=sys.stderr,
        disable=None if progress else True,
        leave=False,
    )
    try:
        accepted = _ticked(candidates, matcher, aggregator.stats, bar)
        if options.jobs > 1:
            _run_threaded(accepted, aggregator, bar)
        else:
            _run_sequential(accepted, aggregator, bar)
        out.flush()
    except OSError as e:
        raise OutputError(f"Could not write output: {e}")
    finally:
        bar.close()

    return aggregator.stats
