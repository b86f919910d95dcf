"""
CLI entrypoint for dircat.
"""

from __future__ import annotations

import argparse
import codecs
import io
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

from . import __version__
from .aggregator import aggregate
from .config import RenderOptions, ScanConfig, load_extra_patterns, split_list
from .errors import ConfigFileError, InvalidRootError, OutputError
from .log import SUCCESS, setup_logging
from .walker import validate_root

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {n}")
    return n


def _encoding(value: str) -> str:
    try:
        codecs.lookup(value)
        "".encode(value)
    except LookupError:
        raise argparse.ArgumentTypeError(f"unknown text encoding {value!r}")
    return value


@contextmanager
def _stdout_writer() -> Iterator[TextIO]:
    """Yield a UTF-8 view of stdout, whatever the console encoding is."""
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        yield sys.stdout
        return
    sys.stdout.flush()
    out = io.TextIOWrapper(buffer, encoding="utf-8", newline="\n")
    try:
        yield out
    finally:
        out.flush()
        # leave sys.stdout usable
        out.detach()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dircat",
        description="Concatenate the files of a directory tree into one stream.",
    )
    p.add_argument("path", nargs="?", type=Path, default=Path("."), help="Directory to scan (default: .)")
    p.add_argument(
        "-e",
        "--ext",
        action="append",
        metavar="EXT[,EXT...]",
        help="Extensions to include, comma-separated, repeatable (default: all)",
    )
    p.add_argument(
        "-x",
        "--exclude",
        action="append",
        metavar="GLOB[,GLOB...]",
        help="Glob patterns to exclude, e.g. '**/test/**', comma-separated, repeatable",
    )
    p.add_argument(
        "-n",
        "--include-no-ext",
        action="store_true",
        help="Include files without an extension",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write to this file instead of stdout",
    )
    p.add_argument(
        "--exclude-from",
        type=Path,
        metavar="FILE",
        help="File with extra exclude patterns (one per line)",
    )
    p.add_argument("--gitignore", action="store_true", help="Also exclude what the root .gitignore ignores")
    p.add_argument(
        "--no-default-excludes",
        action="store_true",
        help="Do not exclude .git/ and node_modules/",
    )
    p.add_argument("--ignore-case", action="store_true", help="Match extensions and globs case-insensitively")
    p.add_argument("--follow-symlinks", action="store_true", help="Descend into symlinked directories")
    p.add_argument("--no-header", action="store_true", help="Do not write a header before each file")
    p.add_argument("--strip-spaces", action="store_true", help="Drop blank lines and collapse whitespace")
    p.add_argument(
        "--max-bytes",
        type=_positive_int,
        help="Maximum bytes per file to include (default: no limit)",
    )
    p.add_argument("--encoding", type=_encoding, default="utf-8", help="Source file encoding (default: utf-8)")
    p.add_argument(
        "-j",
        "--jobs",
        type=_positive_int,
        default=1,
        help="Number of reader threads (default: 1)",
    )
    p.add_argument("--estimate-tokens", action="store_true", help="Log an estimated token count")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress counter")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbose logging (-vv for debug)")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _build_config(ns: argparse.Namespace) -> ScanConfig:
    excludes = split_list(ns.exclude)
    if ns.exclude_from:
        excludes.extend(load_extra_patterns(ns.exclude_from.resolve()))
        logger.info(f"Loaded extra patterns from {ns.exclude_from}")

    return ScanConfig(
        root=ns.path,
        extensions=frozenset(split_list(ns.ext)),
        excludes=tuple(excludes),
        include_no_ext=ns.include_no_ext,
        case_sensitive=not ns.ignore_case,
        use_gitignore=ns.gitignore,
        default_excludes=not ns.no_default_excludes,
        follow_symlinks=ns.follow_symlinks,
    )


def run(ns: argparse.Namespace) -> int:
    """Run walk → filter → read → write and return the exit status."""
    config = _build_config(ns)
    options = RenderOptions(
        header=not ns.no_header,
        strip_spaces=ns.strip_spaces,
        max_bytes=ns.max_bytes,
        encoding=ns.encoding,
        jobs=ns.jobs,
    )

    logger.info(f"Scanning {config.root.resolve()} …")
    progress = not ns.no_progress

    if ns.output is None:
        with _stdout_writer() as out:
            stats = aggregate(config, options, out, progress=progress)
    else:
        out_path = ns.output.resolve()
        # fail before creating an empty output file
        validate_root(config.root)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_fh = out_path.open("w", encoding="utf-8", newline="\n")
        except OSError as e:
            raise OutputError(f"Could not open output file '{out_path}': {e}")
        with out_fh:
            stats = aggregate(config, options, out_fh, progress=progress, skip=[out_path])
        logger.info(f"Output saved to: {out_path}")

    if stats.files_written == 0:
        logger.warning(f"No matching files found in {config.root} ({stats.candidates} scanned)")
    else:
        logger.info(
            f"Done. {stats.candidates} files scanned, {stats.files_written} written, "
            f"{stats.chars_written} chars. {len(stats.skipped)} skipped, "
            f"{len(stats.truncated)} truncated.",
            extra=SUCCESS,
        )
    if ns.estimate_tokens:
        print(f"Estimated tokens: {stats.estimated_tokens}", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    setup_logging(ns.verbose, ns.quiet)
    try:
        return run(ns)
    except (InvalidRootError, ConfigFileError, OutputError) as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
