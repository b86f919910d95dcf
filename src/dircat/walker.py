"""
Recursive directory traversal.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Set, Tuple

from .config import ScanConfig
from .errors import InvalidRootError
from .models import Candidate

logger = logging.getLogger(__name__)

# Called with a root-relative POSIX directory path; True prunes the subtree
PruneFn = Callable[[str], bool]


def _list_dir(path: Path) -> List[os.DirEntry]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def _open_root(root: Path) -> Tuple[Path, List[os.DirEntry]]:
    try:
        root = root.resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(f"Could not resolve root path '{root}': {e}")
    if not root.exists():
        raise InvalidRootError(f"Root directory '{root}' does not exist")
    if not root.is_dir():
        raise InvalidRootError(f"Root path '{root}' is not a directory")
    try:
        entries = _list_dir(root)
    except OSError as e:
        raise InvalidRootError(f"Could not scan directory '{root}': {e}")
    return root, entries


def validate_root(root: Path) -> Path:
    """Return *root* resolved, or raise ``InvalidRootError`` if it cannot be walked."""
    return _open_root(Path(root))[0]


def walk(
    config: ScanConfig,
    prune: Optional[PruneFn] = None,
    skip: Iterable[Path] = (),
) -> Iterator[Candidate]:
    """
    Enumerate the files under ``config.root`` in traversal order.

    The root is checked eagerly: ``InvalidRootError`` is raised by this call,
    not by the first ``next()``, when the root is missing, not a directory or
    cannot be listed. Everything below the root is visited lazily.

    Traversal is depth-first with the entries of each directory sorted by
    name, so two walks over an unchanged tree yield the same sequence.
    Unreadable subdirectories are logged and skipped.

    Args:
        config: Scan configuration (root, symlink policy)
        prune: Optional predicate; directories for which it returns True
               are not entered
        skip: Resolved file paths that are never yielded (e.g. the output file)

    Returns:
        Iterator of Candidate objects
    """
    root, entries = _open_root(config.root)

    skip_set = {Path(p) for p in skip}
    visited: Set[Path] = {root}
    return _walk_entries(root, entries, config, prune, skip_set, visited)


def _walk_entries(
    root: Path,
    entries: List[os.DirEntry],
    config: ScanConfig,
    prune: Optional[PruneFn],
    skip: Set[Path],
    visited: Set[Path],
) -> Iterator[Candidate]:
    for entry in entries:
        path = Path(entry.path)
        try:
            is_symlink = entry.is_symlink()
            is_dir = entry.is_dir(follow_symlinks=True)
            is_file = not is_dir and entry.is_file(follow_symlinks=True)
        except OSError as e:
            logger.warning(f"Could not stat {path}: {e}")
            continue

        if is_dir:
            yield from _walk_dir(root, path, is_symlink, config, prune, skip, visited)
        elif is_file:
            if skip and path.resolve() in skip:
                logger.debug(f"Skipping {path}")
                continue
            yield Candidate.from_path(path, root)
        else:
            logger.debug(f"Skipping special file {path}")


def _walk_dir(
    root: Path,
    path: Path,
    is_symlink: bool,
    config: ScanConfig,
    prune: Optional[PruneFn],
    skip: Set[Path],
    visited: Set[Path],
) -> Iterator[Candidate]:
    rel = path.relative_to(root).as_posix()
    if is_symlink and not config.follow_symlinks:
        logger.debug(f"Skipping symlinked directory (follow_symlinks=False): {rel}")
        return
    if prune is not None and prune(rel):
        logger.debug(f"Pruning excluded directory: {rel}")
        return

    try:
        real_path = path.resolve()
    except (OSError, RuntimeError) as e:
        logger.warning(f"Could not resolve directory {rel}: {e}")
        return
    if real_path in visited:
        logger.warning(f"Skipping directory cycle: {rel} -> {real_path}")
        return

    try:
        entries = _list_dir(path)
    except PermissionError as e:
        logger.warning(f"Permission denied accessing directory: {rel} - {e}")
        return
    except OSError as e:
        logger.warning(f"Error accessing directory: {rel} - {e}")
        return

    visited.add(real_path)
    try:
        yield from _walk_entries(root, entries, config, prune, skip, visited)
    finally:
        # allow the same real directory to be reached again via another branch
        visited.discard(real_path)
