"""
Extension allow-list and exclusion-glob filtering.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

import pathspec

from .config import DEFAULT_PATTERNS, ScanConfig, load_gitignore
from .models import Candidate

logger = logging.getLogger(__name__)


def compile_patterns(lines: Iterable[str], case_sensitive: bool = True) -> pathspec.GitIgnoreSpec:
    """Compile gitignore-style *lines* into a :class:`pathspec.GitIgnoreSpec`.

    Invalid patterns are reported and left out instead of failing the run.
    """
    valid: List[str] = []
    for line in lines:
        if not case_sensitive:
            line = line.lower()
        try:
            pathspec.GitIgnoreSpec.from_lines([line])
        except ValueError as e:
            logger.warning(f"Ignoring invalid exclude pattern {line!r}: {e}")
            continue
        valid.append(line)
    return pathspec.GitIgnoreSpec.from_lines(valid)


class PatternMatcher:
    """
    Accept/reject decision for walker candidates.

    A candidate is accepted when its extension passes the allow-list and its
    root-relative path matches no exclusion pattern. Exclusion always wins.

    Default patterns, the root ``.gitignore`` and user patterns are compiled
    into separate specs, so a ``!`` re-include in one source cannot undo an
    exclusion from another.
    """

    def __init__(self, config: ScanConfig):
        self._config = config
        self._specs: List[pathspec.GitIgnoreSpec] = []

        if config.default_excludes:
            self._specs.append(compile_patterns(DEFAULT_PATTERNS, config.case_sensitive))
        if config.use_gitignore:
            gitignore = load_gitignore(config.root)
            logger.debug(f"Loaded {len(gitignore)} lines from .gitignore")
            self._specs.append(compile_patterns(gitignore, config.case_sensitive))
        if config.excludes:
            self._specs.append(compile_patterns(config.excludes, config.case_sensitive))

    def _key(self, rel: str) -> str:
        return rel if self._config.case_sensitive else rel.lower()

    def extension_ok(self, candidate: Candidate) -> bool:
        ext = candidate.extension
        if ext is None:
            return self._config.include_no_ext
        if not self._config.extensions:
            return True
        if not self._config.case_sensitive:
            ext = ext.lower()
        return ext in self._config.extensions

    def is_excluded(self, rel: str) -> bool:
        key = self._key(rel)
        return any(spec.match_file(key) for spec in self._specs)

    def is_excluded_dir(self, rel: str) -> bool:
        """Whether directory *rel* (root-relative, POSIX) is excluded as a whole."""
        key = self._key(rel.rstrip("/") + "/")
        return any(spec.match_file(key) for spec in self._specs)

    def accepts(self, candidate: Candidate) -> bool:
        if self.is_excluded(candidate.rel):
            return False
        return self.extension_ok(candidate)
