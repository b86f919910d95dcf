"""
Data models shared by the walker, reader and aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


def extension_of(name: str) -> Optional[str]:
    """Return the extension of file *name* without the dot, or ``None``.

    The dot must be neither the first nor the last character, so
    ``.bashrc`` and ``notes.`` have no extension and ``a.test.ts`` has ``ts``.
    """
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext:
        return None
    return ext


@dataclass(frozen=True)
class Candidate:
    """
    A file discovered during traversal, pending the accept/reject decision.

    Attributes:
        path: Filesystem path (root joined with the relative parts)
        rel: Root-relative POSIX path, used for matching and headers
        extension: Extension without the leading dot, or None
    """

    path: Path
    rel: str
    extension: Optional[str]

    @classmethod
    def from_path(cls, path: Path, root: Path) -> "Candidate":
        rel = path.relative_to(root).as_posix()
        return cls(path=path, rel=rel, extension=extension_of(path.name))


@dataclass(frozen=True)
class FileContent:
    text: str
    truncated: bool = False


@dataclass
class AggregateStats:
    """Summary of one aggregation run."""

    candidates: int = 0
    files_written: int = 0
    chars_written: int = 0
    skipped: List[Tuple[str, str]] = field(default_factory=list)
    truncated: List[str] = field(default_factory=list)

    @property
    def estimated_tokens(self) -> int:
        # roughly four characters per token
        return self.chars_written // 4
