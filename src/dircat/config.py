"""
Scan configuration and pattern-file loading.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Tuple

from .errors import ConfigFileError

# Always excluded unless --no-default-excludes is given
DEFAULT_PATTERNS: List[str] = [
    ".git/",          # VCS data
    "node_modules/",
]


def split_list(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeated comma-separated option values, dropping blanks.

    ``["js,ts", " py "]`` becomes ``["js", "ts", "py"]``.
    """
    items: List[str] = []
    for value in values or ():
        items.extend(part.strip() for part in value.split(",") if part.strip())
    return items


def normalize_extension(ext: str, case_sensitive: bool = True) -> str:
    ext = ext.strip().lstrip(".")
    return ext if case_sensitive else ext.lower()


@dataclass(frozen=True)
class ScanConfig:
    """What to scan and which files to keep.

    Attributes:
        root: Directory to scan.
        extensions: Allowed extensions without the leading dot. Empty means
            every extension is allowed.
        excludes: Glob patterns (gitignore wildmatch dialect) matched against
            root-relative POSIX paths. Any match rejects the file.
        include_no_ext: Keep files that have no extension.
        case_sensitive: Compare extensions and globs case-sensitively.
        use_gitignore: Also exclude what the root ``.gitignore`` ignores.
        default_excludes: Apply ``DEFAULT_PATTERNS``.
        follow_symlinks: Descend into symlinked directories.
    """

    root: Path
    extensions: FrozenSet[str] = frozenset()
    excludes: Tuple[str, ...] = ()
    include_no_ext: bool = False
    case_sensitive: bool = True
    use_gitignore: bool = False
    default_excludes: bool = True
    follow_symlinks: bool = False

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "root", Path(self.root))
        exts = frozenset(
            normalize_extension(e, self.case_sensitive) for e in self.extensions
        )
        object.__setattr__(self, "extensions", frozenset(e for e in exts if e))
        object.__setattr__(self, "excludes", tuple(self.excludes))


@dataclass(frozen=True)
class RenderOptions:
    """How accepted files are read and written."""

    header: bool = True
    strip_spaces: bool = False
    max_bytes: Optional[int] = None
    encoding: str = "utf-8"
    jobs: int = 1

    def __post_init__(self) -> None:
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")
        if self.max_bytes is not None and self.max_bytes < 0:
            raise ValueError(f"max_bytes must not be negative, got {self.max_bytes}")


# Pattern files

def _pattern_lines(lines: Iterable[str]) -> List[str]:
    return [
        ln.strip()
        for ln in lines
        if ln.strip() and not ln.lstrip().startswith("#")
    ]


def load_extra_patterns(config_path: Path) -> List[str]:
    """Read newline-separated exclude patterns from *config_path*."""
    if not config_path.exists():
        raise ConfigFileError(f"Pattern file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return _pattern_lines(fh)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read pattern file '{config_path}': {e}")


def load_gitignore(root: Path) -> List[str]:
    """Return the patterns of the root ``.gitignore``, or none if absent."""
    gitignore_path = root / ".gitignore"
    if not gitignore_path.is_file():
        return []
    try:
        with gitignore_path.open("r", encoding="utf-8") as fh:
            # keep "!" negations and trailing slashes intact
            return [ln.rstrip("\n") for ln in fh]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read '{gitignore_path}': {e}")
