"""
Exception hierarchy for dircat.

Fatal errors (``InvalidRootError``, ``ConfigFileError``, ``OutputError``)
abort the run with a non-zero exit status. ``FileReadError`` and its
subclasses are per-file: they are reported and the run continues.
"""


class DircatError(Exception):
    """Base exception for dircat errors."""
    pass


class InvalidRootError(DircatError):
    """Raised when the root directory is missing, not a directory or unreadable."""
    pass


class ConfigFileError(DircatError):
    """Raised when there are issues with an exclude-pattern file."""
    pass


class OutputError(DircatError):
    """Raised when there are issues writing the output."""
    pass


class FileReadError(DircatError):
    """Raised when a source file cannot be read."""

    def __init__(self, path, reason: str):
        super().__init__(f"Could not read {path}: {reason}")
        self.path = path
        self.reason = reason


class BinaryFileError(FileReadError):
    """Raised when a source file looks binary (contains a NUL byte)."""

    def __init__(self, path):
        super().__init__(path, "binary file")


class DecodeError(FileReadError):
    """Raised when a source file is not valid in the requested encoding."""
    pass
