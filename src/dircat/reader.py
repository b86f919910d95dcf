"""
Per-file content loading.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .errors import BinaryFileError, DecodeError, FileReadError
from .models import FileContent


def _is_binary(data: bytes) -> bool:
    return b"\0" in data


def read_file(
    path: Path,
    encoding: str = "utf-8",
    max_bytes: Optional[int] = None,
) -> FileContent:
    """Read and decode *path*.

    The whole file must decode strictly in *encoding*. With *max_bytes*, only
    that many bytes are kept (a character cut in half at the limit is
    dropped) and the result is flagged as truncated.

    Raises:
        FileReadError: the file vanished, is not readable, or another OS error
        BinaryFileError: the file contains a NUL byte
        DecodeError: the file is not valid *encoding*
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        raise FileReadError(path, "file not found")
    except PermissionError:
        raise FileReadError(path, "permission denied")
    except OSError as e:
        raise FileReadError(path, e.strerror or str(e))

    try:
        # UTF-16/32 text is full of NUL bytes; only sniff raw bytes otherwise
        ascii_compatible = "\0".encode(encoding) == b"\0"
    except LookupError:
        raise DecodeError(path, f"unknown encoding {encoding!r}")

    if ascii_compatible and _is_binary(raw):
        raise BinaryFileError(path)

    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise DecodeError(path, f"not valid {encoding} ({e.reason} at byte {e.start})")
    if "\0" in text:
        raise BinaryFileError(path)

    if max_bytes is not None and len(raw) > max_bytes:
        return FileContent(raw[:max_bytes].decode(encoding, errors="ignore"), truncated=True)
    return FileContent(text)
