"""
Logging setup: coloured ``[dircat]`` messages on stderr that do not tear the
progress bar.
"""

from __future__ import annotations

import logging
import sys

from colorama import Fore, Style, just_fix_windows_console
from tqdm import tqdm

# Marks a record as a success message (rendered green)
SUCCESS = {"success": True}

_LEVEL_COLORS = {
    logging.DEBUG: Style.DIM,
    logging.INFO: "",
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColorFormatter(logging.Formatter):
    def __init__(self, use_color: bool = True):
        super().__init__("[dircat] %(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if not self.use_color:
            return msg
        color = Fore.GREEN if getattr(record, "success", False) else _LEVEL_COLORS.get(record.levelno, "")
        return f"{color}{msg}{Style.RESET_ALL}" if color else msg


class TqdmHandler(logging.Handler):
    """Write records with ``tqdm.write`` so an active bar is redrawn below them."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


def verbosity_to_level(verbose: int = 0, quiet: bool = False) -> int:
    if quiet:
        return logging.ERROR
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: int = 0, quiet: bool = False) -> logging.Logger:
    """Configure the ``dircat`` logger tree; safe to call more than once."""
    just_fix_windows_console()
    logger = logging.getLogger("dircat")
    for handler in list(logger.handlers):
        if isinstance(handler, TqdmHandler):
            logger.removeHandler(handler)

    handler = TqdmHandler()
    handler.setFormatter(ColorFormatter(use_color=sys.stderr.isatty()))
    logger.addHandler(handler)
    logger.setLevel(verbosity_to_level(verbose, quiet))
    return logger
