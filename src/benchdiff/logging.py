"""Logging setup for benchdiff.

Console records go to stderr so that report output on stdout stays
machine-readable.  A log file, named by ``--log-file`` or the ``log_file``
config key, always records at DEBUG.  Modules log through
``get_logger(<module>)``, a child of the ``benchdiff`` logger.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "benchdiff"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def _detach(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.removeHandler(handler)
    handler.close()


def reset_logging() -> None:
    """Close and remove every handler on the benchdiff logger."""
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        _detach(logger, handler)


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the benchdiff logger with a stderr console handler.

    Calling this again replaces (and closes) the handlers installed by an
    earlier call.  *verbose* wins over *quiet*.
    """
    reset_logging()
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_console_level(verbose, quiet))
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        attach_log_file(log_file)
    return logger


def attach_log_file(path: Path) -> logging.FileHandler:
    """Record DEBUG and above in *path*, replacing any earlier log file.

    The parent directory is created if needed.

    Raises:
        OSError: If the file cannot be opened for appending.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            _detach(logger, handler)

    path.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(_FILE_FORMAT))
    logger.addHandler(fh)
    return fh


def get_logger(name: str) -> logging.Logger:
    """Return the ``benchdiff.<name>`` logger."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
