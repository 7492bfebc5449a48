"""
Logging configuration for repo-miner.

Level conventions used across the package:
    DEBUG    git commands, session open/close, checkouts, metric plans
    INFO     per-commit mining progress
    WARNING  skipped commits, unparsable files, stale lock files
    ERROR    a session operation failed and the session was closed

Terminal output goes through rich on stderr so that ``--json`` output on
stdout stays machine readable.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "repo_miner"

FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    # progress lines are INFO; keep them out of the default terminal output
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach repo-miner's handlers to the ``repo_miner`` logger.

    Calling it again replaces the handlers installed by the previous call,
    so repeated CLI invocations in one process do not duplicate output.
    The root logger is left alone.

    Args:
        verbose: Show DEBUG output (git commands, checkouts)
        quiet: Show ERROR output only
        log_file: Also append every record, down to INFO, to this file

    Returns:
        The ``repo_miner`` logger
    """
    level = _level(verbose, quiet)
    logger = logging.getLogger(LOGGER_NAME)

    for handler in [h for h in logger.handlers if getattr(h, "_repo_miner", False)]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=verbose,
        show_path=verbose,
    )
    console_handler.setLevel(level)
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        file_handler.setLevel(min(level, logging.INFO))
        handlers.append(file_handler)

    for handler in handlers:
        handler._repo_miner = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(min(h.level for h in handlers))
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``repo_miner`` namespace (the package logger when None)."""
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
