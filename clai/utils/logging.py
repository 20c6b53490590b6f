# clai/utils/logging.py
"""
Logging configuration for clai.
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from clai.constants import DEFAULT_DEBUG_LOG_FILE, LOG_FORMAT, LOG_RETENTION, LOG_ROTATION


def _console_level(quiet: bool, verbose: int, debug: bool) -> str:
    if debug or verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    if quiet:
        return "ERROR"
    return "WARNING"


def setup_logging(
    quiet: bool = False,
    verbose: int = 0,
    debug: bool = False,
    debug_file: Optional[Path] = None,
    colorize: Optional[bool] = None,
) -> None:
    """
    Configure the application logging.

    Args:
        quiet: Only report errors on stderr.
        verbose: Verbosity count from the command line.
        debug: Enable debug output on stderr.
        debug_file: Optional file that receives every debug record.
        colorize: Force colored stderr output on or off; None lets loguru decide.
    """
    # Remove default handlers
    logger.remove()
    logger.configure(extra={"name": "clai"})

    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=_console_level(quiet, verbose, debug),
        colorize=colorize,
        diagnose=debug,  # Include variable values in traceback if debug is True
    )

    if debug_file is not None:
        debug_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            debug_file,
            format=LOG_FORMAT,
            level="DEBUG",
            rotation=LOG_ROTATION,
            retention=LOG_RETENTION,
        )

    logger.enable("clai")
    logger.debug(f"Logging initialized. Debug file: {debug_file or 'disabled'}")


def default_debug_file() -> Path:
    """Location used when --debug-file is given without a path."""
    return DEFAULT_DEBUG_LOG_FILE


def get_logger(name: str = "clai"):
    """
    Get a logger bound to the given name.

    Args:
        name: The name for the logger, usually the module's ``__name__``.

    Returns:
        A loguru logger that tags every record with ``name``.
    """
    return logger.bind(name=name)
