"""Logging and performance tracing for the grid engine.

All modules log through children of the "recordgrid" logger. Console output
is enabled by setup_debug_logging(), which the recordgrid-debug entry point
calls at startup.

Usage:
    from ..utils.debug_trace import get_logger, perf_timer

    logger = get_logger(__name__)
    logger.debug("Starting operation")

    with perf_timer("apply_filters", row_count=5000):
        engine.filter(records)

    @log_perf
    def expensive_function():
        pass
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Callable
from contextlib import contextmanager
from functools import wraps
from typing import Any

# Set to False to skip timing entirely
DEBUG_PERF = True

ROOT_LOGGER_NAME = "recordgrid"

logger = logging.getLogger(ROOT_LOGGER_NAME)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the recordgrid namespace.

    Args:
        name: Usually __name__ of the calling module.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logger.getChild(name)


def setup_debug_logging(debug: bool = True) -> None:
    """Configure console logging.

    Call this once at startup. Safe to call again; handlers aren't duplicated.

    Args:
        debug: True for DEBUG output on stdout, False for warnings and above.
    """
    if logger.handlers:
        return

    has_console = sys.stdout is not None and hasattr(sys.stdout, "write")

    if debug and has_console:
        logger.setLevel(logging.DEBUG)
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter(
            "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        logger.setLevel(logging.WARNING)


@contextmanager
def perf_timer(operation: str, row_count: int | None = None):
    """Context manager for timing operations.

    Args:
        operation: Name of the operation being timed
        row_count: Optional row count for context
    """
    if not DEBUG_PERF:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        if row_count is not None:
            logger.debug(f"PERF: {operation} ({row_count} rows) took {elapsed_ms:.2f}ms")
        else:
            logger.debug(f"PERF: {operation} took {elapsed_ms:.2f}ms")


def log_perf(func: Callable) -> Callable:
    """Decorator to log function performance."""

    @wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        if not DEBUG_PERF:
            return func(*args, **kwargs)

        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug(f"PERF: {func.__qualname__} took {elapsed_ms:.2f}ms")

    return wrapper
