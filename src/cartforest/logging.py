"""Logging helpers for cartforest.

cartforest logs through loguru and is silent by default
(``logger.disable("cartforest")`` runs when the package is imported).
Call :func:`enable_logging` to route cartforest records to stderr.
Importing this module removes loguru's default handler (id 0), as other
libraries built on loguru do; add your own handler for application logs.
"""
from __future__ import annotations

import contextlib
import sys
import threading
from typing import TYPE_CHECKING, ClassVar, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME = __name__.split(".")[0]

# loguru's default stderr handler (id 0) would also receive cartforest records
# once enabled, ignoring the level passed to enable_logging().
with contextlib.suppress(ValueError):
    logger.remove(0)

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)


class LoggingHandle:
    """Owns one loguru handler added by :func:`enable_logging`.

    Use :meth:`disable` or the context manager protocol to remove it.  When the
    last active handle goes away the ``cartforest`` logger is disabled again.
    """

    _active_ids: ClassVar[set] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()


def enable_logging(*, level: LogLevel = "INFO", sink=None) -> LoggingHandle:
    """Enable cartforest log output.

    Parameters
    ----------
    level : str, default="INFO"
        Minimum loguru level.  ``"DEBUG"`` also shows per-tree and per-fold
        progress.
    sink : file-like or callable, optional
        Where records go; defaults to ``sys.stderr``.

    Returns
    -------
    LoggingHandle
        Handle that removes the handler again.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sink if sink is not None else sys.stderr,
        level=level,
        filter=_is_cartforest_record,
        format=_FORMAT,
    )
    return LoggingHandle(handler_id)


def _is_cartforest_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)


def fit_log_level(verbose: int) -> str:
    """Level used for fit progress messages given an estimator's ``verbose``."""
    return "INFO" if verbose > 0 else "DEBUG"
