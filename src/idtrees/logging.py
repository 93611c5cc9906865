"""Opt-in loguru output for tree induction.

idtrees logs through loguru but stays silent until `enable_logging` is
called. Besides the standard levels, a SPLIT level sits between DEBUG and
INFO and carries one record per accepted split.

Loguru's import-time stderr sink (handler 0) is removed when this module is
imported, so enabled output is not printed twice. Applications that set up
their own loguru sinks should do so after importing idtrees.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

SPLIT_LEVEL: Final[str] = "SPLIT"
SPLIT_LEVEL_NUMBER: Final[int] = 15

type LogLevel = Literal[
    "TRACE",
    "DEBUG",
    "SPLIT",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

type LogFormat = Literal["short", "full"]

_FORMAT_PREFIX = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "  # noqa: RUF027
_FORMAT_SUFFIX = " - <level>{message}</level> | {extra}"
_LOCATION_FORMATS: Final[dict[str, str]] = {
    "short": "<cyan>{function}</cyan>",
    "full": "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
}


def _register_split_level() -> None:
    """Add the SPLIT level to loguru, or warn if another number already owns the name."""
    try:
        existing_level = logger.level(SPLIT_LEVEL)
    except ValueError:
        logger.level(SPLIT_LEVEL, no=SPLIT_LEVEL_NUMBER, icon="🌿")
        return
    if existing_level.no != SPLIT_LEVEL_NUMBER:
        warnings.warn(
            f"SPLIT level is registered as {existing_level.no}; idtrees expects {SPLIT_LEVEL_NUMBER}",
            stacklevel=2,
        )


_register_split_level()


class LoggingHandle:
    """One stderr sink added by `enable_logging`.

    Closing the handle, explicitly or by leaving a `with` block, removes its
    sink. Once no handle is open the idtrees logger is disabled again.

    Examples:
        >>> with enable_logging(level="SPLIT"):  # doctest: +SKIP
        ...     tree = build_tree(samples, ["age"])
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        """Track a sink added with `logger.add`.

        Args:
            handler_id (int): Loguru handler id of the sink.
        """
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove this handle's sink. Calling it twice is harmless.

        Closing the last open handle also calls `logger.disable("idtrees")`,
        which silences idtrees records for every sink, not just this one.
        """
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

    @classmethod
    def get_active_handle_count(cls) -> int:
        """Return how many handles are still open.

        Returns:
            int: Number of handles not yet disabled.
        """
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel = "INFO",
    log_format: LogFormat = "short",
) -> LoggingHandle:
    """Send idtrees records to stderr until the returned handle is closed.

    Args:
        level (LogLevel): Lowest level printed. "INFO" reports when each
            induction starts and finishes, "SPLIT" adds every accepted split,
            and "DEBUG" adds every emitted leaf.
        log_format (LogFormat): "short" prints the function name; "full"
            prints module, function and line number.

    Returns:
        LoggingHandle: Handle owning the new sink.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     build_tree(samples, ["height", "drinks"])
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr,
        level=level,
        filter=_is_idtrees_record,
        format=_FORMAT_PREFIX + _LOCATION_FORMATS[log_format] + _FORMAT_SUFFIX,
    )
    return LoggingHandle(handler_id)


def _is_idtrees_record(record: Record) -> bool:
    """Return True for records logged from inside the idtrees package.

    Args:
        record (Record): Loguru record to test.

    Returns:
        bool: Whether the record's module belongs to idtrees.
    """
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
