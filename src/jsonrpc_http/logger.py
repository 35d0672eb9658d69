"""Level-filtered logging wrapper used throughout the transport."""

from __future__ import annotations

import logging
from typing import Any, Callable, Literal, Mapping

LogLevel = Literal["trace", "debug", "info", "warn", "error"]

LOGGER_NAME = "jsonrpc_http"

TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")


LOG_LEVEL_PRIORITY: dict[LogLevel, int] = {
    "trace": 0,
    "debug": 1,
    "info": 2,
    "warn": 3,
    "error": 4,
}


class BoundLogger:
    """Wraps a logging.Logger (or duck-typed object) with the transport's log levels.

    Bound fields are rendered as a ``key=value`` prefix on every message so
    that lines belonging to one in-flight request can be correlated.
    """

    def __init__(
        self,
        logger: Any | None = None,
        *,
        level: LogLevel = "info",
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        self._logger = logger or _default_logger()
        self._level = level
        self._fields = dict(fields or {})

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("trace"):
            self._log(TRACE_LEVEL, msg, *args, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("debug"):
            self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("info"):
            self._log(logging.INFO, msg, *args, **kwargs)

    def warn(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("warn"):
            self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("error"):
            self._log(logging.ERROR, msg, *args, **kwargs)

    def child(self, name: str) -> "BoundLogger":
        """Create a child logger anchored to the same Python logger."""
        if isinstance(self._logger, logging.Logger):
            base = self._logger.getChild(name)
        else:
            base = self._logger
        return BoundLogger(base, level=self._level, fields=self._fields)

    def bind(self, **fields: Any) -> "BoundLogger":
        """Return a logger that prefixes every message with ``fields``."""
        merged = dict(self._fields)
        merged.update(fields)
        return BoundLogger(self._logger, level=self._level, fields=merged)

    def _enabled(self, level: LogLevel) -> bool:
        return LOG_LEVEL_PRIORITY[level] >= LOG_LEVEL_PRIORITY[self._level]

    def _render(self, msg: str) -> str:
        if not self._fields:
            return msg
        prefix = " ".join(f"{key}={value}" for key, value in self._fields.items())
        return f"[{prefix}] {msg}"

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        msg = self._render(msg)
        try:
            if hasattr(self._logger, "log"):
                self._logger.log(level, msg, *args, **kwargs)
                return

            method_map: dict[int, Callable[..., Any] | None] = {
                TRACE_LEVEL: getattr(self._logger, "trace", None),
                logging.DEBUG: getattr(self._logger, "debug", None),
                logging.INFO: getattr(self._logger, "info", None),
                logging.WARNING: getattr(self._logger, "warn", None),
                logging.ERROR: getattr(self._logger, "error", None),
            }
            handler = method_map.get(level)
            if handler:
                handler(msg, *args, **kwargs)
        except Exception:
            # Logging must never break a request in flight
            pass


def _default_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(TRACE_LEVEL)
    return logger


def create_logger(*, logger: Any | None = None, level: LogLevel = "info") -> BoundLogger:
    if isinstance(logger, BoundLogger):
        return logger
    return BoundLogger(logger, level=level)


__all__ = ["BoundLogger", "LOGGER_NAME", "LogLevel", "create_logger"]
