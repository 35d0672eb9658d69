"""Exceptions raised by the JSON-RPC HTTP transport."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any


class TransportError(Exception):
    """Base error for all transport failures.

    Raised directly for failures that none of the more specific
    subclasses describe; ``context`` carries the diagnostic detail.
    """

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.context = context


class ConfigError(TransportError):
    """Raised at construction time when the endpoint configuration is unusable."""


class ConnectionError(TransportError):
    """Raised when no response could be obtained from the endpoint."""


class BodyReadError(TransportError):
    """Raised when the response body could not be read completely."""


class HttpStatusError(TransportError):
    """Raised when the endpoint answers with a status outside 2xx.

    ``body`` is only populated when the transport is configured to expose
    error bodies.
    """

    def __init__(self, status: int, *, body: bytes | None = None, context: Any | None = None) -> None:
        try:
            reason = HTTPStatus(status).phrase
        except ValueError:
            reason = "Unknown Status"
        super().__init__(f"HTTP {status} {reason}", context=context)
        self.status = status
        self.body = body


__all__ = [
    "BodyReadError",
    "ConfigError",
    "ConnectionError",
    "HttpStatusError",
    "TransportError",
]
