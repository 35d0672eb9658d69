"""Translation of httpx failures and HTTP statuses into the transport's error taxonomy."""

from __future__ import annotations

import httpx

from ..config import TLS_AVAILABLE, ssl
from ..errors import BodyReadError, ConnectionError, HttpStatusError, TransportError
from .base import RequestState

# Failures that can only happen while obtaining a connection.
_CONNECT_ERRORS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.PoolTimeout,
    httpx.ProxyError,
)
if TLS_AVAILABLE:
    _CONNECT_ERRORS += (ssl.SSLError,)

# Failures meaning the peer went away or spoke broken HTTP.
_STREAM_ERRORS = (
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.ReadTimeout,
)


def is_success(status: int) -> bool:
    return 200 <= status < 300


class ErrorMapper:
    """Maps every failure of one exchange onto exactly one TransportError."""

    def __init__(self, endpoint: str) -> None:
        self._endpoint = endpoint

    def map_status(self, status: int, body: bytes | None = None) -> HttpStatusError | None:
        if is_success(status):
            return None
        return HttpStatusError(status, body=body, context=self._endpoint)

    def map_exception(self, exc: BaseException, state: RequestState) -> TransportError:
        if isinstance(exc, TransportError):
            return exc

        if isinstance(exc, _CONNECT_ERRORS):
            return ConnectionError(f"Cannot connect to {self._endpoint}: {_describe(exc)}", context=exc)

        if state >= RequestState.AWAITING_BODY:
            if isinstance(exc, (httpx.RequestError, httpx.StreamError)):
                return BodyReadError(
                    f"Failed reading response body from {self._endpoint}: {_describe(exc)}",
                    context=exc,
                )
        elif isinstance(exc, _STREAM_ERRORS):
            return ConnectionError(
                f"Connection to {self._endpoint} lost before a response arrived: {_describe(exc)}",
                context=exc,
            )

        return TransportError(f"Unexpected transport failure: {_describe(exc)}", context=exc)


def _describe(exc: BaseException) -> str:
    text = str(exc)
    name = type(exc).__name__
    return f"{name}: {text}" if text else name


__all__ = ["ErrorMapper", "is_success"]
