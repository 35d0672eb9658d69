"""Asynchronous HTTP transport for JSON-RPC clients."""

from .config import EndpointConfig, ErrorBodyPolicy, TlsConfig, TransportOptions
from .errors import (
    BodyReadError,
    ConfigError,
    ConnectionError,
    HttpStatusError,
    TransportError,
)
from .logger import BoundLogger, create_logger
from .loop import EventLoopThread
from .transport import HttpTransport, RequestState, Transport
from .version import __version__

__all__ = [
    "__version__",
    "BodyReadError",
    "BoundLogger",
    "ConfigError",
    "ConnectionError",
    "EndpointConfig",
    "ErrorBodyPolicy",
    "EventLoopThread",
    "HttpStatusError",
    "HttpTransport",
    "RequestState",
    "TlsConfig",
    "Transport",
    "TransportError",
    "TransportOptions",
    "create_logger",
]
