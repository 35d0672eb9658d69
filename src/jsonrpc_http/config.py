"""Endpoint and TLS configuration for the HTTP transport."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import ParseResult, urlparse

import certifi
import httpx

from .errors import ConfigError
from .logger import LogLevel

try:  # TLS is unavailable on interpreters built without OpenSSL
    import ssl

    TLS_AVAILABLE = True
except ImportError:  # pragma: no cover - depends on the interpreter build
    ssl = None  # type: ignore[assignment]
    TLS_AVAILABLE = False

DEFAULT_PORTS = {"http": 80, "https": 443}

# RFC 3986 reg-name characters
_REG_NAME = re.compile(r"^[A-Za-z0-9\-._~!$&'()*+,;=%]+$")


class ErrorBodyPolicy(str, enum.Enum):
    """What happens to the body of a non-2xx response."""

    DISCARD = "discard"
    DRAIN = "drain"
    EXPOSE = "expose"


@dataclass(frozen=True)
class TlsConfig:
    """Trust configuration for HTTPS endpoints.

    With no CA source given, the certifi bundle is trusted. The context is
    built once per transport and shared by every connection its pool opens.
    """

    ca_file: str | None = None
    ca_path: str | None = None
    ca_data: str | None = None
    client_cert: str | None = None
    client_key: str | None = None
    verify: bool = True

    def __post_init__(self) -> None:
        if self.client_key and not self.client_cert:
            raise ConfigError("client_key given without client_cert")

    def build_context(self) -> "ssl.SSLContext":
        if not TLS_AVAILABLE:
            raise ConfigError("TLS support is not available in this interpreter")
        try:
            if self.ca_file or self.ca_path or self.ca_data:
                context = ssl.create_default_context(
                    cafile=self.ca_file, capath=self.ca_path, cadata=self.ca_data
                )
            else:
                context = ssl.create_default_context(cafile=certifi.where())
            if not self.verify:
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE
            if self.client_cert:
                context.load_cert_chain(self.client_cert, self.client_key)
        except OSError as exc:  # ssl.SSLError included
            raise ConfigError(f"Cannot build TLS context: {exc}", context=exc) from exc
        return context


@dataclass(frozen=True)
class EndpointConfig:
    uri: str
    scheme: str
    host: str
    port: int
    path: str
    tls: TlsConfig | None = None

    @classmethod
    def parse(cls, uri: str, tls: TlsConfig | None = None) -> "EndpointConfig":
        """Validate ``uri`` against the TLS mode; raises ConfigError on any problem."""
        parsed = _split(uri)
        scheme = parsed.scheme.lower()
        if scheme not in DEFAULT_PORTS:
            raise ConfigError(f"Unsupported scheme in endpoint URI: {uri!r}", context=scheme or None)
        try:
            host = parsed.hostname
            port = parsed.port
            httpx.URL(uri)
        except (ValueError, httpx.InvalidURL) as exc:
            raise ConfigError(f"Malformed endpoint URI {uri!r}: {exc}", context=exc) from exc
        if not host:
            raise ConfigError(f"Endpoint URI has no host: {uri!r}")
        if host.isascii() and ":" not in host and not _REG_NAME.match(host):
            raise ConfigError(f"Invalid host in endpoint URI: {uri!r}", context=host)
        if port is None:
            port = DEFAULT_PORTS[scheme]
        elif port == 0:
            raise ConfigError(f"Port 0 is not a valid endpoint port: {uri!r}")

        if scheme == "https":
            if not TLS_AVAILABLE:
                raise ConfigError("HTTPS endpoint requested but TLS support is not available", context=uri)
            if tls is None:
                raise ConfigError("HTTPS endpoint requires a TLS configuration", context=uri)
        elif tls is not None:
            raise ConfigError("TLS configuration given for a plain HTTP endpoint", context=uri)

        return cls(
            uri=uri,
            scheme=scheme,
            host=host,
            port=port,
            path=parsed.path or "/",
            tls=tls,
        )

    @classmethod
    def for_uri(cls, uri: str) -> "EndpointConfig":
        """Parse ``uri`` and pick the default trust configuration for ``https``."""
        tls = TlsConfig() if _split(uri).scheme.lower() == "https" else None
        return cls.parse(uri, tls)

    @property
    def uses_tls(self) -> bool:
        return self.tls is not None

    @property
    def authority(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"


@dataclass
class TransportOptions:
    headers: Mapping[str, str] | None = None
    error_body: ErrorBodyPolicy = ErrorBodyPolicy.DISCARD
    limits: httpx.Limits | None = None
    logger: Any | None = None
    log_level: LogLevel = "info"


def _split(uri: str) -> ParseResult:
    try:
        return urlparse(uri)
    except ValueError as exc:
        raise ConfigError(f"Malformed endpoint URI {uri!r}: {exc}", context=exc) from exc


__all__ = [
    "DEFAULT_PORTS",
    "EndpointConfig",
    "ErrorBodyPolicy",
    "TLS_AVAILABLE",
    "TlsConfig",
    "TransportOptions",
]
