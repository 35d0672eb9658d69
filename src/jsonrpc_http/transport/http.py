"""HTTP transport built on top of httpx."""

from __future__ import annotations

import asyncio
import concurrent.futures
import itertools
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Mapping

import httpx

from ..config import EndpointConfig, ErrorBodyPolicy, TlsConfig, TransportOptions
from ..logger import LogLevel, create_logger
from ..loop import EventLoopThread
from .base import InFlightRequest
from .dispatcher import RequestDispatcher
from .mapper import ErrorMapper


class HttpTransport:
    """Sends opaque JSON-RPC payloads to one HTTP(S) endpoint.

    One pooled ``httpx.AsyncClient`` (and, for ``https``, one TLS context) is
    created per transport and shared by every call, so a transport may be
    used concurrently from many tasks. ``executor`` is the event loop that
    drives the client; ``send()`` awaited from any other loop is scheduled
    onto it.

    Parameters
    ----------
    endpoint_uri : str
        ``http://`` or ``https://`` URI the payloads are POSTed to.
    tls : TlsConfig, optional
        Required for ``https`` endpoints, forbidden for ``http`` ones.
    executor : asyncio.AbstractEventLoop, optional
        Loop running the exchanges. Defaults to whichever loop awaits ``send()``.

    Raises
    ------
    ConfigError
        If the URI scheme disagrees with ``tls`` or TLS is unavailable.
    """

    def __init__(
        self,
        endpoint_uri: str,
        tls: TlsConfig | None = None,
        executor: asyncio.AbstractEventLoop | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        headers: Mapping[str, str] | None = None,
        error_body: ErrorBodyPolicy = ErrorBodyPolicy.DISCARD,
        limits: httpx.Limits | None = None,
        logger: Any | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        self._endpoint = EndpointConfig.parse(endpoint_uri, tls)
        self._executor = executor
        self._loop_thread: EventLoopThread | None = None
        self._logger = create_logger(logger=logger, level=log_level).child("http")
        if client is None:
            verify = tls.build_context() if tls is not None else True
            client = httpx.AsyncClient(
                verify=verify,
                timeout=httpx.Timeout(None),
                limits=limits or httpx.Limits(),
                trust_env=False,
                # Each exchange stands alone: Set-Cookie replies are never replayed.
                cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
            )
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client
        self._dispatcher = RequestDispatcher(
            self._endpoint,
            client,
            ErrorMapper(endpoint_uri),
            headers=headers,
            error_body=error_body,
            logger=self._logger,
        )
        self._ids = itertools.count(1)
        self._logger.info(
            "HttpTransport ready for %s path=%s (%s)",
            self._endpoint.authority,
            self._endpoint.path,
            "tls" if self._endpoint.uses_tls else "plain",
        )

    @classmethod
    def from_options(
        cls,
        endpoint_uri: str,
        tls: TlsConfig | None = None,
        executor: asyncio.AbstractEventLoop | None = None,
        options: TransportOptions | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> "HttpTransport":
        options = options or TransportOptions()
        return cls(
            endpoint_uri,
            tls,
            executor,
            client=client,
            headers=options.headers,
            error_body=options.error_body,
            limits=options.limits,
            logger=options.logger,
            log_level=options.log_level,
        )

    @classmethod
    def standalone(cls, endpoint_uri: str, tls: TlsConfig | None = None, **kwargs: Any) -> "HttpTransport":
        """Create a transport driven by its own background event loop thread.

        Intended for synchronous callers using ``call()`` or ``submit()``.
        Shut it down with ``close()``.
        """
        loop_thread = EventLoopThread(name="jsonrpc-http")
        loop_thread.start()
        try:
            transport = cls(endpoint_uri, tls, loop_thread.loop, **kwargs)
        except BaseException:
            loop_thread.stop()
            raise
        transport._loop_thread = loop_thread
        return transport

    @property
    def endpoint(self) -> EndpointConfig:
        return self._endpoint

    @property
    def executor(self) -> asyncio.AbstractEventLoop | None:
        return self._executor

    async def send(self, payload: bytes) -> bytes:
        """POST ``payload`` verbatim and return the complete 2xx response body.

        Raises a TransportError subclass on failure. Cancelling the awaiting
        task aborts the exchange.
        """
        payload = _as_bytes(payload)
        if self._executor is None or asyncio.get_running_loop() is self._executor:
            return await self._dispatch(payload)
        return await asyncio.wrap_future(self.submit(payload))

    def submit(self, payload: bytes) -> "concurrent.futures.Future[bytes]":
        """Schedule ``send(payload)`` on the executor from any thread."""
        if self._executor is None:
            raise RuntimeError("submit() requires a transport constructed with an executor")
        if not self._executor.is_running():
            raise RuntimeError("the transport's executor loop is not running")
        return asyncio.run_coroutine_threadsafe(self._dispatch(_as_bytes(payload)), self._executor)

    def call(self, payload: bytes) -> bytes:
        """Blocking ``send()`` for callers that are not running inside the executor."""
        if self._on_executor_thread():
            raise RuntimeError("call() would block the transport's own event loop; await send() instead")
        return self.submit(payload).result()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def close(self) -> None:
        """Synchronous shutdown for transports with an executor running on another thread."""
        if self._executor is None:
            raise RuntimeError("close() requires an executor; use aclose() instead")
        if self._on_executor_thread():
            raise RuntimeError("close() would block the transport's own event loop; use aclose() instead")
        try:
            if self._executor.is_running():
                asyncio.run_coroutine_threadsafe(self.aclose(), self._executor).result()
        finally:
            if self._loop_thread is not None:
                self._loop_thread.stop()
                self._loop_thread = None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _dispatch(self, payload: bytes) -> bytes:
        request = InFlightRequest(request_id=next(self._ids), payload=payload)
        return await self._dispatcher.dispatch(request)

    def _on_executor_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._executor
        except RuntimeError:
            return False


def _as_bytes(payload: Any) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, (bytearray, memoryview)):
        return bytes(payload)
    raise TypeError(f"payload must be bytes-like, not {type(payload).__name__}")


__all__ = ["HttpTransport"]
