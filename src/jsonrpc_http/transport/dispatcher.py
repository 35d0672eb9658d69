"""Issues one HTTP exchange per JSON-RPC payload."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

import httpx

from ..config import EndpointConfig, ErrorBodyPolicy
from ..logger import BoundLogger, create_logger
from .base import InFlightRequest, RequestState
from .mapper import ErrorMapper

CONTENT_TYPE = "application/json"

# httpcore trace events, matched on their suffix so that both
# ``connection.*`` and ``http11.*`` names are recognised.
_TRACE_STATES = (
    ("connect_tcp.started", RequestState.CONNECTING),
    ("send_request_body.complete", RequestState.REQUEST_SENT),
    ("receive_response_headers.started", RequestState.AWAITING_HEADERS),
    ("receive_response_headers.complete", RequestState.AWAITING_BODY),
)


class RequestDispatcher:
    """Builds the POST for an InFlightRequest and resolves it to bytes or a TransportError.

    Exactly one HTTP attempt is made per request. Non-2xx bodies are handled
    according to ``error_body``:

    * ``DISCARD`` closes the response unread (the pool drops the connection).
    * ``DRAIN`` reads and drops the body so the connection can be reused.
    * ``EXPOSE`` reads the body and attaches it to the raised HttpStatusError.
    """

    def __init__(
        self,
        endpoint: EndpointConfig,
        client: httpx.AsyncClient,
        mapper: ErrorMapper,
        *,
        headers: Mapping[str, str] | None = None,
        error_body: ErrorBodyPolicy = ErrorBodyPolicy.DISCARD,
        logger: BoundLogger | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._client = client
        self._mapper = mapper
        self._error_body = ErrorBodyPolicy(error_body)
        self._logger = (logger or create_logger()).child("dispatch")
        request_headers = dict(headers or {})
        for name in list(request_headers):
            if name.lower() in ("content-type", "content-length", "accept-encoding"):
                del request_headers[name]
        request_headers["Content-Type"] = CONTENT_TYPE
        # Bodies are returned byte-for-byte, so no content coding is negotiated.
        request_headers["Accept-Encoding"] = "identity"
        self._headers = request_headers

    async def dispatch(self, request: InFlightRequest) -> bytes:
        log = self._logger.bind(request=request.request_id)
        response: httpx.Response | None = None
        try:
            http_request = self._build_request(request, log)
            request.advance(RequestState.CONNECTING)
            log.debug("HTTP POST %s bytes=%d", self._endpoint.uri, len(request.payload))
            response = await self._client.send(http_request, stream=True)
            request.advance(RequestState.AWAITING_BODY)
            log.debug("HTTP <- %s status=%s", self._endpoint.uri, response.status_code)

            error = self._mapper.map_status(response.status_code)
            if error is not None:
                error.body = await self._consume_error_body(response, log)
                raise error

            async for chunk in response.aiter_raw():
                request.body.extend(chunk)
            body = bytes(request.body)
            request.resolve()
            log.debug("HTTP <- %s bytes=%d", self._endpoint.uri, len(body))
            return body
        except asyncio.CancelledError:
            log.debug("Request cancelled in state %s", request.state.name)
            request.cancel()
            raise
        except Exception as exc:
            mapped = self._mapper.map_exception(exc, request.state)
            request.fail()
            log.warn("Request failed: %s", mapped)
            if mapped is exc:
                raise
            raise mapped from exc
        finally:
            if response is not None:
                await response.aclose()

    def _build_request(self, request: InFlightRequest, log: BoundLogger) -> httpx.Request:
        async def trace(event_name: str, info: Mapping[str, Any]) -> None:
            for suffix, state in _TRACE_STATES:
                if event_name.endswith(suffix) and request.advance(state):
                    log.trace("%s -> %s", event_name, state.name)

        return self._client.build_request(
            "POST",
            self._endpoint.uri,
            content=request.payload,
            headers=self._headers,
            extensions={"trace": trace},
        )

    async def _consume_error_body(self, response: httpx.Response, log: BoundLogger) -> bytes | None:
        if self._error_body is ErrorBodyPolicy.DISCARD:
            return None
        try:
            body = b"".join([chunk async for chunk in response.aiter_raw()])
        except (httpx.RequestError, httpx.StreamError) as exc:
            # The status is already known; a broken error body does not change the outcome.
            log.debug("Could not read error body: %s", exc)
            return None
        if self._error_body is ErrorBodyPolicy.EXPOSE:
            return body
        return None


__all__ = ["CONTENT_TYPE", "RequestDispatcher"]
