import ssl

import httpx
import pytest

from jsonrpc_http import (
    BodyReadError,
    ConnectionError,
    HttpStatusError,
    RequestState,
    TransportError,
)
from jsonrpc_http.transport.mapper import ErrorMapper, is_success

ENDPOINT = "http://127.0.0.1:8545/rpc"


@pytest.fixture
def mapper() -> ErrorMapper:
    return ErrorMapper(ENDPOINT)


@pytest.mark.parametrize(
    ("exc", "state", "expected"),
    [
        (httpx.ConnectError("refused"), RequestState.CONNECTING, ConnectionError),
        (httpx.ConnectTimeout("slow"), RequestState.CONNECTING, ConnectionError),
        (httpx.PoolTimeout("busy"), RequestState.CREATED, ConnectionError),
        (ssl.SSLError("handshake failure"), RequestState.CONNECTING, ConnectionError),
        (httpx.RemoteProtocolError("disconnected"), RequestState.AWAITING_HEADERS, ConnectionError),
        (httpx.ReadError("reset"), RequestState.REQUEST_SENT, ConnectionError),
        (httpx.ReadError("reset"), RequestState.AWAITING_BODY, BodyReadError),
        (httpx.RemoteProtocolError("illegal chunk header"), RequestState.AWAITING_BODY, BodyReadError),
        (httpx.DecodingError("bad gzip"), RequestState.AWAITING_BODY, BodyReadError),
        (httpx.ReadTimeout("no headers"), RequestState.AWAITING_HEADERS, ConnectionError),
        (httpx.ReadTimeout("stalled"), RequestState.AWAITING_BODY, BodyReadError),
    ],
)
def test_known_failures_map_to_taxonomy(mapper: ErrorMapper, exc: Exception, state: RequestState, expected: type) -> None:
    mapped = mapper.map_exception(exc, state)
    assert type(mapped) is expected
    assert mapped.context is exc
    assert ENDPOINT in str(mapped)


@pytest.mark.parametrize(
    "exc",
    [
        RuntimeError("something odd"),
        httpx.LocalProtocolError("bad header"),
        httpx.WriteTimeout("stuck"),
        httpx.DecodingError("bad gzip"),
    ],
)
def test_unrecognized_failures_fall_back_to_transport_error(mapper: ErrorMapper, exc: Exception) -> None:
    mapped = mapper.map_exception(exc, RequestState.REQUEST_SENT)
    assert type(mapped) is TransportError
    assert type(exc).__name__ in str(mapped)


def test_already_mapped_errors_pass_through(mapper: ErrorMapper) -> None:
    error = BodyReadError("short body")
    assert mapper.map_exception(error, RequestState.CONNECTING) is error


@pytest.mark.parametrize("status", [200, 201, 204, 299])
def test_success_statuses_map_to_nothing(mapper: ErrorMapper, status: int) -> None:
    assert is_success(status)
    assert mapper.map_status(status) is None


@pytest.mark.parametrize("status", [101, 301, 404, 500, 503])
def test_other_statuses_map_to_http_status_error(mapper: ErrorMapper, status: int) -> None:
    error = mapper.map_status(status, b"detail")
    assert isinstance(error, HttpStatusError)
    assert error.status == status
    assert error.body == b"detail"


def test_http_status_error_message_has_reason_phrase() -> None:
    assert str(HttpStatusError(404)) == "HTTP 404 Not Found"
    assert str(HttpStatusError(599)) == "HTTP 599 Unknown Status"
