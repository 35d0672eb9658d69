"""Shared fixtures."""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from jsonrpc_http import HttpTransport

from .server import RpcServer


@pytest_asyncio.fixture
async def rpc_server():
    server = RpcServer()
    await server.start()
    yield server
    await server.stop()


@pytest_asyncio.fixture
async def transport(rpc_server: RpcServer):
    transport = HttpTransport(rpc_server.url(), executor=asyncio.get_running_loop())
    yield transport
    await transport.aclose()


@pytest.fixture
def ping_payload() -> bytes:
    return b'{"jsonrpc":"2.0","method":"ping","id":1}'
