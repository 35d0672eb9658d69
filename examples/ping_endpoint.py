"""Send a JSON-RPC ping to an endpoint and print the raw reply."""

from __future__ import annotations

import asyncio
import os
import sys

from jsonrpc_http import EndpointConfig, HttpStatusError, HttpTransport, TransportError

ENDPOINT = os.getenv("JSONRPC_DEMO_URL", "http://127.0.0.1:8545/rpc")
PAYLOAD = b'{"jsonrpc":"2.0","method":"ping","id":1}'


async def ping_concurrently(transport: HttpTransport, count: int) -> list[bytes | BaseException]:
    payloads = [PAYLOAD.replace(b'"id":1', f'"id":{n}'.encode()) for n in range(1, count + 1)]
    return await asyncio.gather(*(transport.send(p) for p in payloads), return_exceptions=True)


async def main() -> int:
    endpoint = EndpointConfig.for_uri(ENDPOINT)
    async with HttpTransport(endpoint.uri, endpoint.tls, asyncio.get_running_loop(), log_level="debug") as transport:
        try:
            reply = await transport.send(PAYLOAD)
        except HttpStatusError as exc:
            print(f"endpoint answered {exc.status}")
            return 1
        except TransportError as exc:
            print(f"transport failure: {exc}")
            return 1
        print(reply.decode("utf-8", errors="replace"))

        for result in await ping_concurrently(transport, 5):
            print(result if isinstance(result, BaseException) else result.decode("utf-8", errors="replace"))
    return 0


def main_blocking() -> int:
    endpoint = EndpointConfig.for_uri(ENDPOINT)
    transport = HttpTransport.standalone(endpoint.uri, endpoint.tls)
    try:
        print(transport.call(PAYLOAD).decode("utf-8", errors="replace"))
    finally:
        transport.close()
    return 0


if __name__ == "__main__":
    if "--blocking" in sys.argv:
        sys.exit(main_blocking())
    sys.exit(asyncio.run(main()))
