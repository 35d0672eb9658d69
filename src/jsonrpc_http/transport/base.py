"""Common transport abstractions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """What a JSON-RPC client needs from a transport: opaque bytes in, opaque bytes out."""

    async def send(self, payload: bytes) -> bytes: ...


class RequestState(enum.IntEnum):
    CREATED = 0
    CONNECTING = 1
    REQUEST_SENT = 2
    AWAITING_HEADERS = 3
    AWAITING_BODY = 4
    RESOLVED = 5
    FAILED = 6
    CANCELLED = 7

    @property
    def terminal(self) -> bool:
        return self >= RequestState.RESOLVED


@dataclass(eq=False)
class InFlightRequest:
    """State of one outstanding ``send()`` call.

    States only move forward; once terminal the request never changes again.
    """

    request_id: int
    payload: bytes
    state: RequestState = RequestState.CREATED
    body: bytearray = field(default_factory=bytearray)

    def advance(self, state: RequestState) -> bool:
        """Move to ``state`` if it lies ahead of the current one."""
        if self.state.terminal or state.terminal or state <= self.state:
            return False
        self.state = state
        return True

    def resolve(self) -> None:
        self._finish(RequestState.RESOLVED)

    def fail(self) -> None:
        self._finish(RequestState.FAILED)

    def cancel(self) -> None:
        self._finish(RequestState.CANCELLED)
        self.body.clear()

    def _finish(self, state: RequestState) -> None:
        if not self.state.terminal:
            self.state = state


__all__ = ["InFlightRequest", "RequestState", "Transport"]
