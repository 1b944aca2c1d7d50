"""Common transport abstractions."""

from __future__ import annotations

from typing import AsyncContextManager, Literal, Protocol, runtime_checkable

import httpx
from httpx_ws import AsyncWebSocketSession

from ..request import WireRequest

TransportKind = Literal["unix", "tcp", "tls"]


@runtime_checkable
class Transport(Protocol):
    Kind = TransportKind

    @property
    def kind(self) -> TransportKind: ...

    @property
    def base_url(self) -> str: ...

    async def send(self, request: WireRequest) -> httpx.Response:
        """Write ``request`` and return once response headers are received.

        The body is left unread; the caller owns the response and must close it.
        """
        ...

    def websocket(self, request: WireRequest) -> AsyncContextManager[AsyncWebSocketSession]: ...

    async def aclose(self) -> None: ...


__all__ = ["Transport", "TransportKind"]
