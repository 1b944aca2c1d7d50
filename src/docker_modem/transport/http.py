"""HTTP transport built on top of httpx."""

from __future__ import annotations

import ssl
from typing import AsyncContextManager

import httpx
from httpx_ws import AsyncWebSocketSession, aconnect_ws

from ..errors import DockerModemError, ProtocolError, TransportError
from ..logger import BoundLogger, create_logger
from ..request import WireRequest
from .base import Transport

# httpcore reports a peer that hangs up mid-exchange as a protocol error
_DISCONNECT_MARKERS = (
    "server disconnected",
    "peer closed connection",
    "connection closed",
    "connection reset",
)


def _is_disconnect(exc: httpx.RemoteProtocolError) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _DISCONNECT_MARKERS)


def _caused_by(exc: BaseException, kind: type[BaseException]) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, kind):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def translate_error(exc: httpx.HTTPError, target: str) -> DockerModemError:
    """Map an httpx failure onto the modem's transport/protocol errors.

    A peer that closes the connection early is a transport failure; only a
    response that cannot be parsed is a protocol failure.
    """
    if isinstance(exc, httpx.RemoteProtocolError):
        if _is_disconnect(exc):
            return TransportError(f"Connection to {target} closed mid-exchange: {exc}")
        return ProtocolError(f"Malformed response from {target}: {exc}")
    if isinstance(exc, httpx.TimeoutException):
        return TransportError(f"Timed out talking to {target}: {exc}")
    if isinstance(exc, httpx.ConnectError) and _caused_by(exc, ssl.SSLError):
        return TransportError(f"TLS handshake with {target} failed: {exc}")
    if isinstance(exc, httpx.ConnectError):
        return TransportError(f"Cannot connect to {target}: {exc}")
    return TransportError(f"Connection to {target} failed: {exc}")


class HttpTransport:
    def __init__(
        self,
        base_url: str,
        *,
        kind: Transport.Kind = "tcp",
        timeout: float = 60.0,
        connect_timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._kind = kind
        self._timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._stream_timeout = httpx.Timeout(timeout, connect=connect_timeout, read=None)
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            transport=transport,
            timeout=self._timeout,
        )
        self._owns_client = client is None
        self._logger = (logger or create_logger()).child(kind)

    @property
    def kind(self) -> Transport.Kind:
        return self._kind

    @property
    def base_url(self) -> str:
        return self._base_url

    async def send(self, request: WireRequest) -> httpx.Response:
        http_request = self._client.build_request(
            request.method,
            request.path,
            params=request.query or None,
            headers=request.headers,
            content=request.content,
            timeout=self._stream_timeout if request.long_lived else self._timeout,
        )
        self._logger.trace(
            "%s %s%s bytes=%d",
            request.method,
            self._base_url,
            request.target,
            len(request.content or b""),
        )
        try:
            return await self._client.send(http_request, stream=True)
        except httpx.HTTPError as exc:
            self._logger.warn("%s %s failed: %s", request.method, request.target, exc)
            raise translate_error(exc, self._base_url) from exc

    def websocket(self, request: WireRequest) -> AsyncContextManager[AsyncWebSocketSession]:
        """Open a websocket over the same client (and socket kind) as ``send``."""
        self._logger.trace("WS %s%s", self._base_url, request.target)
        return aconnect_ws(
            request.path,
            self._client,
            params=request.query or None,
            headers=dict(request.headers),
            timeout=self._stream_timeout,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["HttpTransport", "translate_error"]
