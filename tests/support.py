from __future__ import annotations

import asyncio
import json
import struct
from typing import Any, Callable

import httpx

from docker_modem.modem import Modem
from docker_modem.transport.http import HttpTransport

BASE_URL = "http://docker"


class FakeNetworkStream:
    """Stands in for the raw socket httpcore exposes after a 101 upgrade.

    With ``hold_open`` the peer goes idle instead of closing once the chunks
    run out, like an interactive session waiting for input.
    """

    def __init__(self, chunks: list[bytes] | None = None, *, hold_open: bool = False) -> None:
        self._chunks = list(chunks or [])
        self._hold_open = hold_open
        self._released = asyncio.Event()
        self.written: list[bytes] = []
        self.closed = False

    async def read(self, max_bytes: int, timeout: float | None = None) -> bytes:
        if not self._chunks:
            if self._hold_open:
                await self._released.wait()
            return b""
        chunk = self._chunks.pop(0)
        if len(chunk) > max_bytes:
            self._chunks.insert(0, chunk[max_bytes:])
            chunk = chunk[:max_bytes]
        return chunk

    async def write(self, buffer: bytes, timeout: float | None = None) -> None:
        self.written.append(buffer)

    async def aclose(self) -> None:
        self.closed = True
        self._released.set()

    def get_extra_info(self, info: str) -> Any:
        return None


def frame(kind: int, data: bytes) -> bytes:
    return struct.pack(">BxxxL", kind, len(data)) + data


def make_transport(handler: Callable[[httpx.Request], Any]) -> HttpTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return HttpTransport(BASE_URL, kind="unix", client=client)


def make_modem(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> Modem:
    return Modem(make_transport(handler), **kwargs)


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content)
