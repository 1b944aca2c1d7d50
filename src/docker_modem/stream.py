"""Live channels over streamed and hijacked daemon connections.

Docker multiplexes stdout and stderr on non-TTY attach/exec/log streams. Each
frame starts with an 8 byte header::

    [stream type, 0, 0, 0, size (big-endian uint32)]

followed by ``size`` bytes of payload. TTY sessions send raw bytes instead.
"""

from __future__ import annotations

import asyncio
import enum
import socket
import struct
from dataclasses import dataclass
from typing import Any, AsyncIterator

import httpcore
import httpx

from .errors import ProtocolError, TransportError
from .logger import BoundLogger, create_logger
from .parser import parse_json_line

HEADER_SIZE = 8
DEFAULT_READ_SIZE = 64 * 1024
MULTIPLEXED_CONTENT_TYPE = "application/vnd.docker.multiplexed-stream"

_HEADER = struct.Struct(">BxxxL")
_STREAM_TYPES = frozenset((0, 1, 2, 3))


class StreamKind(enum.IntEnum):
    STDIN = 0
    STDOUT = 1
    STDERR = 2
    SYSTEMERR = 3


@dataclass(frozen=True)
class Frame:
    kind: StreamKind
    data: bytes


def parse_frame_header(header: bytes | bytearray) -> tuple[StreamKind, int]:
    kind, size = _HEADER.unpack(bytes(header[:HEADER_SIZE]))
    try:
        return StreamKind(kind), size
    except ValueError as exc:
        raise ProtocolError(f"Unknown stream type {kind} in frame header", context=bytes(header)) from exc


def looks_multiplexed(prefix: bytes | bytearray) -> bool:
    """Sniff whether ``prefix`` starts with a multiplexing header."""
    if len(prefix) < HEADER_SIZE:
        return False
    return prefix[0] in _STREAM_TYPES and prefix[1:4] == b"\x00\x00\x00"


def demux_bytes(data: bytes) -> list[Frame]:
    """Split a fully buffered multiplexed body into frames."""
    frames: list[Frame] = []
    offset = 0
    while offset < len(data):
        if len(data) - offset < HEADER_SIZE:
            raise ProtocolError("Truncated frame header", context=data[offset:])
        kind, size = parse_frame_header(data[offset : offset + HEADER_SIZE])
        start = offset + HEADER_SIZE
        if start + size > len(data):
            raise ProtocolError("Truncated frame payload", context=data[offset:])
        frames.append(Frame(kind, data[start : start + size]))
        offset = start + size
    return frames


class _ResponseSource:
    """Read-only source over a streamed response body."""

    writable = False

    def __init__(self, response: httpx.Response) -> None:
        # Unsized so each chunk is handed over as soon as it arrives
        self._chunks = response.aiter_bytes()

    async def read(self) -> bytes:
        try:
            return await self._chunks.__anext__()
        except StopAsyncIteration:
            return b""
        except httpx.HTTPError as exc:
            raise _stream_error(exc) from exc

    async def write(self, data: bytes) -> None:
        raise ProtocolError("Stream is read-only: the daemon did not upgrade the connection")

    def shutdown_write(self) -> None:
        raise ProtocolError("Stream is read-only: the daemon did not upgrade the connection")

    async def aclose(self) -> None:
        return None


class _NetworkSource:
    """Duplex source over the raw socket of an upgraded (hijacked) connection."""

    writable = True

    def __init__(self, network_stream: Any, read_size: int) -> None:
        self._network_stream = network_stream
        self._read_size = read_size

    async def read(self) -> bytes:
        try:
            return await self._network_stream.read(self._read_size)
        except (httpcore.NetworkError, httpcore.TimeoutException, OSError) as exc:
            raise _stream_error(exc) from exc

    async def write(self, data: bytes) -> None:
        try:
            await self._network_stream.write(data)
        except (httpcore.NetworkError, httpcore.TimeoutException, OSError) as exc:
            raise _stream_error(exc) from exc

    def shutdown_write(self) -> None:
        sock = self._network_stream.get_extra_info("socket")
        if sock is None:
            raise ProtocolError("Underlying socket does not support half-close")
        try:
            sock.shutdown(socket.SHUT_WR)
        except OSError as exc:
            raise TransportError(f"Cannot half-close stream: {exc}") from exc

    async def aclose(self) -> None:
        await self._network_stream.aclose()


def _stream_error(exc: Exception) -> TransportError:
    return TransportError(f"Stream broke mid-exchange: {exc}")


class DockerStream:
    """A live channel bound to one HTTP connection.

    Reads are pull-based and bounded by ``read_size``; writes are only
    possible once the daemon has upgraded the connection (attach, exec).
    Closing the stream releases the connection.
    """

    def __init__(
        self,
        response: httpx.Response,
        *,
        network_stream: Any | None = None,
        tty: bool | None = None,
        read_size: int = DEFAULT_READ_SIZE,
        logger: BoundLogger | None = None,
    ) -> None:
        self._response = response
        if network_stream is not None:
            self._source: _ResponseSource | _NetworkSource = _NetworkSource(network_stream, read_size)
        else:
            self._source = _ResponseSource(response)
        self._logger = (logger or create_logger()).child("stream")
        self._buffer = bytearray()
        self._eof = False
        self._closed = False
        self._read_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._multiplexed: bool | None = None if tty is None else not tty
        if self._multiplexed is None:
            content_type = response.headers.get("content-type", "").lower()
            if MULTIPLEXED_CONTENT_TYPE in content_type:
                self._multiplexed = True

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def writable(self) -> bool:
        return self._source.writable and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def multiplexed(self) -> bool | None:
        """``None`` until the first read when the framing had to be sniffed."""
        return self._multiplexed

    async def read_frame(self) -> Frame | None:
        """Return the next frame, or ``None`` once the peer has finished."""
        async with self._read_lock:
            return await self._next_frame()

    async def read(self) -> bytes:
        """Return the next non-empty payload, or ``b""`` at end of stream."""
        async with self._read_lock:
            while True:
                frame = await self._next_frame()
                if frame is None:
                    return b""
                if frame.data:
                    return frame.data

    async def read_all(self) -> bytes:
        chunks = [chunk async for chunk in self]
        return b"".join(chunks)

    async def demux_all(self) -> tuple[bytes, bytes]:
        stdout: list[bytes] = []
        stderr: list[bytes] = []
        while True:
            frame = await self.read_frame()
            if frame is None:
                break
            (stderr if frame.kind is StreamKind.STDERR else stdout).append(frame.data)
        return b"".join(stdout), b"".join(stderr)

    async def iter_json(self) -> AsyncIterator[Any]:
        """Decode a newline-delimited JSON stream (events, stats, progress)."""
        pending = b""
        async for chunk in self:
            pending += chunk
            *lines, pending = pending.split(b"\n")
            for line in lines:
                if line.strip():
                    yield parse_json_line(line)
        if pending.strip():
            yield parse_json_line(pending)

    async def write(self, data: bytes | str) -> None:
        if self._closed:
            raise ProtocolError("Stream is closed")
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        async with self._write_lock:
            self._logger.trace("write bytes=%d", len(payload))
            await self._source.write(payload)

    async def close_write(self) -> None:
        """Half-close: signal end of stdin while still reading output."""
        if self._closed:
            raise ProtocolError("Stream is closed")
        async with self._write_lock:
            self._source.shutdown_write()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._logger.debug("closing stream status=%d", self.status)
        try:
            await self._source.aclose()
        finally:
            await self._response.aclose()

    async def __aenter__(self) -> "DockerStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read()
            if not chunk:
                return
            yield chunk

    async def _next_frame(self) -> Frame | None:
        if self._multiplexed is None:
            await self._fill(1)
            if not self._buffer:
                return None
            # Only a leading stream type byte can start a header; anything else is raw TTY output
            if self._buffer[0] in _STREAM_TYPES:
                await self._fill(HEADER_SIZE)
                self._multiplexed = looks_multiplexed(self._buffer)
            else:
                self._multiplexed = False
            self._logger.trace("sniffed multiplexed=%s", self._multiplexed)

        if not self._multiplexed:
            if not self._buffer:
                await self._fill(1)
            if not self._buffer:
                return None
            data = bytes(self._buffer)
            self._buffer.clear()
            return Frame(StreamKind.STDOUT, data)

        await self._fill(HEADER_SIZE)
        if not self._buffer:
            return None
        if len(self._buffer) < HEADER_SIZE:
            raise ProtocolError("Truncated frame header", context=bytes(self._buffer))
        kind, size = parse_frame_header(self._buffer)
        end = HEADER_SIZE + size
        await self._fill(end)
        if len(self._buffer) < end:
            raise ProtocolError("Truncated frame payload", context=bytes(self._buffer))
        data = bytes(self._buffer[HEADER_SIZE:end])
        del self._buffer[:end]
        return Frame(kind, data)

    async def _fill(self, size: int) -> None:
        if self._closed:
            raise ProtocolError("Stream is closed")
        while len(self._buffer) < size and not self._eof:
            chunk = await self._source.read()
            if not chunk:
                self._eof = True
                break
            self._buffer.extend(chunk)


__all__ = [
    "DockerStream",
    "Frame",
    "HEADER_SIZE",
    "StreamKind",
    "demux_bytes",
    "looks_multiplexed",
    "parse_frame_header",
]
