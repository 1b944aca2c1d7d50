"""Shaping raw responses into buffered values or live streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import httpx

from .errors import ProtocolError
from .logger import BoundLogger
from .parser import decode_json, parse_json_lines
from .request import CallDescriptor, ResponseKind
from .stream import DockerStream, demux_bytes, looks_multiplexed, MULTIPLEXED_CONTENT_TYPE

SWITCHING_PROTOCOLS = 101


@dataclass(frozen=True)
class Buffered:
    value: Any


@dataclass(frozen=True)
class BufferedRaw:
    value: bytes | str


@dataclass(frozen=True)
class Streamed:
    value: DockerStream


AdaptedResult = Union[Buffered, BufferedRaw, Streamed]


async def adapt(
    descriptor: CallDescriptor,
    response: httpx.Response,
    *,
    logger: BoundLogger | None = None,
) -> AdaptedResult:
    kind = descriptor.response

    if kind is ResponseKind.HIJACK:
        return Streamed(_hijack(descriptor, response, logger))
    if kind is ResponseKind.STREAM:
        return Streamed(DockerStream(response, tty=_stream_tty(descriptor), logger=logger))
    if kind is ResponseKind.HEADERS:
        return Buffered({key.lower(): value for key, value in response.headers.items()})

    body = await response.aread()
    if kind is ResponseKind.RAW:
        return BufferedRaw(_raw_value(descriptor, response, body))
    if kind is ResponseKind.JSON_LINES:
        return Buffered(parse_json_lines(body))
    return Buffered(decode_json(body))


def _hijack(
    descriptor: CallDescriptor,
    response: httpx.Response,
    logger: BoundLogger | None,
) -> DockerStream:
    network_stream = None
    if response.status_code == SWITCHING_PROTOCOLS:
        network_stream = response.extensions.get("network_stream")
        if network_stream is None:
            raise ProtocolError("Connection upgrade accepted but no network stream is available")
    return DockerStream(
        response,
        network_stream=network_stream,
        tty=descriptor.tty,
        logger=logger,
    )


def _stream_tty(descriptor: CallDescriptor) -> bool | None:
    # Streams that are never framed (tar archives, JSON progress) behave like a TTY
    if not descriptor.demux:
        return True
    return descriptor.tty


def _raw_value(descriptor: CallDescriptor, response: httpx.Response, body: bytes) -> bytes | str:
    data = body
    if descriptor.demux and _is_multiplexed(descriptor, response, body):
        data = b"".join(frame.data for frame in demux_bytes(body))
    if descriptor.as_text:
        return data.decode(response.encoding or "utf-8", errors="replace")
    return data


def _is_multiplexed(descriptor: CallDescriptor, response: httpx.Response, body: bytes) -> bool:
    if descriptor.tty is not None:
        return not descriptor.tty
    if MULTIPLEXED_CONTENT_TYPE in response.headers.get("content-type", "").lower():
        return True
    return looks_multiplexed(body)


__all__ = ["AdaptedResult", "Buffered", "BufferedRaw", "Streamed", "adapt"]
