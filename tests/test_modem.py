import asyncio

import httpx
import pytest

from docker_modem.errors import NotFoundError, ProtocolError, ServerError, TransportError
from docker_modem.request import CallDescriptor, ResponseKind
from docker_modem.response import Buffered, BufferedRaw, Streamed
from docker_modem.status import Success
from docker_modem.stream import DockerStream

from support import FakeNetworkStream, frame, make_modem

INSPECT = {200: True, 404: "no such container", 500: "server error"}


def inspect_call(**kwargs) -> CallDescriptor:
    return CallDescriptor(path="/containers/abc/json", method="GET", status_codes=INSPECT, **kwargs)


@pytest.mark.asyncio
async def test_dial_resolves_success_with_buffered_json() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Id": "abc"})

    modem = make_modem(handler)
    outcome = await modem.dial(inspect_call(options={"size": True}))
    assert outcome == Success(200, Buffered({"Id": "abc"}))
    assert seen[0].url.path == "/v1.41/containers/abc/json"
    assert seen[0].url.params["size"] == "true"


@pytest.mark.asyncio
async def test_dial_raises_domain_error_for_mapped_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "No such container: abc"})

    modem = make_modem(handler)
    with pytest.raises(NotFoundError) as excinfo:
        await modem.dial(inspect_call())
    assert excinfo.value.tag == "no such container"
    assert excinfo.value.status == 404
    assert excinfo.value.body == {"message": "No such container: abc"}


@pytest.mark.asyncio
async def test_dial_unmapped_status_is_unexpected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    modem = make_modem(handler)
    with pytest.raises(ServerError) as excinfo:
        await modem.dial(inspect_call())
    assert excinfo.value.tag == "unexpected status"
    assert excinfo.value.body == "bad gateway"


@pytest.mark.asyncio
async def test_invalid_json_body_is_a_protocol_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"{oops")

    modem = make_modem(handler)
    with pytest.raises(ProtocolError) as excinfo:
        await modem.dial(inspect_call())
    assert excinfo.value.context == b"{oops"


@pytest.mark.asyncio
async def test_empty_json_body_resolves_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    modem = make_modem(handler)
    descriptor = CallDescriptor(path="/containers/abc/start", method="POST", status_codes={204: True})
    assert await modem.call(descriptor) is None


@pytest.mark.asyncio
async def test_raw_response_as_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"OK")

    modem = make_modem(handler)
    descriptor = CallDescriptor(
        path="/_ping", method="GET", status_codes={200: True}, response=ResponseKind.RAW, as_text=True
    )
    outcome = await modem.dial(descriptor)
    assert outcome.body == BufferedRaw("OK")


@pytest.mark.asyncio
async def test_transport_failure_before_headers_settles_once() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadError("connection reset by peer", request=request)

    modem = make_modem(handler)
    settled: list[asyncio.Task] = []
    task = asyncio.ensure_future(modem.dial(inspect_call()))
    task.add_done_callback(settled.append)

    with pytest.raises(TransportError):
        await task
    for _ in range(5):
        await asyncio.sleep(0)
    assert len(settled) == 1
    assert isinstance(task.exception(), TransportError)


@pytest.mark.asyncio
async def test_malformed_response_is_a_protocol_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.RemoteProtocolError("illegal status line", request=request)

    modem = make_modem(handler)
    with pytest.raises(ProtocolError):
        await modem.dial(inspect_call())


@pytest.mark.asyncio
async def test_dial_safe_wraps_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "boom"})

    modem = make_modem(handler)
    result = await modem.dial_safe(inspect_call())
    assert result.ok is False
    assert isinstance(result.error, ServerError)


@pytest.mark.asyncio
async def test_stream_handle_is_returned_before_transfer_completes() -> None:
    release = asyncio.Event()

    async def slow_archive():
        yield b"first-block"
        await release.wait()
        yield b"second-block"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Type": "application/x-tar"}, content=slow_archive())

    modem = make_modem(handler)
    descriptor = CallDescriptor(
        path="/containers/abc/archive",
        method="GET",
        status_codes={200: True},
        options={"path": "/log"},
        response=ResponseKind.STREAM,
    )
    outcome = await asyncio.wait_for(modem.dial(descriptor), timeout=1)
    assert isinstance(outcome.body, Streamed)
    stream = outcome.body.value
    assert await stream.read() == b"first-block"

    release.set()
    assert await stream.read_all() == b"second-block"
    await stream.aclose()
    assert stream.closed


@pytest.mark.asyncio
async def test_hijacked_exchange_returns_duplex_stream() -> None:
    network = FakeNetworkStream([frame(1, b"hello "), frame(2, b"oops"), frame(1, b"world")])
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            101,
            headers={"Connection": "Upgrade", "Upgrade": "tcp"},
            extensions={"network_stream": network},
        )

    modem = make_modem(handler)
    descriptor = CallDescriptor(
        path="/containers/abc/attach",
        method="POST",
        status_codes={101: True, 200: True},
        options={"stream": True, "stdin": True, "stdout": True},
        response=ResponseKind.HIJACK,
    )
    stream = await modem.call(descriptor)
    assert isinstance(stream, DockerStream)
    assert stream.writable
    assert seen[0].headers["upgrade"] == "tcp"

    await stream.write(b"ls\n")
    assert network.written == [b"ls\n"]

    stdout, stderr = await stream.demux_all()
    assert stdout == b"hello world"
    assert stderr == b"oops"
    assert stream.multiplexed is True

    await stream.aclose()
    assert network.closed
    assert not stream.writable


@pytest.mark.asyncio
async def test_upgrade_without_network_stream_is_a_protocol_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(101)

    modem = make_modem(handler)
    descriptor = CallDescriptor(
        path="/containers/abc/attach",
        method="POST",
        status_codes={101: True},
        response=ResponseKind.HIJACK,
    )
    with pytest.raises(ProtocolError):
        await modem.dial(descriptor)


@pytest.mark.asyncio
async def test_websocket_endpoints_are_not_dialed() -> None:
    seen: list[httpx.Request] = []
    modem = make_modem(lambda request: seen.append(request) or httpx.Response(101))
    with pytest.raises(TypeError):
        await modem.dial(inspect_call(response=ResponseKind.WEBSOCKET))
    assert seen == []
