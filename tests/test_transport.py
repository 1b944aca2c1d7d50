import asyncio
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

import httpx
import pytest

from docker_modem.config import (
    DEFAULT_SOCKET_PATH,
    TcpConfig,
    TlsConfig,
    TlsCredentials,
    UnixSocketConfig,
    config_from_env,
    parse_host,
)
from docker_modem.client import DockerClient
from docker_modem.endpoints import endpoint
from docker_modem.errors import ProtocolError, TransportError
from docker_modem.modem import Modem
from docker_modem.request import WireRequest
from docker_modem.transport import HttpTransport, connect, create_ssl_context, translate_error

from support import make_transport


@pytest.mark.parametrize(
    "url,expected",
    [
        ("/var/run/docker.sock", UnixSocketConfig("/var/run/docker.sock")),
        ("unix:///tmp/docker.sock", UnixSocketConfig("/tmp/docker.sock")),
        ("tcp://10.0.0.5:2375", TcpConfig("10.0.0.5", 2375)),
        ("tcp://build-host", TcpConfig("build-host", 2375)),
        ("https://remote:3376", TlsConfig("remote", 3376)),
    ],
)
def test_parse_host(url: str, expected) -> None:
    assert parse_host(url) == expected


def test_parse_host_with_credentials_selects_tls() -> None:
    creds = TlsCredentials(ca_cert="/certs/ca.pem")
    assert parse_host("tcp://remote", tls=creds) == TlsConfig("remote", 2376, creds)


def test_parse_host_rejects_unknown_scheme() -> None:
    with pytest.raises(ValueError):
        parse_host("ssh://user@remote")


def test_config_from_env_defaults_to_local_socket() -> None:
    assert config_from_env({}) == UnixSocketConfig(DEFAULT_SOCKET_PATH)


def test_config_from_env_reads_tls_settings(tmp_path) -> None:
    (tmp_path / "ca.pem").write_text("ca")
    env = {
        "DOCKER_HOST": "tcp://swarm:2376",
        "DOCKER_TLS_VERIFY": "1",
        "DOCKER_CERT_PATH": str(tmp_path),
    }
    config = config_from_env(env)
    assert isinstance(config, TlsConfig)
    assert config.host == "swarm"
    assert config.credentials.ca_cert == str(tmp_path / "ca.pem")
    assert config.credentials.client_cert is None
    assert config.credentials.verify is True


def test_cert_path_alone_does_not_enable_tls(tmp_path) -> None:
    env = {"DOCKER_HOST": "tcp://swarm:2375", "DOCKER_CERT_PATH": str(tmp_path)}
    assert config_from_env(env) == TcpConfig("swarm", 2375)


@pytest.mark.asyncio
async def test_connect_unix_socket() -> None:
    transport = connect(UnixSocketConfig("/tmp/docker.sock"))
    assert transport.kind == "unix"
    assert transport.base_url == "http://docker"
    await transport.aclose()


@pytest.mark.asyncio
async def test_connect_tcp() -> None:
    transport = connect(TcpConfig("10.0.0.5", 2375))
    assert transport.kind == "tcp"
    assert transport.base_url == "http://10.0.0.5:2375"
    await transport.aclose()


@pytest.mark.asyncio
async def test_connect_tls_without_verification() -> None:
    transport = connect(TlsConfig("remote", 2376, TlsCredentials(verify=False)))
    assert transport.kind == "tls"
    assert transport.base_url == "https://remote:2376"
    await transport.aclose()


def test_connect_rejects_unknown_config() -> None:
    with pytest.raises(TypeError):
        connect("tcp://remote")  # type: ignore[arg-type]


def test_missing_ca_file_is_a_transport_error(tmp_path) -> None:
    with pytest.raises(TransportError):
        create_ssl_context(TlsCredentials(ca_cert=str(tmp_path / "missing.pem")))


def test_client_key_without_certificate_is_rejected() -> None:
    with pytest.raises(TransportError):
        create_ssl_context(TlsCredentials(client_key="/certs/key.pem", verify=False))


def test_translate_error() -> None:
    request = httpx.Request("GET", "http://docker/_ping")
    assert isinstance(translate_error(httpx.RemoteProtocolError("bad", request=request), "x"), ProtocolError)
    assert isinstance(translate_error(httpx.ConnectError("refused", request=request), "x"), TransportError)
    assert isinstance(translate_error(httpx.ReadTimeout("slow", request=request), "x"), TransportError)
    dropped = httpx.RemoteProtocolError("Server disconnected without sending a response.", request=request)
    assert isinstance(translate_error(dropped, "x"), TransportError)


@pytest.mark.asyncio
async def test_send_disables_read_timeout_for_streams() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"chunk")

    transport = make_transport(handler)
    short = WireRequest("GET", "/v1.41/_ping", [], {})
    long = WireRequest("GET", "/v1.41/events", [("since", "10")], {}, long_lived=True)

    response = await transport.send(short)
    assert await response.aread() == b"chunk"
    await response.aclose()
    await transport.send(long)

    assert seen[0].extensions["timeout"]["read"] == 60.0
    assert seen[1].extensions["timeout"]["read"] is None
    assert seen[1].url.params["since"] == "10"


@pytest.mark.asyncio
async def test_send_translates_connection_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    transport = make_transport(handler)
    with pytest.raises(TransportError):
        await transport.send(WireRequest("GET", "/_ping", [], {}))


@pytest.mark.asyncio
async def test_injected_client_is_not_closed() -> None:
    client = httpx.AsyncClient(base_url="http://docker")
    transport = HttpTransport("http://docker", kind="unix", client=client)
    await transport.aclose()
    assert not client.is_closed
    await client.aclose()


Handler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


def replying(reply: bytes) -> Handler:
    """A daemon that reads one request head, writes ``reply`` and hangs up."""

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await reader.readuntil(b"\r\n\r\n")
        writer.write(reply)
        await writer.drain()
        writer.close()

    return handle


@asynccontextmanager
async def tcp_daemon(handle: Handler) -> AsyncIterator[int]:
    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    async with server:
        yield server.sockets[0].getsockname()[1]


def version_call():
    return endpoint("system.version").descriptor()


@pytest.mark.asyncio
async def test_unix_daemon_hanging_up_before_reply_is_a_transport_error(tmp_path) -> None:
    path = str(tmp_path / "docker.sock")
    server = await asyncio.start_unix_server(replying(b""), path=path)
    async with server:
        async with DockerClient(UnixSocketConfig(path)) as docker:
            with pytest.raises(TransportError):
                await docker.container.inspect(resource_id="abc")


@pytest.mark.asyncio
async def test_body_cut_short_is_a_transport_error() -> None:
    reply = b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nContent-Length: 100\r\n\r\n{\"Ver"
    async with tcp_daemon(replying(reply)) as port:
        modem = Modem(connect(TcpConfig("127.0.0.1", port)))
        with pytest.raises(TransportError):
            await modem.call(version_call())
        await modem.aclose()


@pytest.mark.asyncio
async def test_garbled_status_line_is_a_protocol_error() -> None:
    async with tcp_daemon(replying(b"NOT-HTTP garbage\r\n\r\n")) as port:
        modem = Modem(connect(TcpConfig("127.0.0.1", port)))
        with pytest.raises(ProtocolError):
            await modem.call(version_call())
        await modem.aclose()


@pytest.mark.asyncio
async def test_failed_tls_handshake_is_a_transport_error() -> None:
    async def plaintext_only(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await reader.read(1024)
        writer.write(b"HTTP/1.1 400 Bad Request\r\nContent-Length: 0\r\n\r\n")
        await writer.drain()
        writer.close()

    async with tcp_daemon(plaintext_only) as port:
        modem = Modem(connect(TlsConfig("127.0.0.1", port, TlsCredentials(verify=False))))
        with pytest.raises(TransportError):
            await modem.call(version_call())
        await modem.aclose()


@pytest.mark.asyncio
async def test_ssl_cause_is_reported_as_tls_handshake_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("handshake failed", request=request) from ssl.SSLError("wrong version number")

    transport = make_transport(handler)
    with pytest.raises(TransportError) as excinfo:
        await transport.send(WireRequest("GET", "/_ping", [], {}))
    assert "TLS handshake" in str(excinfo.value)
