"""Connection configuration and client options."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union
from urllib.parse import urlparse

from .logger import LogLevel

DEFAULT_SOCKET_PATH = "/var/run/docker.sock"
DEFAULT_API_VERSION = "v1.41"
DEFAULT_TIMEOUT = 60.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_TCP_PORT = 2375
DEFAULT_TLS_PORT = 2376


@dataclass(frozen=True)
class TlsCredentials:
    """Certificate material handed to the TLS transport as opaque file paths."""

    ca_cert: str | None = None
    client_cert: str | None = None
    client_key: str | None = None
    verify: bool = True

    @classmethod
    def from_cert_path(cls, cert_path: str | os.PathLike[str], *, verify: bool = True) -> "TlsCredentials":
        """Use the ``ca.pem``/``cert.pem``/``key.pem`` layout of ``DOCKER_CERT_PATH``."""
        base = Path(cert_path).expanduser()
        ca = base / "ca.pem"
        cert = base / "cert.pem"
        key = base / "key.pem"
        return cls(
            ca_cert=str(ca) if ca.exists() else None,
            client_cert=str(cert) if cert.exists() else None,
            client_key=str(key) if key.exists() else None,
            verify=verify,
        )


@dataclass(frozen=True)
class UnixSocketConfig:
    socket_path: str = DEFAULT_SOCKET_PATH


@dataclass(frozen=True)
class TcpConfig:
    host: str
    port: int = DEFAULT_TCP_PORT
    scheme: str = "http"


@dataclass(frozen=True)
class TlsConfig:
    host: str
    port: int = DEFAULT_TLS_PORT
    credentials: TlsCredentials = TlsCredentials()


ConnectionConfig = Union[UnixSocketConfig, TcpConfig, TlsConfig]


def parse_host(url: str, *, tls: TlsCredentials | None = None) -> ConnectionConfig:
    """Turn a ``DOCKER_HOST`` style address into a connection configuration."""
    if url.startswith("/"):
        return UnixSocketConfig(url)

    parsed = urlparse(url)
    scheme = (parsed.scheme or "tcp").lower()

    if scheme in {"unix", "http+unix"}:
        path = parsed.path or DEFAULT_SOCKET_PATH
        return UnixSocketConfig(path)

    if scheme in {"tcp", "http", "https"}:
        host = parsed.hostname or "localhost"
        if scheme == "https" or tls is not None:
            return TlsConfig(host, parsed.port or DEFAULT_TLS_PORT, tls or TlsCredentials())
        return TcpConfig(host, parsed.port or DEFAULT_TCP_PORT)

    raise ValueError(f"Unsupported scheme: {scheme}")


def config_from_env(environ: Mapping[str, str] | None = None) -> ConnectionConfig:
    """Build a configuration the way the Docker CLI reads its environment."""
    env = os.environ if environ is None else environ
    host = env.get("DOCKER_HOST", "").strip()
    tls_verify = env.get("DOCKER_TLS_VERIFY", "").strip() not in {"", "0", "false"}
    cert_path = env.get("DOCKER_CERT_PATH", "").strip()

    # Like the Docker CLI, DOCKER_CERT_PATH alone does not switch TLS on
    tls: TlsCredentials | None = None
    if tls_verify:
        tls = TlsCredentials.from_cert_path(cert_path or "~/.docker")

    if not host:
        return UnixSocketConfig()
    if host.startswith("unix://") or host.startswith("/"):
        return parse_host(host)
    return parse_host(host, tls=tls)


@dataclass
class ClientOptions:
    connection: ConnectionConfig
    api_version: str | None = DEFAULT_API_VERSION
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    default_headers: Mapping[str, str] | None = None
    logger: Any | None = None
    log_level: LogLevel | None = None


__all__ = [
    "ClientOptions",
    "ConnectionConfig",
    "DEFAULT_API_VERSION",
    "DEFAULT_SOCKET_PATH",
    "TcpConfig",
    "TlsConfig",
    "TlsCredentials",
    "UnixSocketConfig",
    "config_from_env",
    "parse_host",
]
