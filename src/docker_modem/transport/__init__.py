"""Transport selection: Unix socket, plain TCP or TLS."""

from __future__ import annotations

import httpx

from ..config import ConnectionConfig, TcpConfig, TlsConfig, UnixSocketConfig
from ..logger import BoundLogger, create_logger
from .base import Transport, TransportKind
from .http import HttpTransport, translate_error
from .tls import create_ssl_context

UNIX_BASE_URL = "http://docker"


def connect(
    config: ConnectionConfig,
    *,
    timeout: float = 60.0,
    connect_timeout: float = 10.0,
    logger: BoundLogger | None = None,
) -> HttpTransport:
    """Pick the transport variant for ``config``; it stays fixed for the client's lifetime."""
    logger = logger or create_logger()

    if isinstance(config, UnixSocketConfig):
        logger.info("Using unix socket %s", config.socket_path)
        return HttpTransport(
            UNIX_BASE_URL,
            kind="unix",
            timeout=timeout,
            connect_timeout=connect_timeout,
            transport=httpx.AsyncHTTPTransport(uds=config.socket_path),
            logger=logger,
        )

    if isinstance(config, TlsConfig):
        context = create_ssl_context(config.credentials)
        logger.info("Using tls://%s:%s", config.host, config.port)
        return HttpTransport(
            f"https://{config.host}:{config.port}",
            kind="tls",
            timeout=timeout,
            connect_timeout=connect_timeout,
            transport=httpx.AsyncHTTPTransport(verify=context),
            logger=logger,
        )

    if isinstance(config, TcpConfig):
        logger.info("Using tcp://%s:%s", config.host, config.port)
        return HttpTransport(
            f"{config.scheme}://{config.host}:{config.port}",
            kind="tcp",
            timeout=timeout,
            connect_timeout=connect_timeout,
            logger=logger,
        )

    raise TypeError(f"Unsupported connection configuration: {config!r}")


__all__ = [
    "HttpTransport",
    "Transport",
    "TransportKind",
    "connect",
    "create_ssl_context",
    "translate_error",
]
