"""High-level client: connection selection plus the resource wrappers."""

from __future__ import annotations

from typing import Any, Mapping

from .config import (
    DEFAULT_API_VERSION,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_TIMEOUT,
    ClientOptions,
    ConnectionConfig,
    TlsCredentials,
    config_from_env,
    parse_host,
)
from .endpoints import endpoint
from .logger import LogLevel, create_logger
from .modem import Modem
from .request import CallDescriptor
from .resources import Container, Exec, Image, Network, Volume
from .stream import DockerStream
from .transport import Transport, connect


class DockerClient:
    """Primary entry point for talking to a Docker daemon.

    The connection is chosen once: an explicit ``connection``, else
    ``base_url`` (``unix://``, ``tcp://``, ``https://``), else the
    ``DOCKER_HOST`` environment.
    """

    def __init__(
        self,
        connection: ConnectionConfig | None = None,
        *,
        base_url: str | None = None,
        tls: TlsCredentials | None = None,
        api_version: str | None = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        transport: Transport | None = None,
        default_headers: Mapping[str, str] | None = None,
        logger: Any | None = None,
        log_level: LogLevel | None = None,
    ) -> None:
        if connection is None:
            connection = parse_host(base_url, tls=tls) if base_url else config_from_env()
        options = ClientOptions(
            connection=connection,
            api_version=api_version,
            timeout=timeout,
            connect_timeout=connect_timeout,
            default_headers=default_headers,
            logger=logger,
            log_level=log_level,
        )
        self.connection = options.connection
        self._logger = create_logger(logger=options.logger, level=options.log_level)
        self._logger.info("Initializing DockerClient for %s", self.connection)
        self._transport = transport or connect(
            self.connection,
            timeout=options.timeout,
            connect_timeout=options.connect_timeout,
            logger=self._logger,
        )
        self.modem = Modem(
            self._transport,
            api_version=options.api_version,
            default_headers=options.default_headers,
            logger=self._logger,
        )
        self.container = Container(self.modem)
        self.exec = Exec(self.modem)
        self.image = Image(self.modem)
        self.network = Network(self.modem)
        self.volume = Volume(self.modem)

    async def ping(self) -> str:
        return await self.modem.call(self._system("system.ping", as_text=True))

    async def version(self) -> dict[str, Any]:
        return await self.modem.call(self._system("system.version"))

    async def info(self) -> dict[str, Any]:
        return await self.modem.call(self._system("system.info"))

    async def events(self, options: Mapping[str, Any] | None = None) -> DockerStream:
        """Live daemon events; read them with ``DockerStream.iter_json()``."""
        return await self.modem.call(self._system("system.events", options=options))

    async def aclose(self) -> None:
        await self.modem.aclose()

    async def __aenter__(self) -> "DockerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @staticmethod
    def _system(name: str, **kwargs: Any) -> CallDescriptor:
        return endpoint(name).descriptor(**kwargs)


__all__ = ["DockerClient"]
