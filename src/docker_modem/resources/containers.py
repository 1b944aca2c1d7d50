"""Container lifecycle, filesystem archive and attach operations."""

from __future__ import annotations

from typing import Any, AsyncContextManager, Mapping

from httpx_ws import AsyncWebSocketSession

from ..endpoints import endpoint
from ..modem import Modem
from ..parser import decode_path_stat
from ..request import ResponseKind
from ..stream import DockerStream
from .base import Resource, streaming_kind
from .exec import Exec

Options = Mapping[str, Any]

_CREATE_QUERY_KEYS = ("name", "platform")


class ContainerFs:
    """Filesystem archive operations scoped to a container handle."""

    def __init__(self, modem: Modem, container: "Container") -> None:
        self.modem = modem
        self.container = container

    async def info(self, *, resource_id: str | None = None, path: str = "/") -> dict[str, Any] | None:
        """Stat a path in the container (``HEAD /containers/{id}/archive``)."""
        target = self.container._target({"path": path}, resource_id)
        headers = await self.container._call(
            "container.fs.info",
            target.require_id("fs.info"),
            options=target.options,
        )
        return decode_path_stat(headers)

    async def get(
        self,
        options: Options | None = None,
        *,
        resource_id: str | None = None,
        as_text: bool = False,
    ) -> bytes | str | DockerStream:
        """Fetch a tar archive of ``options["path"]``.

        With ``stream=True`` the archive is returned as a live stream before the
        transfer completes; otherwise the whole tar is buffered, as bytes or as
        text when ``as_text`` is set.
        """
        target = self.container._target(options, resource_id)
        kind, query = streaming_kind(target)
        return await self.container._call(
            "container.fs.get",
            target.require_id("fs.get"),
            options=query,
            response=kind,
            as_text=as_text,
        )

    async def put(
        self,
        archive: bytes,
        options: Options | None = None,
        *,
        resource_id: str | None = None,
    ) -> None:
        """Extract a tar archive into ``options["path"]`` inside the container."""
        target = self.container._target(options, resource_id)
        await self.container._call(
            "container.fs.put",
            target.require_id("fs.put"),
            options=target.options,
            body=archive,
        )


class Container(Resource):
    def __init__(
        self,
        modem: Modem,
        id: str | None = None,
        attrs: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(modem, id, attrs)
        self.fs = ContainerFs(modem, self)

    @property
    def exec(self) -> Exec:
        return Exec(self.modem, container=self)

    @property
    def tty(self) -> bool | None:
        config = self.attrs.get("Config")
        if isinstance(config, Mapping) and "Tty" in config:
            return bool(config["Tty"])
        return None

    async def list(self, options: Options | None = None) -> list["Container"]:
        containers = await self._call("container.list", options=options)
        return [self._handle(conf.get("Id"), conf) for conf in containers or []]

    async def create(self, options: Options) -> "Container":
        """Create a container; ``name`` and ``platform`` go to the query string."""
        query, spec = self._target(options).split(*_CREATE_QUERY_KEYS)
        conf = await self._call("container.create", options=query, body=spec)
        return self._handle(conf.get("Id"), conf)

    async def inspect(self, options: Options | None = None, *, resource_id: str | None = None) -> "Container":
        target = self._target(options, resource_id)
        resource_id = target.require_id("inspect")
        conf = await self._call("container.inspect", resource_id, options=target.options)
        return self._handle(resource_id, conf)

    async def top(self, options: Options | None = None, *, resource_id: str | None = None) -> dict[str, Any]:
        target = self._target(options, resource_id)
        return await self._call("container.top", target.require_id("top"), options=target.options)

    async def logs(self, options: Options | None = None, *, resource_id: str | None = None) -> str | DockerStream:
        """Buffered logs come back as demultiplexed text; ``stream=True`` tails them."""
        target = self._target(options, resource_id)
        kind, query = streaming_kind(target)
        return await self._call(
            "container.logs",
            target.require_id("logs"),
            options=query,
            response=kind,
            as_text=True,
            tty=self._known_tty(target.resource_id),
        )

    async def changes(self, *, resource_id: str | None = None) -> list[dict[str, Any]] | None:
        target = self._target(None, resource_id)
        return await self._call("container.changes", target.require_id("changes"))

    async def export(
        self,
        options: Options | None = None,
        *,
        resource_id: str | None = None,
        as_text: bool = False,
    ) -> bytes | str | DockerStream:
        """Export the filesystem as a tar archive; ``as_text`` decodes a buffered export."""
        target = self._target(options, resource_id)
        kind, query = streaming_kind(target)
        return await self._call(
            "container.export",
            target.require_id("export"),
            options=query,
            response=kind,
            as_text=as_text,
        )

    async def stats(self, options: Options | None = None, *, resource_id: str | None = None) -> dict[str, Any] | DockerStream:
        """A single stats sample, or a live JSON stream with ``stream=True``."""
        target = self._target(options, resource_id)
        query = dict(target.options)
        query["stream"] = bool(query.get("stream", False))
        return await self._call(
            "container.stats",
            target.require_id("stats"),
            options=query,
            response=ResponseKind.STREAM if query["stream"] else None,
        )

    async def resize(self, options: Options, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("container.resize", target.require_id("resize"), options=target.options)

    async def start(self, options: Options | None = None, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("container.start", target.require_id("start"), options=target.options)

    async def stop(self, options: Options | None = None, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("container.stop", target.require_id("stop"), options=target.options)

    async def restart(self, options: Options | None = None, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("container.restart", target.require_id("restart"), options=target.options)

    async def kill(self, options: Options | None = None, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("container.kill", target.require_id("kill"), options=target.options)

    async def update(self, options: Options, *, resource_id: str | None = None) -> dict[str, Any]:
        """Update resource limits; the option bag is the JSON update spec."""
        target = self._target(options, resource_id)
        return await self._call("container.update", target.require_id("update"), body=dict(target.options))

    async def rename(self, options: Options, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("container.rename", target.require_id("rename"), options=target.options)

    async def pause(self, *, resource_id: str | None = None) -> None:
        target = self._target(None, resource_id)
        await self._call("container.pause", target.require_id("pause"))

    async def unpause(self, *, resource_id: str | None = None) -> None:
        target = self._target(None, resource_id)
        await self._call("container.unpause", target.require_id("unpause"))

    async def attach(self, options: Options | None = None, *, resource_id: str | None = None) -> DockerStream:
        """Hijack the connection for a duplex session with the container's stdio."""
        target = self._target(options, resource_id)
        return await self._call(
            "container.attach",
            target.require_id("attach"),
            options=target.options,
            tty=self._known_tty(target.resource_id),
        )

    def wsattach(
        self,
        options: Options | None = None,
        *,
        resource_id: str | None = None,
    ) -> AsyncContextManager[AsyncWebSocketSession]:
        """Attach over a websocket; use as ``async with container.wsattach(...) as ws``.

        Output arrives as binary messages; ``ws.send_bytes`` writes to stdin.
        """
        target = self._target(options, resource_id)
        descriptor = endpoint("container.wsattach").descriptor(
            target.require_id("wsattach"),
            options=target.options,
        )
        return self.modem.websocket(descriptor)

    async def wait(self, *, resource_id: str | None = None) -> dict[str, Any]:
        target = self._target(None, resource_id)
        return await self._call("container.wait", target.require_id("wait"))

    async def delete(self, options: Options | None = None, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("container.delete", target.require_id("delete"), options=target.options)

    def _known_tty(self, resource_id: str | None) -> bool | None:
        return self.tty if resource_id == self.id else None


__all__ = ["Container", "ContainerFs"]
