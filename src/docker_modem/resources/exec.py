"""Exec instances: run extra processes inside a running container."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from ..modem import Modem
from ..request import ResponseKind
from ..stream import DockerStream
from .base import Resource

if TYPE_CHECKING:
    from .containers import Container

Options = Mapping[str, Any]


class Exec(Resource):
    def __init__(
        self,
        modem: Modem,
        id: str | None = None,
        attrs: Mapping[str, Any] | None = None,
        *,
        container: "Container | None" = None,
    ) -> None:
        super().__init__(modem, id, attrs)
        self.container = container

    def _handle(self, resource_id: str | None, attrs: Mapping[str, Any] | None = None) -> "Exec":
        return Exec(self.modem, resource_id, attrs, container=self.container)

    async def create(self, options: Options, *, resource_id: str | None = None) -> "Exec":
        """Create an exec instance; ``resource_id`` is the container, defaulting to the parent."""
        container_id = resource_id or (self.container.id if self.container else None)
        if not container_id:
            raise ValueError("exec.create requires a container id")
        conf = await self._call("exec.create", container_id, body=dict(options))
        return self._handle(conf.get("Id"), conf)

    async def start(self, options: Options | None = None, *, resource_id: str | None = None) -> Any | DockerStream:
        """Start the exec.

        With ``Detach`` the daemon answers immediately; otherwise the connection is
        hijacked and a duplex stream over the process's stdio is returned.
        """
        target = self._target(options, resource_id)
        spec = dict(target.options)
        detach = bool(spec.get("Detach", False))
        return await self._call(
            "exec.start",
            target.require_id("exec.start"),
            body=spec,
            response=ResponseKind.JSON if detach else None,
            tty=bool(spec.get("Tty", False)),
        )

    async def resize(self, options: Options, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("exec.resize", target.require_id("exec.resize"), options=target.options)

    async def inspect(self, *, resource_id: str | None = None) -> "Exec":
        target = self._target(None, resource_id)
        resource_id = target.require_id("exec.inspect")
        conf = await self._call("exec.inspect", resource_id)
        return self._handle(resource_id, conf)


__all__ = ["Exec"]
