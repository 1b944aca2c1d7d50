"""Network operations."""

from __future__ import annotations

from typing import Any, Mapping

from .base import Resource

Options = Mapping[str, Any]


class Network(Resource):
    async def list(self, options: Options | None = None) -> list["Network"]:
        networks = await self._call("network.list", options=options)
        return [self._handle(conf.get("Id"), conf) for conf in networks or []]

    async def create(self, options: Options) -> "Network":
        conf = await self._call("network.create", body=dict(options))
        return self._handle(conf.get("Id"), conf)

    async def inspect(self, options: Options | None = None, *, resource_id: str | None = None) -> "Network":
        target = self._target(options, resource_id)
        resource_id = target.require_id("network.inspect")
        conf = await self._call("network.inspect", resource_id, options=target.options)
        return self._handle(resource_id, conf)

    async def connect(self, options: Options, *, resource_id: str | None = None) -> None:
        """Attach a container; ``options`` is the body (``Container``, ``EndpointConfig``)."""
        target = self._target(options, resource_id)
        await self._call("network.connect", target.require_id("network.connect"), body=dict(target.options))

    async def disconnect(self, options: Options, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("network.disconnect", target.require_id("network.disconnect"), body=dict(target.options))

    async def delete(self, *, resource_id: str | None = None) -> None:
        target = self._target(None, resource_id)
        await self._call("network.delete", target.require_id("network.delete"))


__all__ = ["Network"]
