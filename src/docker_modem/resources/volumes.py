"""Volume operations. Volumes are identified by name."""

from __future__ import annotations

from typing import Any, Mapping

from .base import Resource

Options = Mapping[str, Any]


class Volume(Resource):
    async def list(self, options: Options | None = None) -> list["Volume"]:
        result = await self._call("volume.list", options=options) or {}
        return [self._handle(conf.get("Name"), conf) for conf in result.get("Volumes") or []]

    async def create(self, options: Options | None = None) -> "Volume":
        conf = await self._call("volume.create", body=dict(options or {}))
        return self._handle(conf.get("Name"), conf)

    async def inspect(self, *, resource_id: str | None = None) -> "Volume":
        target = self._target(None, resource_id)
        resource_id = target.require_id("volume.inspect")
        conf = await self._call("volume.inspect", resource_id)
        return self._handle(resource_id, conf)

    async def delete(self, options: Options | None = None, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("volume.delete", target.require_id("volume.delete"), options=target.options)


__all__ = ["Volume"]
