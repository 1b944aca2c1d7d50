"""Image operations."""

from __future__ import annotations

from typing import Any, Mapping

from ..auth import RegistryAuth, registry_headers
from ..stream import DockerStream
from .base import Resource, streaming_kind

Options = Mapping[str, Any]


class Image(Resource):
    @property
    def tags(self) -> list[str]:
        return list(self.attrs.get("RepoTags") or [])

    async def list(self, options: Options | None = None) -> list["Image"]:
        images = await self._call("image.list", options=options)
        return [self._handle(conf.get("Id"), conf) for conf in images or []]

    async def create(
        self,
        options: Options,
        *,
        auth: RegistryAuth | None = None,
    ) -> list[dict[str, Any]] | DockerStream:
        """Pull (``fromImage``) or import (``fromSrc``) an image.

        Buffered mode waits for the pull to finish and returns the progress
        messages; ``stream=True`` returns them live.
        """
        kind, query = streaming_kind(self._target(options))
        return await self._call(
            "image.create",
            options=query,
            headers=registry_headers(auth),
            response=kind,
        )

    async def inspect(self, *, resource_id: str | None = None) -> "Image":
        target = self._target(None, resource_id)
        resource_id = target.require_id("image.inspect")
        conf = await self._call("image.inspect", resource_id)
        return self._handle(resource_id, conf)

    async def history(self, *, resource_id: str | None = None) -> list[dict[str, Any]]:
        target = self._target(None, resource_id)
        return await self._call("image.history", target.require_id("image.history"))

    async def push(
        self,
        options: Options | None = None,
        *,
        resource_id: str | None = None,
        auth: RegistryAuth | None = None,
    ) -> list[dict[str, Any]] | DockerStream:
        target = self._target(options, resource_id)
        kind, query = streaming_kind(target)
        return await self._call(
            "image.push",
            target.require_id("image.push"),
            options=query,
            headers=registry_headers(auth or RegistryAuth()),
            response=kind,
        )

    async def tag(self, options: Options, *, resource_id: str | None = None) -> None:
        target = self._target(options, resource_id)
        await self._call("image.tag", target.require_id("image.tag"), options=target.options)

    async def delete(self, options: Options | None = None, *, resource_id: str | None = None) -> list[dict[str, Any]]:
        target = self._target(options, resource_id)
        return await self._call("image.delete", target.require_id("image.delete"), options=target.options)

    async def search(self, options: Options) -> list[dict[str, Any]]:
        return await self._call("image.search", options=options)

    async def get(
        self,
        options: Options | None = None,
        *,
        resource_id: str | None = None,
        as_text: bool = False,
    ) -> bytes | str | DockerStream:
        """Export the image as a tarball."""
        target = self._target(options, resource_id)
        kind, query = streaming_kind(target)
        return await self._call(
            "image.get",
            target.require_id("image.get"),
            options=query,
            response=kind,
            as_text=as_text,
        )


__all__ = ["Image"]
