"""Common behavior of resource handles."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, TypeVar

from ..endpoints import endpoint
from ..modem import Modem
from ..request import CallTarget, ResponseKind

R = TypeVar("R", bound="Resource")


class Resource:
    """An identifier plus the attributes last returned by the daemon.

    Handles never change after construction; list, inspect and create return
    new handles carrying the fresh attributes.
    """

    def __init__(
        self,
        modem: Modem,
        id: str | None = None,
        attrs: Mapping[str, Any] | None = None,
    ) -> None:
        self.modem = modem
        self.id = id
        self.attrs: Mapping[str, Any] = MappingProxyType(dict(attrs or {}))

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.id[:12] if self.id else '-'}>"

    def __getitem__(self, key: str) -> Any:
        return self.attrs[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.attrs.get(key, default)

    def _target(
        self,
        options: Mapping[str, Any] | str | None = None,
        resource_id: str | None = None,
    ) -> CallTarget:
        return CallTarget.from_positional(options, resource_id, default_id=self.id)

    def _handle(self: R, resource_id: str | None, attrs: Mapping[str, Any] | None = None) -> R:
        return type(self)(self.modem, resource_id, attrs)

    async def _call(
        self,
        name: str,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> Any:
        descriptor = endpoint(name).descriptor(resource_id, **kwargs)
        return await self.modem.call(descriptor)


def streaming_kind(target: CallTarget) -> tuple[ResponseKind | None, dict[str, Any]]:
    """Split the client-side ``stream`` flag off the option bag.

    Returns ``ResponseKind.STREAM`` when the flag is set and ``None`` (keep
    the endpoint's buffered kind) otherwise, along with the remaining options.
    """
    picked, rest = target.split("stream")
    return (ResponseKind.STREAM if picked.get("stream") else None), rest


__all__ = ["Resource", "streaming_kind"]
