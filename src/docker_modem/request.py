"""Call descriptors and their serialization into wire requests."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import quote, urlencode

StatusTable = Mapping[int, "bool | str"]

JSON_CONTENT_TYPE = "application/json"
TAR_CONTENT_TYPE = "application/x-tar"


class ResponseKind(enum.Enum):
    JSON = "json"
    JSON_LINES = "json-lines"
    RAW = "raw"
    HEADERS = "headers"
    STREAM = "stream"
    HIJACK = "hijack"
    WEBSOCKET = "websocket"

    @property
    def long_lived(self) -> bool:
        return self in (ResponseKind.STREAM, ResponseKind.HIJACK, ResponseKind.WEBSOCKET)


@dataclass(frozen=True)
class CallTarget:
    """Option bag and resource identifier for one operation, resolved up front."""

    options: Mapping[str, Any] = field(default_factory=dict)
    resource_id: str | None = None

    @classmethod
    def resolve(
        cls,
        options: Mapping[str, Any] | None = None,
        resource_id: str | None = None,
        *,
        default_id: str | None = None,
    ) -> "CallTarget":
        return cls(dict(options or {}), resource_id or default_id)

    @classmethod
    def from_positional(
        cls,
        options_or_id: Mapping[str, Any] | str | None = None,
        resource_id: str | None = None,
        *,
        default_id: str | None = None,
    ) -> "CallTarget":
        """Resolve the ``(options?, id?)`` calling convention.

        A lone identifier string in the first position is the resource id and
        the option bag is empty; with neither given, ``default_id`` is used.
        """
        if isinstance(options_or_id, str):
            if resource_id:
                raise TypeError("options must be a mapping when resource_id is given")
            return cls.resolve(None, options_or_id, default_id=default_id)
        return cls.resolve(options_or_id, resource_id, default_id=default_id)

    def require_id(self, operation: str) -> str:
        if not self.resource_id:
            raise ValueError(f"{operation} requires a resource id")
        return self.resource_id

    def split(self, *keys: str) -> tuple[dict[str, Any], dict[str, Any]]:
        """Partition the option bag into (picked keys, everything else)."""
        picked: dict[str, Any] = {}
        rest: dict[str, Any] = {}
        for key, value in self.options.items():
            (picked if key in keys else rest)[key] = value
        return picked, rest


@dataclass(frozen=True)
class CallDescriptor:
    path: str
    method: str
    status_codes: StatusTable
    options: Mapping[str, Any] | None = None
    body: Any | None = None
    headers: Mapping[str, str] | None = None
    response: ResponseKind = ResponseKind.JSON
    as_text: bool = False
    demux: bool = False
    tty: bool | None = None


@dataclass(frozen=True)
class WireRequest:
    method: str
    path: str
    query: list[tuple[str, str]]
    headers: dict[str, str]
    content: bytes | None = None
    long_lived: bool = False

    @property
    def target(self) -> str:
        if not self.query:
            return self.path
        return f"{self.path}?{urlencode(self.query)}"


def quote_id(resource_id: str) -> str:
    return quote(resource_id, safe="/:@")


def encode_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), sort_keys=isinstance(value, dict))
    return str(value)


def encode_query(options: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    if not options:
        return []
    return [
        (str(key), encode_query_value(value))
        for key, value in sorted(options.items(), key=lambda item: str(item[0]))
        if value is not None
    ]


def encode_body(
    body: Any | None,
    headers: Mapping[str, str] | None = None,
) -> tuple[bytes | None, dict[str, str]]:
    merged = dict(headers or {})
    has_type = any(key.lower() == "content-type" for key in merged)
    if body is None:
        return None, merged
    if isinstance(body, (bytes, bytearray, memoryview)):
        if not has_type:
            merged["Content-Type"] = TAR_CONTENT_TYPE
        return bytes(body), merged
    if isinstance(body, str):
        if not has_type:
            merged["Content-Type"] = "text/plain; charset=utf-8"
        return body.encode("utf-8"), merged
    if not has_type:
        merged["Content-Type"] = JSON_CONTENT_TYPE
    return json.dumps(body).encode("utf-8"), merged


def build_request(
    descriptor: CallDescriptor,
    *,
    api_version: str | None = None,
    default_headers: Mapping[str, str] | None = None,
) -> WireRequest:
    path = descriptor.path if descriptor.path.startswith("/") else f"/{descriptor.path}"
    if api_version:
        path = f"/{api_version.strip('/')}{path}"

    headers = dict(default_headers or {})
    headers.update(descriptor.headers or {})
    content, headers = encode_body(descriptor.body, headers)
    if descriptor.response is ResponseKind.HIJACK:
        headers["Connection"] = "Upgrade"
        headers["Upgrade"] = "tcp"

    return WireRequest(
        method=descriptor.method.upper(),
        path=path,
        query=encode_query(descriptor.options),
        headers=headers,
        content=content,
        long_lived=descriptor.response.long_lived,
    )


__all__ = [
    "CallDescriptor",
    "CallTarget",
    "ResponseKind",
    "StatusTable",
    "WireRequest",
    "build_request",
    "encode_body",
    "encode_query",
    "quote_id",
]
