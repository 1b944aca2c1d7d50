"""Declarative table of the Engine API endpoints the wrappers call.

Each entry names the HTTP method, the path template (``{id}`` is replaced by
the quoted resource identifier) and the status table consumed by the modem.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from .request import CallDescriptor, ResponseKind, StatusTable, quote_id
from .status import SUCCESS

BAD_PARAMETER = "bad parameter"
SERVER_ERROR = "server error"
NO_SUCH_CONTAINER = "no such container"
NO_SUCH_IMAGE = "no such image"
NO_SUCH_EXEC = "no such exec instance"
NO_SUCH_NETWORK = "no such network"
NO_SUCH_VOLUME = "no such volume"


@dataclass(frozen=True)
class EndpointSpec:
    name: str
    method: str
    path: str
    status_codes: StatusTable
    response: ResponseKind = ResponseKind.JSON
    demux: bool = False

    def descriptor(
        self,
        resource_id: str | None = None,
        *,
        options: Mapping[str, Any] | None = None,
        body: Any | None = None,
        headers: Mapping[str, str] | None = None,
        response: ResponseKind | None = None,
        as_text: bool = False,
        tty: bool | None = None,
        **path_params: str,
    ) -> CallDescriptor:
        if "{id}" in self.path and not resource_id:
            raise ValueError(f"{self.name} requires a resource id")
        params = {key: quote_id(value) for key, value in path_params.items()}
        if resource_id:
            params["id"] = quote_id(resource_id)
        return CallDescriptor(
            path=self.path.format(**params),
            method=self.method,
            status_codes=self.status_codes,
            options=options,
            body=body,
            headers=headers,
            response=response or self.response,
            as_text=as_text,
            demux=self.demux,
            tty=tty,
        )


def _table(*entries: tuple[int, bool | str]) -> StatusTable:
    return MappingProxyType(dict(entries))


_OK = (200, SUCCESS)
_CREATED = (201, SUCCESS)
_NO_CONTENT = (204, SUCCESS)
_NOT_MODIFIED = (304, SUCCESS)
_UPGRADED = (101, SUCCESS)
_BAD = (400, BAD_PARAMETER)
_SERVER = (500, SERVER_ERROR)
_CONTAINER_404 = (404, NO_SUCH_CONTAINER)

_SPECS = [
    # containers
    EndpointSpec("container.list", "GET", "/containers/json", _table(_OK, _BAD, _SERVER)),
    EndpointSpec(
        "container.create",
        "POST",
        "/containers/create",
        _table(_CREATED, _BAD, (404, NO_SUCH_IMAGE), (406, "impossible to attach"), (409, "conflict"), _SERVER),
    ),
    EndpointSpec("container.inspect", "GET", "/containers/{id}/json", _table(_OK, _CONTAINER_404, _SERVER)),
    EndpointSpec("container.top", "GET", "/containers/{id}/top", _table(_OK, _CONTAINER_404, _SERVER)),
    EndpointSpec(
        "container.logs",
        "GET",
        "/containers/{id}/logs",
        _table(_UPGRADED, _OK, _CONTAINER_404, _SERVER),
        ResponseKind.RAW,
        demux=True,
    ),
    EndpointSpec("container.changes", "GET", "/containers/{id}/changes", _table(_OK, _CONTAINER_404, _SERVER)),
    EndpointSpec(
        "container.export",
        "GET",
        "/containers/{id}/export",
        _table(_OK, _CONTAINER_404, _SERVER),
        ResponseKind.RAW,
    ),
    EndpointSpec("container.stats", "GET", "/containers/{id}/stats", _table(_OK, _CONTAINER_404, _SERVER)),
    EndpointSpec("container.resize", "POST", "/containers/{id}/resize", _table(_OK, _CONTAINER_404, _SERVER)),
    EndpointSpec(
        "container.start",
        "POST",
        "/containers/{id}/start",
        _table(_NO_CONTENT, _NOT_MODIFIED, _CONTAINER_404, _SERVER),
    ),
    EndpointSpec(
        "container.stop",
        "POST",
        "/containers/{id}/stop",
        _table(_NO_CONTENT, _NOT_MODIFIED, _CONTAINER_404, _SERVER),
    ),
    EndpointSpec("container.restart", "POST", "/containers/{id}/restart", _table(_NO_CONTENT, _CONTAINER_404, _SERVER)),
    EndpointSpec(
        "container.kill",
        "POST",
        "/containers/{id}/kill",
        _table(_NO_CONTENT, _CONTAINER_404, (409, "container is not running"), _SERVER),
    ),
    EndpointSpec("container.update", "POST", "/containers/{id}/update", _table(_OK, _BAD, _CONTAINER_404, _SERVER)),
    EndpointSpec(
        "container.rename",
        "POST",
        "/containers/{id}/rename",
        _table(_NO_CONTENT, _CONTAINER_404, (409, "name already in use"), _SERVER),
    ),
    EndpointSpec("container.pause", "POST", "/containers/{id}/pause", _table(_NO_CONTENT, _CONTAINER_404, _SERVER)),
    EndpointSpec("container.unpause", "POST", "/containers/{id}/unpause", _table(_NO_CONTENT, _CONTAINER_404, _SERVER)),
    EndpointSpec(
        "container.attach",
        "POST",
        "/containers/{id}/attach",
        _table(_UPGRADED, _OK, _BAD, _CONTAINER_404, _SERVER),
        ResponseKind.HIJACK,
        demux=True,
    ),
    EndpointSpec(
        "container.wsattach",
        "GET",
        "/containers/{id}/attach/ws",
        _table(_UPGRADED, _BAD, _CONTAINER_404, _SERVER),
        ResponseKind.WEBSOCKET,
    ),
    EndpointSpec("container.wait", "POST", "/containers/{id}/wait", _table(_OK, _CONTAINER_404, _SERVER)),
    EndpointSpec(
        "container.delete",
        "DELETE",
        "/containers/{id}",
        _table(_NO_CONTENT, _BAD, _CONTAINER_404, (409, "conflict"), _SERVER),
    ),
    # container filesystem
    EndpointSpec(
        "container.fs.info",
        "HEAD",
        "/containers/{id}/archive",
        _table(_OK, _BAD, _CONTAINER_404, _SERVER),
        ResponseKind.HEADERS,
    ),
    EndpointSpec(
        "container.fs.get",
        "GET",
        "/containers/{id}/archive",
        _table(_OK, _BAD, _CONTAINER_404, _SERVER),
        ResponseKind.RAW,
    ),
    EndpointSpec(
        "container.fs.put",
        "PUT",
        "/containers/{id}/archive",
        _table(_OK, _BAD, (403, "permission denied"), _CONTAINER_404, _SERVER),
    ),
    # exec
    EndpointSpec(
        "exec.create",
        "POST",
        "/containers/{id}/exec",
        _table(_CREATED, _CONTAINER_404, (409, "container is paused"), _SERVER),
    ),
    EndpointSpec(
        "exec.start",
        "POST",
        "/exec/{id}/start",
        _table(_UPGRADED, _OK, (404, NO_SUCH_EXEC), (409, "container is stopped or paused"), _SERVER),
        ResponseKind.HIJACK,
        demux=True,
    ),
    EndpointSpec("exec.resize", "POST", "/exec/{id}/resize", _table(_OK, _CREATED, _BAD, (404, NO_SUCH_EXEC), _SERVER)),
    EndpointSpec("exec.inspect", "GET", "/exec/{id}/json", _table(_OK, (404, NO_SUCH_EXEC), _SERVER)),
    # images
    EndpointSpec("image.list", "GET", "/images/json", _table(_OK, _SERVER)),
    EndpointSpec(
        "image.create",
        "POST",
        "/images/create",
        _table(_OK, (404, "repository does not exist or no read access"), _SERVER),
        ResponseKind.JSON_LINES,
    ),
    EndpointSpec("image.inspect", "GET", "/images/{id}/json", _table(_OK, (404, NO_SUCH_IMAGE), _SERVER)),
    EndpointSpec("image.history", "GET", "/images/{id}/history", _table(_OK, (404, NO_SUCH_IMAGE), _SERVER)),
    EndpointSpec(
        "image.push",
        "POST",
        "/images/{id}/push",
        _table(_OK, (404, NO_SUCH_IMAGE), _SERVER),
        ResponseKind.JSON_LINES,
    ),
    EndpointSpec(
        "image.tag",
        "POST",
        "/images/{id}/tag",
        _table(_CREATED, _BAD, (404, NO_SUCH_IMAGE), (409, "conflict"), _SERVER),
    ),
    EndpointSpec(
        "image.delete",
        "DELETE",
        "/images/{id}",
        _table(_OK, (404, NO_SUCH_IMAGE), (409, "conflict"), _SERVER),
    ),
    EndpointSpec("image.search", "GET", "/images/search", _table(_OK, _SERVER)),
    EndpointSpec(
        "image.get",
        "GET",
        "/images/{id}/get",
        _table(_OK, _SERVER),
        ResponseKind.RAW,
    ),
    # networks
    EndpointSpec("network.list", "GET", "/networks", _table(_OK, _SERVER)),
    EndpointSpec(
        "network.create",
        "POST",
        "/networks/create",
        _table(_CREATED, _BAD, (403, "operation not supported for pre-defined networks"), (404, "plugin not found"), _SERVER),
    ),
    EndpointSpec("network.inspect", "GET", "/networks/{id}", _table(_OK, (404, NO_SUCH_NETWORK), _SERVER)),
    EndpointSpec(
        "network.connect",
        "POST",
        "/networks/{id}/connect",
        _table(_OK, (403, "operation not supported for swarm scoped networks"), (404, "network or container is not found"), _SERVER),
    ),
    EndpointSpec(
        "network.disconnect",
        "POST",
        "/networks/{id}/disconnect",
        _table(_OK, (403, "operation not supported for swarm scoped networks"), (404, "network or container is not found"), _SERVER),
    ),
    EndpointSpec(
        "network.delete",
        "DELETE",
        "/networks/{id}",
        _table(_NO_CONTENT, (403, "operation not supported for pre-defined networks"), (404, NO_SUCH_NETWORK), _SERVER),
    ),
    # volumes
    EndpointSpec("volume.list", "GET", "/volumes", _table(_OK, _SERVER)),
    EndpointSpec("volume.create", "POST", "/volumes/create", _table(_CREATED, _SERVER)),
    EndpointSpec("volume.inspect", "GET", "/volumes/{id}", _table(_OK, (404, NO_SUCH_VOLUME), _SERVER)),
    EndpointSpec(
        "volume.delete",
        "DELETE",
        "/volumes/{id}",
        _table(_NO_CONTENT, (404, NO_SUCH_VOLUME), (409, "volume is in use"), _SERVER),
    ),
    # system
    EndpointSpec("system.ping", "GET", "/_ping", _table(_OK, _SERVER), ResponseKind.RAW),
    EndpointSpec("system.version", "GET", "/version", _table(_OK, _SERVER)),
    EndpointSpec("system.info", "GET", "/info", _table(_OK, _SERVER)),
    EndpointSpec("system.events", "GET", "/events", _table(_OK, _BAD, _SERVER), ResponseKind.STREAM),
]

ENDPOINTS: Mapping[str, EndpointSpec] = MappingProxyType({spec.name: spec for spec in _SPECS})


def endpoint(name: str) -> EndpointSpec:
    try:
        return ENDPOINTS[name]
    except KeyError:
        raise KeyError(f"Unknown endpoint: {name}") from None


__all__ = ["ENDPOINTS", "EndpointSpec", "endpoint"]
