"""Exceptions raised by the Docker modem and the resource wrappers."""

from __future__ import annotations

from typing import Any


class DockerModemError(Exception):
    """Base error for all client failures."""

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.context = context


class TransportError(DockerModemError):
    """Raised when the daemon cannot be reached or the connection breaks."""


class ProtocolError(DockerModemError):
    """Raised when a response is malformed or a declared JSON body does not parse."""


class DomainError(DockerModemError):
    """A well-formed response whose status the endpoint classifies as a failure."""

    def __init__(
        self,
        message: str,
        *,
        tag: str,
        status: int,
        body: Any | None = None,
    ) -> None:
        super().__init__(message, context=body)
        self.tag = tag
        self.status = status
        self.body = body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tag={self.tag!r}, status={self.status})"


class BadRequestError(DomainError):
    """Raised for 400 responses."""


class PermissionDeniedError(DomainError):
    """Raised for 403 responses."""


class NotFoundError(DomainError):
    """Raised when the target resource does not exist."""


class ConflictError(DomainError):
    """Raised for 409 responses (name in use, container paused, ...)."""


class ServerError(DomainError):
    """Raised for 5xx style failures."""


__all__ = [
    "BadRequestError",
    "ConflictError",
    "DockerModemError",
    "DomainError",
    "NotFoundError",
    "PermissionDeniedError",
    "ProtocolError",
    "ServerError",
    "TransportError",
]
