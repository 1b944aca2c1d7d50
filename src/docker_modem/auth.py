"""Registry credentials for image pull and push."""

from __future__ import annotations

import base64
import json
from dataclasses import asdict, dataclass
from typing import Mapping

REGISTRY_AUTH_HEADER = "X-Registry-Auth"


@dataclass(frozen=True)
class RegistryAuth:
    """Credentials the daemon forwards to a registry."""

    username: str | None = None
    password: str | None = None
    serveraddress: str | None = None
    email: str | None = None
    identitytoken: str | None = None

    def payload(self) -> dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value is not None}

    def encode(self) -> str:
        """URL-safe base64 JSON, as expected in ``X-Registry-Auth``."""
        raw = json.dumps(self.payload()).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii")


def registry_headers(
    auth: RegistryAuth | None,
    headers: Mapping[str, str] | None = None,
) -> dict[str, str]:
    merged = dict(headers or {})
    if auth is not None:
        merged[REGISTRY_AUTH_HEADER] = auth.encode()
    return merged


__all__ = [
    "REGISTRY_AUTH_HEADER",
    "RegistryAuth",
    "registry_headers",
]
