"""SSL context construction for TLS-secured daemons."""

from __future__ import annotations

import ssl

from ..config import TlsCredentials
from ..errors import TransportError


def create_ssl_context(credentials: TlsCredentials) -> ssl.SSLContext:
    try:
        context = ssl.create_default_context(cafile=credentials.ca_cert)
        if not credentials.verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        if credentials.client_cert:
            context.load_cert_chain(credentials.client_cert, credentials.client_key)
        elif credentials.client_key:
            raise TransportError("TLS client key given without a client certificate")
    except (OSError, ssl.SSLError) as exc:
        raise TransportError(f"Cannot load TLS credentials: {exc}", context=credentials) from exc
    return context


__all__ = ["create_ssl_context"]
