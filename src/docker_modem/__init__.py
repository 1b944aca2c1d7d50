"""Public surface for the Docker Engine API client."""

from .auth import RegistryAuth
from .client import DockerClient
from .config import (
    ClientOptions,
    TcpConfig,
    TlsConfig,
    TlsCredentials,
    UnixSocketConfig,
    config_from_env,
    parse_host,
)
from .endpoints import ENDPOINTS, EndpointSpec
from .errors import (
    BadRequestError,
    ConflictError,
    DockerModemError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    ProtocolError,
    ServerError,
    TransportError,
)
from .modem import Modem
from .request import CallDescriptor, CallTarget, ResponseKind
from .resources import Container, ContainerFs, Exec, Image, Network, Volume
from .response import Buffered, BufferedRaw, Streamed
from .status import Failure, Success, classify
from .stream import DockerStream, Frame, StreamKind
from .transport import HttpTransport, Transport, connect
from .types import DialResult
from .version import __version__

__all__ = [
    "__version__",
    "BadRequestError",
    "Buffered",
    "BufferedRaw",
    "CallDescriptor",
    "CallTarget",
    "ClientOptions",
    "ConflictError",
    "Container",
    "ContainerFs",
    "DialResult",
    "DockerClient",
    "DockerModemError",
    "DockerStream",
    "DomainError",
    "ENDPOINTS",
    "EndpointSpec",
    "Exec",
    "Failure",
    "Frame",
    "HttpTransport",
    "Image",
    "Modem",
    "Network",
    "NotFoundError",
    "PermissionDeniedError",
    "ProtocolError",
    "RegistryAuth",
    "ResponseKind",
    "ServerError",
    "StreamKind",
    "Streamed",
    "Success",
    "TcpConfig",
    "TlsConfig",
    "TlsCredentials",
    "Transport",
    "TransportError",
    "UnixSocketConfig",
    "Volume",
    "classify",
    "config_from_env",
    "connect",
    "parse_host",
]
