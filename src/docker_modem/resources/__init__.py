"""Resource wrappers: thin declarative calls on top of the modem."""

from .base import Resource
from .containers import Container, ContainerFs
from .exec import Exec
from .images import Image
from .networks import Network
from .volumes import Volume

__all__ = ["Container", "ContainerFs", "Exec", "Image", "Network", "Resource", "Volume"]
