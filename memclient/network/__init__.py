"""Network module for memclient."""

from .transport import NETWORKS, SocketTransport, Transport

__all__ = ["NETWORKS", "SocketTransport", "Transport"]
