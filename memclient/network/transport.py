"""
Stream Transport Module

The client talks to the server through a Transport: something that can
connect, close, write bytes and read either one line or an exact number of
bytes. SocketTransport is the real implementation over a stream socket;
tests substitute a scripted fake.

Supported networks:
    tcp, tcp4, tcp6   address is "host:port" ("[::1]:11211" for IPv6 literals)
    unix              address is a filesystem path
"""

import logging
import socket
from typing import BinaryIO, Optional, Protocol, Tuple, runtime_checkable

from ..config.settings import settings
from ..errors import MemcacheConnectionError, ReadError, WriteError

logger = logging.getLogger(__name__)

_INET_FAMILIES = {
    "tcp": socket.AF_UNSPEC,
    "tcp4": socket.AF_INET,
    "tcp6": socket.AF_INET6,
}
NETWORKS = tuple(_INET_FAMILIES) + ("unix",)


@runtime_checkable
class Transport(Protocol):
    """Byte stream used by MemcacheClient."""

    @property
    def connected(self) -> bool: ...

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def write(self, data: bytes) -> None: ...

    def read_line(self) -> bytes: ...

    def read_exact(self, size: int) -> bytes: ...


def split_address(address: str) -> Tuple[str, int]:
    """
    Split "host:port" into its parts.

    Raises:
        ValueError: no port, or port is not a number in 0-65535
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"missing or invalid port in address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    port_number = int(port)
    if port_number > 65535:
        raise ValueError(f"port out of range in address {address!r}")
    return host or "localhost", port_number


class SocketTransport:
    """
    Blocking stream-socket transport with buffered line reading.

    The socket is opened by connect() and kept until close(). Reads go
    through a buffered binary file wrapped around the socket so that a
    line read never consumes bytes belonging to the following payload.

    Attributes:
        network: One of NETWORKS
        address: "host:port" or a unix socket path
        timeout: Socket timeout in seconds, None blocks forever
    """

    def __init__(self, network: str, address: str, timeout: Optional[float] = None):
        if network not in NETWORKS:
            raise ValueError(f"unsupported network {network!r}, expected one of {NETWORKS}")
        self.network = network
        self.address = address
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None
        self._reader: Optional[BinaryIO] = None

    def __repr__(self) -> str:
        state = "connected" if self.connected else "disconnected"
        return f"<SocketTransport {self.network}:{self.address} {state}>"

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        if self._sock is not None:
            return

        try:
            sock = self._dial()
        except (OSError, ValueError) as exc:
            raise MemcacheConnectionError(
                f"cannot connect to {self.network}:{self.address}: {exc}"
            ) from exc

        self._sock = sock
        self._reader = sock.makefile("rb", buffering=settings.READ_BUFFER_SIZE)
        logger.debug(f"Connected to {self.network}:{self.address}")

    def _dial(self) -> socket.socket:
        if self.network == "unix":
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.settimeout(self.timeout)
                sock.connect(self.address)
            except OSError:
                sock.close()
                raise
            return sock

        host, port = split_address(self.address)
        family = _INET_FAMILIES[self.network]
        last_error: Optional[OSError] = None
        for af, socktype, proto, _, sockaddr in socket.getaddrinfo(
                host, port, family, socket.SOCK_STREAM):
            sock = socket.socket(af, socktype, proto)
            try:
                sock.settimeout(self.timeout)
                sock.connect(sockaddr)
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            except OSError as exc:
                sock.close()
                last_error = exc
                continue
            return sock
        raise last_error or OSError(f"no addresses found for {host!r}")

    def close(self) -> None:
        if self._sock is None:
            return

        sock, reader = self._sock, self._reader
        self._sock = None
        self._reader = None
        try:
            try:
                if reader is not None:
                    reader.close()
            finally:
                sock.close()
        except OSError as exc:
            logger.warning(f"Cannot close connection to {self.network}:{self.address}: {exc}")
        else:
            logger.debug(f"Closed connection to {self.network}:{self.address}")

    def write(self, data: bytes) -> None:
        if self._sock is None:
            raise WriteError("not connected")
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise WriteError(f"write error: {exc}") from exc

    def read_line(self) -> bytes:
        """Read one line, delimiter included."""
        if self._reader is None:
            raise ReadError("not connected")
        try:
            line = self._reader.readline()
        except OSError as exc:
            raise ReadError(f"read error: {exc}") from exc
        if not line.endswith(b"\n"):
            raise ReadError(f"connection closed mid-line: {line!r}")
        return line

    def read_exact(self, size: int) -> bytes:
        """Read exactly size bytes."""
        if self._reader is None:
            raise ReadError("not connected")
        try:
            data = self._reader.read(size)
        except OSError as exc:
            raise ReadError(f"read error: {exc}") from exc
        if len(data) != size:
            raise ReadError(f"connection closed after {len(data)} of {size} bytes")
        return data
