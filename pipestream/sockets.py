"""TCP socket helpers and a non-blocking socket stream."""

from __future__ import annotations

import errno
import socket
import sys
from typing import Optional, Union

from pipestream.streams import ByteStream, StreamError

_NOT_SET = "Not set."
_DEFAULT_BUFFER = 8192


def _codes(*names: str) -> frozenset[int]:
    return frozenset(getattr(errno, name) for name in names if hasattr(errno, name))


_WOULD_BLOCK = _codes("EWOULDBLOCK", "EAGAIN", "WSAEWOULDBLOCK")
_NOT_CONNECTED = _codes("ENOTCONN", "WSAENOTCONN")
_ADDRESS_IN_USE = _codes("EADDRINUSE", "WSAEADDRINUSE")
_CONNECTION_RESET = _codes("ECONNRESET", "WSAECONNRESET")

_MESSAGES = (
    (
        _NOT_CONNECTED,
        "A request to send or receive data was disallowed because the socket is not "
        "connected and (when sending on a datagram socket using a sendto call) no "
        "address was supplied.",
    ),
    (
        _ADDRESS_IN_USE,
        "Only one usage of each socket address (protocol/network address/port) is "
        "normally permitted.",
    ),
    (_CONNECTION_RESET, "An existing connection was forcibly closed by the remote host."),
)


def _error_code(error: Union[int, OSError]) -> int:
    if isinstance(error, OSError):
        return error.errno or 0
    return int(error)


def describe_error(error: Union[int, OSError]) -> Optional[str]:
    """Describe a socket error; return None for a would-block condition."""
    code = _error_code(error)
    if code in _WOULD_BLOCK:
        return None
    for codes, message in _MESSAGES:
        if code in codes:
            return message
    return "OtherErr"


def print_socket_error(error: Union[int, OSError]) -> None:
    """Write a description of a socket error to standard error."""
    message = describe_error(error)
    if message is None:
        return
    sys.stderr.write(f"Err={_error_code(error)} {message}\r\n")


def socket_status(sock: socket.socket) -> str:
    """Describe the local and peer addresses and the handle of a socket."""
    host = sock.getsockname()
    host_addr, host_port = host[0], host[1]
    try:
        peer = sock.getpeername()
        peer_addr, peer_port = peer[0], peer[1]
    except OSError:
        peer_addr, peer_port = _NOT_SET, 0
    return (
        f" Host {host_addr}:{host_port} Peer {peer_addr}:{peer_port} "
        f"HANDLE {sock.fileno()}\r\n"
    )


def show_socket_status(show: bool, sock: socket.socket, prefix: str) -> None:
    """Print the status of a socket after ``prefix`` when ``show`` is true."""
    if show:
        sys.stdout.write(prefix + socket_status(sock))


def print_message(show: bool, message: str) -> None:
    """Print ``message`` followed by CRLF when ``show`` is true."""
    if show:
        sys.stdout.write(f"{message}\r\n")


def sock_read(sock: socket.socket, size: int = _DEFAULT_BUFFER) -> bytes:
    """Receive at most ``size`` bytes; ``b""`` means the peer closed the connection."""
    return sock.recv(size)


def sock_write(sock: socket.socket, data: bytes) -> int:
    """Send ``data`` and return how many bytes were sent."""
    return sock.send(bytes(data))


def _check_address(address: str) -> None:
    try:
        socket.inet_pton(socket.AF_INET, address)
    except OSError as exc:
        raise StreamError(f"invalid IPv4 address: {address!r}") from exc


class SocketStream(ByteStream):
    """A TCP stream that works in non-blocking mode once connected or accepted."""

    def __init__(self, buffer_size: int = _DEFAULT_BUFFER) -> None:
        super().__init__()
        self._socket: Optional[socket.socket] = None
        self._buffer_size = buffer_size
        self.last_error = 0

    def _fail(self, exc: OSError, message: str) -> StreamError:
        self.last_error = exc.errno or 0
        return StreamError(f"{message}: {exc}")

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise StreamError("socket has not been created")
        return self._socket

    def create(self) -> bool:
        """Create a fresh IPv4 TCP socket."""
        try:
            self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            self._socket = None
            raise self._fail(exc, "cannot create socket") from exc
        return True

    def bind(self, address: str, port: int) -> bool:
        sock = self._require_socket()
        _check_address(address)
        try:
            sock.bind((address, port))
        except OSError as exc:
            raise self._fail(exc, "cannot bind") from exc
        return True

    def connect(self, address: str, port: int, timeout: float = 2.0) -> bool:  # type: ignore[override]
        """Connect to a peer, waiting up to ``timeout`` seconds, then go non-blocking."""
        _check_address(address)
        if self._socket is None:
            self.create()
        sock = self._require_socket()
        try:
            sock.settimeout(timeout)
            sock.connect((address, port))
            sock.setblocking(False)
        except OSError as exc:
            raise self._fail(exc, "cannot connect") from exc
        self._connected = True
        return True

    def disconnect(self) -> bool:
        self._connected = False
        sock, self._socket = self._socket, None
        if sock is None:
            return True
        try:
            sock.setblocking(True)
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            sock.close()
        except OSError as exc:
            self.last_error = exc.errno or 0
        return True

    def listen(self, backlog: int = 5) -> bool:
        sock = self._require_socket()
        try:
            sock.setblocking(False)
            sock.listen(backlog)
        except OSError as exc:
            sock.close()
            self._socket = None
            self._connected = False
            raise self._fail(exc, "cannot listen") from exc
        return True

    def accept(self, other: "SocketStream") -> bool:
        """Accept a pending connection into ``other``; False when none is waiting."""
        if other._socket is not None:
            raise StreamError("target stream already holds a socket")
        sock = self._require_socket()
        try:
            conn, _ = sock.accept()
        except BlockingIOError:
            return False
        except OSError as exc:
            raise self._fail(exc, "cannot accept") from exc
        try:
            conn.setblocking(False)
        except OSError as exc:
            conn.close()
            raise self._fail(exc, "cannot make socket non-blocking") from exc
        other._socket = conn
        other._connected = True
        return True

    def _drop(self) -> None:
        self._connected = False
        sock, self._socket = self._socket, None
        if sock is not None:
            sock.close()
        self._fire_disconnect()

    def read(self) -> bytes:
        """Return the bytes waiting; ``b""`` when none are, or when the peer closed."""
        sock = self._require_socket()
        try:
            data = sock_read(sock, self._buffer_size)
        except BlockingIOError:
            return b""
        except OSError as exc:
            error = self._fail(exc, "receive failed")
            self._drop()
            raise error from exc
        if not data:
            self._drop()
        return data

    def write(self, data: bytes) -> int:
        sock = self._require_socket()
        try:
            return sock_write(sock, data)
        except BlockingIOError:
            return 0
        except OSError as exc:
            error = self._fail(exc, "send failed")
            self._drop()
            raise error from exc

    def status(self) -> str:
        return socket_status(self._require_socket())