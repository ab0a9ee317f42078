import errno
import re
import socket
import time

import pytest

from pipestream.sockets import (
    SocketStream,
    describe_error,
    print_message,
    print_socket_error,
    show_socket_status,
    sock_read,
    sock_write,
    socket_status,
)
from pipestream.streams import StreamError


def _poll(fn, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = fn()
        if result:
            return result
        time.sleep(0.01)
    return fn()


def _port(stream):
    match = re.search(r"Host [\d.]+:(\d+)", stream.status())
    assert match
    return int(match.group(1))


@pytest.fixture
def server():
    stream = SocketStream()
    stream.create()
    stream.bind("127.0.0.1", 0)
    stream.listen()
    yield stream
    stream.disconnect()


def test_describe_error_messages():
    assert describe_error(errno.ECONNRESET) == (
        "An existing connection was forcibly closed by the remote host."
    )
    assert describe_error(errno.EWOULDBLOCK) is None
    assert describe_error(OSError(errno.EADDRINUSE, "x")).startswith("Only one usage")


def test_print_socket_error_skips_would_block(capsys):
    print_socket_error(errno.EWOULDBLOCK)
    print_socket_error(errno.ENOTCONN)
    err = capsys.readouterr().err
    assert err.startswith(f"Err={errno.ENOTCONN} A request")
    assert err.count("Err=") == 1


def test_print_message(capsys):
    print_message(True, "hello")
    print_message(False, "hidden")
    assert capsys.readouterr().out == "hello\r\n"


def test_socket_status_unconnected():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        text = socket_status(sock)
        assert text.startswith(" Host 127.0.0.1:")
        assert "Peer Not set.:0" in text
        assert text.endswith(f"HANDLE {sock.fileno()}\r\n")


def test_show_socket_status(capsys):
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        show_socket_status(False, sock, "quiet")
        show_socket_status(True, sock, "Listen")
        assert capsys.readouterr().out == "Listen" + socket_status(sock)


def test_sock_read_write_round_trip():
    a, b = socket.socketpair()
    with a, b:
        assert sock_write(a, b"xyz") == 3
        assert sock_read(b, 16) == b"xyz"


def test_accept_without_pending_returns_false(server):
    conn = SocketStream()
    assert server.accept(conn) is False
    assert conn.is_connected() is False


def test_accept_and_exchange(server):
    port = _port(server)
    client = socket.create_connection(("127.0.0.1", port))
    conn = SocketStream()
    try:
        assert _poll(lambda: server.accept(conn))
        assert conn.is_connected()
        client.sendall(b"hello")
        assert _poll(conn.read) == b"hello"
        assert conn.write(b"back") == 4
        client.settimeout(5)
        assert client.recv(16) == b"back"
    finally:
        client.close()
        conn.disconnect()


def test_accept_into_occupied_stream_raises(server):
    port = _port(server)
    client = socket.create_connection(("127.0.0.1", port))
    conn = SocketStream()
    try:
        assert _poll(lambda: server.accept(conn))
        with pytest.raises(StreamError):
            server.accept(conn)
    finally:
        client.close()
        conn.disconnect()


def test_peer_close_fires_handler(server):
    port = _port(server)
    client = socket.create_connection(("127.0.0.1", port))
    conn = SocketStream()
    calls = []
    conn.set_event_handler(lambda: calls.append(True))
    assert _poll(lambda: server.accept(conn))
    client.close()

    def closed():
        if conn.is_connected():
            conn.read()
        return not conn.is_connected()

    assert _poll(closed)
    assert calls == [True]
    with pytest.raises(StreamError):
        conn.read()


def test_connect_to_listener():
    with socket.socket() as listener:
        listener.bind(("127.0.0.1", 0))
        listener.listen()
        port = listener.getsockname()[1]
        stream = SocketStream()
        try:
            assert stream.connect("127.0.0.1", port) is True
            assert stream.is_connected()
            assert f"Peer 127.0.0.1:{port}" in stream.status()
            peer, _ = listener.accept()
            with peer:
                assert _poll(lambda: stream.write(b"ping")) == 4
                peer.settimeout(5)
                assert peer.recv(16) == b"ping"
        finally:
            stream.disconnect()
        assert stream.is_connected() is False


def test_connect_refused_raises():
    with socket.socket() as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
    stream = SocketStream()
    with pytest.raises(StreamError):
        stream.connect("127.0.0.1", port, 2.0)
    assert stream.last_error != 0
    stream.disconnect()


def test_bind_invalid_address_raises():
    stream = SocketStream()
    stream.create()
    try:
        with pytest.raises(StreamError):
            stream.bind("999.1.1.1", 0)
    finally:
        stream.disconnect()


def test_operations_without_socket_raise():
    stream = SocketStream()
    with pytest.raises(StreamError):
        stream.read()
    with pytest.raises(StreamError):
        stream.write(b"data")
    with pytest.raises(StreamError):
        stream.listen()