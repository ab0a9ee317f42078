import io
import os
import threading
import time

import pytest

from pipestream.pipes import PipeStream, read_handle, write_handle
from pipestream.streams import AccessMode, StreamError


def _close(*fds):
    for fd in fds:
        try:
            os.close(fd)
        except OSError:
            pass


def _collect(stream, expected, timeout=2.0):
    deadline = time.monotonic() + timeout
    data = b""
    while time.monotonic() < deadline:
        data += stream.read()
        if len(data) >= len(expected):
            break
        time.sleep(0.01)
    return data


@pytest.fixture
def pipes():
    in_r, in_w = os.pipe()
    out_r, out_w = os.pipe()
    yield in_r, in_w, out_r, out_w
    _close(in_r, in_w, out_r, out_w)


def test_handle_round_trip_over_os_pipe():
    r, w = os.pipe()
    try:
        assert write_handle(w, b"hello pipe") == 10
        assert read_handle(r, 64) == b"hello pipe"
    finally:
        _close(r, w)


def test_read_handle_respects_size_on_file_object():
    source = io.BytesIO(b"abcdefgh")
    assert read_handle(source, 3) == b"abc"
    assert read_handle(source, 100) == b"defgh"
    assert read_handle(source, 100) == b""


def test_write_handle_to_file_object():
    target = io.BytesIO()
    assert write_handle(target, b"xyz") == 3
    assert target.getvalue() == b"xyz"


def test_read_handle_eof_after_writer_closed():
    r, w = os.pipe()
    os.close(w)
    try:
        assert read_handle(r, 16) == b""
    finally:
        _close(r)


def test_stream_reads_and_writes(pipes):
    in_r, in_w, out_r, out_w = pipes
    stream = PipeStream()
    stream.set_handles(in_r, out_w)
    assert stream.connect() is True
    try:
        os.write(in_w, b"from outside")
        assert _collect(stream, b"from outside") == b"from outside"
        assert stream.write(b"to outside") == 10
        assert os.read(out_r, 64) == b"to outside"
    finally:
        _close(in_w)
        stream.disconnect()
    assert stream.is_connected() is False


def test_large_data_arrives_whole_with_small_containers(pipes):
    in_r, in_w, out_r, out_w = pipes
    stream = PipeStream(container_count=1, container_size=1)
    stream.set_handles(in_r, out_w)
    stream.connect()
    payload = bytes(range(256)) * 4
    try:
        write_handle(in_w, payload)
        assert _collect(stream, payload) == payload
    finally:
        _close(in_w)
        stream.disconnect()


def test_end_of_file_disconnects_and_fires_handler(pipes):
    in_r, in_w, out_r, out_w = pipes
    fired = threading.Event()
    stream = PipeStream()
    stream.set_handles(in_r, out_w)
    stream.set_event_handler(fired.set)
    stream.connect()
    os.close(in_w)
    assert fired.wait(2.0) is True
    assert stream.is_connected() is False
    stream.disconnect()


def test_cleared_handler_is_not_called(pipes):
    in_r, in_w, out_r, out_w = pipes
    fired = threading.Event()
    stream = PipeStream()
    stream.set_handles(in_r, out_w)
    stream.set_event_handler(fired.set)
    stream.clear_event_handler()
    stream.connect()
    os.close(in_w)
    deadline = time.monotonic() + 2.0
    while stream.is_connected() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert stream.is_connected() is False
    assert fired.is_set() is False
    stream.disconnect()


def test_read_before_connect_raises():
    stream = PipeStream()
    with pytest.raises(StreamError):
        stream.read()


def test_connect_without_handles_raises():
    with pytest.raises(StreamError):
        PipeStream().connect()


def test_write_in_read_mode_raises(pipes):
    in_r, in_w, out_r, out_w = pipes
    stream = PipeStream()
    stream.set_handles(in_r, out_w)
    stream.connect()
    try:
        assert stream.set_access_mode(AccessMode.READ) is AccessMode.BOTH
        with pytest.raises(StreamError):
            stream.write(b"data")
    finally:
        _close(in_w)
        stream.disconnect()


def test_disconnect_without_connect_is_harmless():
    stream = PipeStream()
    assert stream.disconnect() is True
    assert stream.is_connected() is False