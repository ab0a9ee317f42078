"""Pipe handle helpers and a stream that reads a pipe in a background thread."""

from __future__ import annotations

import io
import os
import select
import threading
from collections import deque
from typing import BinaryIO, Optional, Union

from pipestream.streams import ByteStream, EventHandler, StreamError

Handle = Union[int, BinaryIO]

_POLL_INTERVAL = 0.1
_MIN_CONTAINERS = 1
_MIN_CONTAINER_SIZE = 14


def read_handle(handle: Handle, size: int = 8192) -> bytes:
    """Read at most ``size`` bytes from a file descriptor or binary file.

    Returns ``b""`` at end of file; raises OSError when the read fails.
    """
    if isinstance(handle, int):
        return os.read(handle, size)
    reader = getattr(handle, "read1", None) or handle.read
    return bytes(reader(size))


def write_handle(handle: Handle, data: bytes) -> int:
    """Write all of ``data`` to a file descriptor or binary file and flush it.

    Returns the number of bytes written; raises OSError when the write fails.
    """
    payload = bytes(data)
    if isinstance(handle, int):
        view = memoryview(payload)
        while view:
            written = os.write(handle, view)
            view = view[written:]
        return len(payload)
    handle.write(payload)
    flush = getattr(handle, "flush", None)
    if flush is not None:
        flush()
    return len(payload)


def _wait_readable(handle: Handle, timeout: float) -> bool:
    """Wait until a raw descriptor has data; other handles are read directly."""
    if os.name == "nt" or not isinstance(handle, int):
        return True
    try:
        ready, _, _ = select.select([handle], [], [], timeout)
    except (OSError, ValueError, io.UnsupportedOperation):
        return True
    return bool(ready)


class PipeStream(ByteStream):
    """A stream over a pair of pipe handles.

    A background thread reads the input handle into a queue of chunks; at most
    ``container_count + 1`` chunks of ``container_size`` bytes wait unread at
    any time. ``read`` returns everything queued. End of file or a read error
    marks the stream disconnected and calls the disconnect handler.
    """

    def __init__(self, container_count: int = 4, container_size: int = 8192) -> None:
        super().__init__()
        self._container_count = max(container_count, _MIN_CONTAINERS)
        self._container_size = max(container_size, _MIN_CONTAINER_SIZE)
        self._pipe_in: Optional[Handle] = None
        self._pipe_out: Optional[Handle] = None
        self._chunks: deque[bytes] = deque()
        self._read_lock = threading.Lock()
        self._event_lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(self._container_count + 1)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def set_handles(self, pipe_in: Handle, pipe_out: Handle) -> None:
        self._pipe_in = pipe_in
        self._pipe_out = pipe_out

    def connect(self) -> bool:
        if self._pipe_in is None:
            raise StreamError("no input handle set")
        if self._thread is not None:
            self.disconnect()
        with self._read_lock:
            self._chunks.clear()
        self._slots = threading.BoundedSemaphore(self._container_count + 1)
        self._stop.clear()
        self._connected = True
        self._thread = threading.Thread(target=self._pump, daemon=True)
        self._thread.start()
        return True

    def disconnect(self) -> bool:
        if self._thread is None:
            return True
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)
        self._thread = None
        with self._read_lock:
            self._chunks.clear()
        self._connected = False
        return True

    def read(self) -> bytes:
        with self._read_lock:
            self._check_readable()
            chunks = list(self._chunks)
            self._chunks.clear()
        for _ in chunks:
            self._slots.release()
        return b"".join(chunks)

    def write(self, data: bytes) -> int:
        self._check_writable()
        if self._pipe_out is None:
            raise StreamError("no output handle set")
        return write_handle(self._pipe_out, data)

    def set_event_handler(self, handler: EventHandler) -> None:
        with self._event_lock:
            self._on_disconnect = handler

    def clear_event_handler(self) -> None:
        with self._event_lock:
            self._on_disconnect = None

    def _pump(self) -> None:
        handle = self._pipe_in
        assert handle is not None
        while not self._stop.is_set():
            if not self._slots.acquire(timeout=_POLL_INTERVAL):
                continue
            if not _wait_readable(handle, _POLL_INTERVAL):
                self._slots.release()
                continue
            try:
                data = read_handle(handle, self._container_size)
            except (OSError, ValueError):
                data = b""
            if not data:
                self._slots.release()
                break
            with self._read_lock:
                self._chunks.append(data)
        self._stop.set()
        self._connected = False
        with self._event_lock:
            self._fire_disconnect()