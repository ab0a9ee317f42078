"""Byte streams: the common stream interface, an in-memory queue stream,
a terminal that joins two streams into one bidirectional end, and a
pass-through protocol layer."""

from __future__ import annotations

import enum
import threading
from collections import deque
from typing import Callable, Optional

EventHandler = Callable[[], None]


class StreamError(Exception):
    """Raised when a stream cannot perform a read, write or other operation."""


class AccessMode(enum.Enum):
    """Which directions of a stream may be used."""

    NO = "no"
    READ = "read"
    WRITE = "write"
    BOTH = "both"

    @property
    def can_read(self) -> bool:
        return self in (AccessMode.READ, AccessMode.BOTH)

    @property
    def can_write(self) -> bool:
        return self in (AccessMode.WRITE, AccessMode.BOTH)


class ByteStream:
    """Base stream: tracks connection state, access mode and a disconnect handler."""

    def __init__(self) -> None:
        self._connected = False
        self._on_disconnect: Optional[EventHandler] = None
        self._access_mode = AccessMode.BOTH

    def _check_readable(self) -> None:
        if not self._connected:
            raise StreamError("stream is not connected")
        if not self._access_mode.can_read:
            raise StreamError("stream is not readable in its access mode")

    def _check_writable(self) -> None:
        if not self._connected:
            raise StreamError("stream is not connected")
        if not self._access_mode.can_write:
            raise StreamError("stream is not writable in its access mode")

    def read(self) -> bytes:
        """Return the data available; the base stream never holds any."""
        self._check_readable()
        return b""

    def write(self, data: bytes) -> int:
        """Accept data and return how many bytes were taken; the base takes none."""
        self._check_writable()
        return 0

    def connect(self) -> bool:
        self._connected = True
        return True

    def disconnect(self) -> bool:
        self._connected = False
        return True

    def is_connected(self) -> bool:
        return self._connected

    def discard(self) -> int:
        """Drop any buffered data and return how many bytes were dropped."""
        return 0

    def set_event_handler(self, handler: EventHandler) -> None:
        self._on_disconnect = handler

    def clear_event_handler(self) -> None:
        self._on_disconnect = None

    def set_access_mode(self, mode: AccessMode) -> AccessMode:
        """Set the access mode and return the previous one."""
        previous = self._access_mode
        self._access_mode = mode
        return previous

    def _fire_disconnect(self) -> None:
        if self._on_disconnect is not None:
            self._on_disconnect()


class QueueStream(ByteStream):
    """A single queue: ``write`` pushes a chunk, ``read`` pops everything.

    The stream is connected from the start.
    """

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._chunks: deque[bytes] = deque()
        self.connect()

    def read(self) -> bytes:
        with self._lock:
            super().read()
            data = b"".join(self._chunks)
            self._chunks.clear()
            return data

    def write(self, data: bytes) -> int:
        chunk = bytes(data)
        with self._lock:
            if not chunk:
                raise StreamError("cannot write an empty chunk")
            super().write(chunk)
            self._chunks.append(chunk)
            return len(chunk)

    def connect(self) -> bool:
        self.discard()
        super().connect()
        return self._connected

    def disconnect(self) -> bool:
        self.discard()
        super().disconnect()
        return True

    def discard(self) -> int:
        with self._lock:
            size = sum(len(chunk) for chunk in self._chunks)
            self._chunks.clear()
            return size


class TerminalStream(ByteStream):
    """One end of a bidirectional stream built from a read stream and a write stream.

    Two terminals over two queues, crossed, make a duplex channel.
    """

    def __init__(self) -> None:
        super().__init__()
        self._reader: Optional[ByteStream] = None
        self._writer: Optional[ByteStream] = None
        self._access_mode = AccessMode.BOTH

    def read(self) -> bytes:
        super().read()
        assert self._reader is not None
        return self._reader.read()

    def write(self, data: bytes) -> int:
        super().write(data)
        assert self._writer is not None
        return self._writer.write(data)

    def connect(self) -> bool:
        self._connected = self._reader is not None and self._writer is not None
        return self._connected

    def disconnect(self) -> bool:
        self._connected = False
        return True

    def is_connected(self) -> bool:
        return self._reader is not None and self._writer is not None

    def set_streams(self, reader: ByteStream, writer: ByteStream) -> None:
        self._connected = False
        self._reader = reader
        self._writer = writer

    def clear_streams(self) -> None:
        self._connected = False
        self._reader = None
        self._writer = None

    def discard(self) -> int:
        if self._reader is None or self._writer is None:
            raise StreamError("terminal has no streams set")
        self._reader.discard()
        self._writer.discard()
        return 0

    def set_access_mode(self, mode: AccessMode) -> AccessMode:
        if self._reader is None or self._writer is None:
            raise StreamError("terminal has no streams set")
        previous = super().set_access_mode(mode)
        reader, writer = self._reader, self._writer
        if mode is AccessMode.NO:
            reader.set_access_mode(AccessMode.NO)
            reader.discard()
            writer.set_access_mode(AccessMode.NO)
            writer.discard()
        elif mode is AccessMode.READ:
            reader.set_access_mode(AccessMode.BOTH)
            writer.set_access_mode(AccessMode.NO)
            writer.discard()
        elif mode is AccessMode.WRITE:
            reader.set_access_mode(AccessMode.NO)
            reader.discard()
            writer.set_access_mode(AccessMode.BOTH)
        else:
            reader.set_access_mode(AccessMode.BOTH)
            writer.set_access_mode(AccessMode.BOTH)
        return previous


class ProtocolStream(ByteStream):
    """A layer that passes reads and writes through to an attached stream."""

    def __init__(self) -> None:
        super().__init__()
        self._stream: Optional[ByteStream] = None

    def attach(self, stream: ByteStream) -> bool:
        self._stream = stream
        return True

    def read(self) -> bytes:
        if self._stream is None:
            return b""
        return self._stream.read()

    def write(self, data: bytes) -> int:
        if self._stream is None:
            return 0
        return self._stream.write(data)