"""A bidirectional in-process channel built from two operating-system pipes."""

from __future__ import annotations

import os
from typing import Optional

from pipestream.pipes import PipeStream


class PipeQueue:
    """Two pipe streams joined crosswise: what one end writes, the other reads."""

    def __init__(self, container_count: int = 16, container_size: int = 8192) -> None:
        self._end_a = PipeStream(container_count, container_size)
        self._end_b = PipeStream(container_count, container_size)
        self._fds: Optional[tuple[int, int, int, int]] = None

    def end_a(self) -> PipeStream:
        return self._end_a

    def end_b(self) -> PipeStream:
        return self._end_b

    def start(self) -> None:
        """Open fresh pipes and connect both ends."""
        if self._fds is not None:
            self.stop()
        a_to_b_read, a_to_b_write = os.pipe()
        b_to_a_read, b_to_a_write = os.pipe()
        self._fds = (a_to_b_read, a_to_b_write, b_to_a_read, b_to_a_write)
        self._end_a.set_handles(b_to_a_read, a_to_b_write)
        self._end_b.set_handles(a_to_b_read, b_to_a_write)
        self._end_a.connect()
        self._end_b.connect()

    def stop(self) -> None:
        """Disconnect both ends and close the pipes."""
        if self._fds is None:
            return
        a_to_b_read, a_to_b_write, b_to_a_read, b_to_a_write = self._fds
        self._fds = None
        _close(a_to_b_write, b_to_a_write)
        self._end_a.disconnect()
        self._end_b.disconnect()
        _close(a_to_b_read, b_to_a_read)

    def __enter__(self) -> "PipeQueue":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def _close(*fds: int) -> None:
    for fd in fds:
        try:
            os.close(fd)
        except OSError:
            pass