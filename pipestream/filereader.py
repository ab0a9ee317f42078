"""Read a file in fixed-size chunks, optionally wrapping around at the end."""

from __future__ import annotations

import os
from typing import BinaryIO, Optional, Union

PathLike = Union[str, "os.PathLike[str]"]


class ChunkFileReader:
    """Reads ``chunk_size`` bytes at a time from a file.

    A short read means the end was reached: the file is rewound, and unless
    ``repeat`` is set the reader is marked at end and returns ``b""`` until
    rewound again.
    """

    def __init__(
        self, path: Optional[PathLike] = None, chunk_size: int = 1, repeat: bool = False
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.path = path
        self.chunk_size = chunk_size
        self.repeat = repeat
        self._file: Optional[BinaryIO] = None
        self._end = False

    def open(self) -> None:
        """Open the file for reading; raises OSError when it cannot be opened."""
        if not self.path:
            raise ValueError("no file name set")
        self.close()
        self._file = open(self.path, "rb")
        self._end = False

    def read_chunk(self) -> bytes:
        if self._file is None:
            raise ValueError("file is not open")
        if self._end:
            return b""
        data = self._file.read(self.chunk_size)
        if len(data) < self.chunk_size:
            self.rewind()
            if not self.repeat:
                self._end = True
        return data

    def rewind(self) -> None:
        """Go back to the start of the file and clear the end mark."""
        if self._file is None:
            raise ValueError("file is not open")
        self._file.seek(0)
        self._end = False

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def is_open(self) -> bool:
        return self._file is not None

    def at_end(self) -> bool:
        return self._end

    def __enter__(self) -> "ChunkFileReader":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()