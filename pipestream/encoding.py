"""Text encoding conversions between UTF-8, UTF-16LE, CP932 and Python strings."""

from __future__ import annotations

import codecs


def convert(data: bytes, to_encoding: str, from_encoding: str) -> bytes:
    """Re-encode ``data`` from one encoding into another.

    Raises LookupError for an unknown encoding and UnicodeError for data that
    cannot be converted.
    """
    codecs.lookup(to_encoding)
    codecs.lookup(from_encoding)
    return bytes(data).decode(from_encoding).encode(to_encoding)


def wide_to_utf8(data: str) -> bytes:
    """Encode a string as UTF-8."""
    return data.encode("utf-8")


def utf8_to_wide(data: bytes) -> str:
    """Decode UTF-8; invalid sequences become U+FFFD."""
    return bytes(data).decode("utf-8", errors="replace")


def utf8_to_utf16le(data: bytes) -> bytes:
    return convert(data, "utf-16-le", "utf-8")


def utf16le_to_utf8(data: bytes) -> bytes:
    return convert(data, "utf-8", "utf-16-le")


def utf8_to_cp932(data: bytes) -> bytes:
    return convert(data, "cp932", "utf-8")


def cp932_to_utf8(data: bytes) -> bytes:
    return convert(data, "utf-8", "cp932")