"""Byte streams over queues, pipes and sockets, with process, file, timer and encoding helpers."""

__version__ = "0.1.0"

__all__ = [
    "streams",
    "encoding",
    "timer",
    "pipes",
    "pipequeue",
    "sockets",
    "process",
    "filereader",
]