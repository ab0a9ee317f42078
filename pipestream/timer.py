"""A background countdown timer counted in whole ticks (seconds by default)."""

from __future__ import annotations

import threading
from typing import Optional


class SecondTimer:
    """Counts ``seconds`` ticks in a background thread, then marks itself expired.

    While paused, ticks are not counted. Stopping ends the count without
    expiring.
    """

    def __init__(self, seconds: float, tick: float = 1.0) -> None:
        self._seconds = seconds
        self._tick = tick
        self._expired = threading.Event()
        self._stop = threading.Event()
        self._paused = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start counting from zero, stopping any count already running."""
        if self._thread is not None:
            self.stop()
        self._expired.clear()
        self._stop.clear()
        self._paused.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def pause(self) -> None:
        self._paused.set()

    def resume(self) -> None:
        self._paused.clear()

    def expired(self) -> bool:
        return self._expired.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the timer expires or ``timeout`` passes; return whether it expired."""
        return self._expired.wait(timeout)

    def _run(self) -> None:
        count = 0
        while count < self._seconds:
            paused = self._paused.is_set()
            if self._stop.wait(self._tick):
                return
            if not paused:
                count += 1
        self._expired.set()

    def __enter__(self) -> "SecondTimer":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()