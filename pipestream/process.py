"""Start a child process with given standard handles and watch for its end."""

from __future__ import annotations

import os
import shlex
import subprocess
import threading
from typing import IO, Optional, Sequence, Union

from pipestream.streams import EventHandler

Command = Union[str, Sequence[str]]
StdHandle = Union[None, int, IO]


class ProcessRunner:
    """Runs one child process at a time and calls a handler when it ends."""

    def __init__(self) -> None:
        self._process: Optional[subprocess.Popen] = None
        self._watcher: Optional[threading.Thread] = None
        self._alive = False
        self._handler: Optional[EventHandler] = None
        self._forced_code: Optional[int] = None

    def execute(
        self,
        command: Command,
        stdin: StdHandle = None,
        stdout: StdHandle = None,
        stderr: StdHandle = None,
    ) -> None:
        """Start ``command``, ending any process started before.

        Raises OSError when the process cannot be started.
        """
        if self._process is not None:
            self.terminate()
        if isinstance(command, str) and os.name != "nt":
            args: Command = shlex.split(command)
        else:
            args = command
        self._forced_code = None
        process = subprocess.Popen(args, stdin=stdin, stdout=stdout, stderr=stderr)
        self._process = process
        self._alive = True
        self._watcher = threading.Thread(target=self._watch, args=(process,), daemon=True)
        self._watcher.start()

    def terminate(self, exit_code: int = 1) -> None:
        """Kill the running process; ``exit_code`` becomes its reported return code."""
        process = self._process
        if process is None:
            return
        if self._alive:
            self._forced_code = exit_code
            try:
                process.kill()
            except OSError:
                pass
            process.wait()
        watcher, self._watcher = self._watcher, None
        if watcher is not None and watcher is not threading.current_thread():
            watcher.join()
        self._alive = False

    def is_running(self) -> bool:
        return self._alive

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> Optional[int]:
        """The exit status, or the code given to ``terminate`` after a forced end."""
        if self._forced_code is not None:
            return self._forced_code
        return self._process.returncode if self._process is not None else None

    def set_event_handler(self, handler: EventHandler) -> None:
        self._handler = handler

    def clear_event_handler(self) -> None:
        self._handler = None

    def _watch(self, process: subprocess.Popen) -> None:
        process.wait()
        self._alive = False
        handler = self._handler
        if handler is not None:
            handler()