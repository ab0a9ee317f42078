# pipestream

A small library of byte streams that share one interface: `read()`,
`write(data)`, `connect()`, `disconnect()`, `is_connected()`, `discard()`,
an access mode (`AccessMode.NO`, `READ`, `WRITE`, `BOTH`) and a disconnect
event handler. Failed operations raise `StreamError`.

## Modules

- `pipestream.streams`: `ByteStream` (the base), `QueueStream` (each write
  pushes a chunk and a read pops everything), `TerminalStream` (joins a reader
  stream and a writer stream into one end), `ProtocolStream` (passes reads and
  writes through to an attached stream).
- `pipestream.pipes`: `read_handle`, `write_handle` and `PipeStream`. A
  `PipeStream` reads its input handle on a background thread and queues the
  chunks for `read()`.
- `pipestream.pipequeue`: `PipeQueue` is two `PipeStream` ends, `end_a()` and
  `end_b()`, joined crosswise over OS pipes. `start()` opens the pipes and
  `stop()` closes them.
- `pipestream.sockets`: `SocketStream`, a TCP stream that becomes
  non-blocking once it is connected or accepted. The module also has helpers
  such as `sock_read`, `sock_write`, `socket_status` and `describe_error`.
- `pipestream.process`: `ProcessRunner` starts a child process with the
  standard handles you give it and calls a handler when the process ends.
- `pipestream.filereader`: `ChunkFileReader` reads a file in fixed-size
  chunks. It can optionally wrap around to the start at the end of the file.
- `pipestream.timer`: `SecondTimer` is a background countdown that can be
  paused, resumed, stopped and waited on.
- `pipestream.encoding`: `convert` plus helpers between UTF-8, UTF-16LE,
  CP932 and `str`.

## Install

```
pip install .
```

## Example

```python
from pipestream.streams import QueueStream, TerminalStream

q1, q2 = QueueStream(), QueueStream()
a, b = TerminalStream(), TerminalStream()
a.set_streams(q1, q2)
b.set_streams(q2, q1)
a.connect()
b.connect()

a.write(b"test1\r\n")
print(b.read())  # b'test1\r\n'
```

## What it does not do

This is a library only. It installs no command-line programs. It has no
ready-made echo server, no relay between the console, a process and a socket,
and no worker that moves data between streams on its own. To pass data from
one stream to another, call `read()` and `write()` yourself.

## Tests

```
pip install .[test]
pytest
```