"""Stream drainer — consume stdout and stderr of a running process concurrently.

Both pipes are read by independent coroutines gathered on the event loop.
Reading one pipe to EOF before touching the other deadlocks as soon as the
child fills the unread pipe's buffer (typically 64 KiB) and blocks on write.

Each handler is called synchronously, once per line, in the order the lines
were produced on that stream. There is no ordering guarantee between the two
streams. Read problems are delivered to the handler as a StreamReadError value:

  - invalid UTF-8 in a line      -> error for that line, draining continues
  - line longer than the limit   -> one error for that line, the rest of the
                                    line is dropped, draining continues
  - OSError on the pipe          -> error, that stream stops; the other continues
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from opsagent.cmd.errors import StreamReadError

logger = logging.getLogger(__name__)

LineHandler = Callable[[str | StreamReadError], None]

# Per-line buffer limit for the pipe readers. Lines beyond this are reported
# to the handler as a StreamReadError instead of being delivered.
STREAM_LINE_LIMIT: int = 1024 * 1024


def discard(_line: str | StreamReadError) -> None:
    """Handler that ignores every line."""


def _strip_terminator(raw: bytes) -> bytes:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
    return raw


async def drain_stream(
    reader: asyncio.StreamReader | None,
    handler: LineHandler,
    stream: str,
) -> None:
    """Read `reader` line by line until EOF, dispatching each line to `handler`."""
    if reader is None:
        return

    # Set after a limit overrun: the rest of that line is dropped up to and
    # including its newline, so no fragment is ever delivered as a line.
    discarding = False

    while True:
        try:
            raw = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            raw = e.partial
            if not raw or discarding:
                return
        except asyncio.LimitOverrunError as e:
            # The examined bytes are still buffered; drop them and keep going.
            await reader.readexactly(e.consumed)
            if not discarding:
                handler(StreamReadError(stream, f"line exceeds the reader limit ({e})"))
            discarding = True
            continue
        except OSError as e:
            logger.warning("Read error on %s, stopping this stream: %s", stream, e)
            handler(StreamReadError(stream, str(e)))
            return

        if discarding:
            discarding = False
            continue

        try:
            line = _strip_terminator(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            handler(StreamReadError(stream, f"stream did not contain valid UTF-8 ({e})"))
            continue

        handler(line)


async def drain_streams(
    stdout: asyncio.StreamReader | None,
    stderr: asyncio.StreamReader | None,
    stdout_handler: LineHandler = discard,
    stderr_handler: LineHandler = discard,
) -> None:
    """Drain both streams concurrently; return once both have reached EOF.

    If a handler raises, the sibling reader is cancelled and the exception
    propagates to the caller.
    """
    stdout_task = asyncio.ensure_future(drain_stream(stdout, stdout_handler, "stdout"))
    stderr_task = asyncio.ensure_future(drain_stream(stderr, stderr_handler, "stderr"))
    try:
        await asyncio.gather(stdout_task, stderr_task)
    except BaseException:
        for task in (stdout_task, stderr_task):
            task.cancel()
        await asyncio.gather(stdout_task, stderr_task, return_exceptions=True)
        raise
