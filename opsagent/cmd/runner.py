"""Process runner — launch a ProcessSpec, drain its output, wait, map the exit.

One ProcessRunner drives exactly one process through

    BUILT -> LAUNCHED -> DRAINING -> EXITED

and yields exactly one ExecutionOutcome. wait() is only reached after both
output streams have hit EOF; the drainer must be exhausted first or a child
that fills a pipe buffer would block forever.

There is no timeout or cancellation path. A caller that needs one can wrap
run()/run_observed() in asyncio.wait_for(). Cancellation while draining or
waiting kills and reaps the child and closes the pipes before propagating.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging

from opsagent.cmd.drainer import STREAM_LINE_LIMIT, LineHandler, discard, drain_streams
from opsagent.cmd.errors import LaunchFailedError, WaitFailedError
from opsagent.cmd.models import ProcessSpec
from opsagent.cmd.outcome import ExecutionOutcome, map_exit_status

logger = logging.getLogger(__name__)


class RunState(enum.Enum):
    BUILT = "built"
    LAUNCHED = "launched"
    DRAINING = "draining"
    EXITED = "exited"


class ProcessRunner:
    """Single-use runner for one ProcessSpec."""

    def __init__(self, spec: ProcessSpec) -> None:
        self.spec = spec
        self.state = RunState.BUILT
        self._process: asyncio.subprocess.Process | None = None

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    async def launch(self) -> asyncio.subprocess.Process:
        """Create the process with both output streams on pipes.

        Returns as soon as the OS has created the process.

        Raises:
            LaunchFailedError: binary not found, permission denied, bad
                working directory, or OS resource exhaustion.
        """
        if self.state is not RunState.BUILT:
            msg = f"ProcessRunner is single-use (state: {self.state.value})"
            raise RuntimeError(msg)

        try:
            process = await asyncio.create_subprocess_exec(
                self.spec.executable,
                *self.spec.args,
                cwd=self.spec.cwd,
                env=self.spec.env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LINE_LIMIT,
            )
        except (OSError, ValueError) as e:
            raise LaunchFailedError(self.spec.executable, str(e)) from e

        self._process = process
        self.state = RunState.LAUNCHED
        logger.debug("Launched %s (pid %s)", self.spec.executable, process.pid)
        return process

    async def run(self) -> ExecutionOutcome:
        """Launch, drain without observing, wait, and return the outcome."""
        return await self.run_observed(discard, discard)

    async def run_observed(
        self,
        stdout_handler: LineHandler,
        stderr_handler: LineHandler,
    ) -> ExecutionOutcome:
        """Launch, stream every output line to the handlers, wait, return the outcome.

        Raises:
            LaunchFailedError: the process could not be created.
            WaitFailedError: the exit status could not be obtained.
            Exception: whatever a handler raised; the child is killed and
                reaped before it propagates.
        """
        process = await self.launch()

        self.state = RunState.DRAINING
        try:
            await drain_streams(process.stdout, process.stderr, stdout_handler, stderr_handler)
        except BaseException:
            await self._kill_and_reap(process)
            raise

        try:
            returncode = await process.wait()
        except OSError as e:
            await self._kill_and_reap(process)
            msg = f"Failed to wait for '{self.spec.executable}' (pid {process.pid}): {e}"
            raise WaitFailedError(msg) from e
        except BaseException:
            await self._kill_and_reap(process)
            raise

        self.state = RunState.EXITED
        return map_exit_status(returncode)

    async def _kill_and_reap(self, process: asyncio.subprocess.Process) -> None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        with contextlib.suppress(OSError):
            await asyncio.shield(process.wait())
        # A grandchild may still hold the pipes open; close our ends instead
        # of reading them to EOF.
        process._transport.close()  # noqa: SLF001
        self.state = RunState.EXITED
        logger.debug("Killed %s (pid %s) after an aborted run", self.spec.executable, process.pid)
