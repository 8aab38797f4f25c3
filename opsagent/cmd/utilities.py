"""Invocation entry points for external command-line tools.

Every infrastructure CLI call (terraform, kubectl, helm, doctl, ...) goes
through this module. It provides:

- Four entry points that share one contract: exec_command, exec_with_envs,
  exec_with_output, exec_with_envs_and_output
- Line-by-line streaming of stdout/stderr to caller handlers while the
  process runs
- A typed outcome (Success / Failure) that keeps the original exit status
- An existence probe and a `--version` probe

The rendered command line is sent to an audit sink before launch. The sink
is injected per call (`audit=`); the default writes a logfire event.

No retries happen here. Retry policy belongs to the caller, which can act on
the distinct error types without parsing messages.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from collections.abc import Callable, Mapping, Sequence

import logfire

from opsagent.cmd.builder import EnvOverrides, build_process_spec
from opsagent.cmd.drainer import LineHandler, discard
from opsagent.cmd.errors import StreamReadError
from opsagent.cmd.formatter import command_to_string
from opsagent.cmd.models import BinaryLocator
from opsagent.cmd.outcome import ExecutionOutcome
from opsagent.cmd.runner import ProcessRunner

logger = logging.getLogger(__name__)

Binary = str | bytes | os.PathLike | BinaryLocator
AuditSink = Callable[[str], None]


def log_command(command: str) -> None:
    """Default audit sink: one logfire event per command."""
    logfire.info("command: {command}", command=command)


async def _execute(
    binary: Binary,
    args: Sequence[str],
    envs: EnvOverrides | None,
    stdout_output: LineHandler,
    stderr_output: LineHandler,
    audit: AuditSink,
) -> ExecutionOutcome:
    # Materialized once: the builder and the formatter must see the same overrides.
    overrides = list(envs.items()) if isinstance(envs, Mapping) else list(envs or ())
    spec = build_process_spec(binary, args, overrides)
    audit(command_to_string(binary, spec.args, overrides))

    runner = ProcessRunner(spec)

    with logfire.span("cmd.exec {executable}", executable=spec.executable, cwd=spec.cwd):
        outcome = await runner.run_observed(stdout_output, stderr_output)

    if outcome.success:
        logger.debug("%s succeeded", spec.executable)
    else:
        logfire.warn(
            "{executable} failed: {status}",
            executable=spec.executable,
            status=str(outcome.exit_status),
            returncode=outcome.exit_status.returncode,
        )
    return outcome


async def exec_command(
    binary: Binary,
    args: Sequence[str],
    *,
    audit: AuditSink = log_command,
) -> ExecutionOutcome:
    """Run `binary` with `args`, discarding its output.

    Returns:
        Success, or Failure carrying the exit status.

    Raises:
        InvalidInputError: malformed locator or arguments.
        LaunchFailedError: the process could not be created.
        WaitFailedError: the exit status could not be obtained.
    """
    return await _execute(binary, args, None, discard, discard, audit)


async def exec_with_envs(
    binary: Binary,
    args: Sequence[str],
    envs: EnvOverrides,
    *,
    audit: AuditSink = log_command,
) -> ExecutionOutcome:
    """Like exec_command, with env overrides layered on the inherited environment."""
    return await _execute(binary, args, envs, discard, discard, audit)


async def exec_with_output(
    binary: Binary,
    args: Sequence[str],
    stdout_output: LineHandler,
    stderr_output: LineHandler,
    *,
    audit: AuditSink = log_command,
) -> ExecutionOutcome:
    """Like exec_command, streaming each stdout/stderr line to the handlers as it arrives.

    Handlers receive either a line (terminator stripped) or a StreamReadError.
    All handler calls have happened by the time this returns.
    """
    return await _execute(binary, args, None, stdout_output, stderr_output, audit)


async def exec_with_envs_and_output(
    binary: Binary,
    args: Sequence[str],
    envs: EnvOverrides,
    stdout_output: LineHandler,
    stderr_output: LineHandler,
    *,
    audit: AuditSink = log_command,
) -> ExecutionOutcome:
    """exec_with_output with env overrides."""
    return await _execute(binary, args, envs, stdout_output, stderr_output, audit)


# ── Probes ────────────────────────────────────────────────────────────────────


async def run_version_command_for(binary_name: Binary) -> str:
    """Return the stdout of `<binary_name> --version`, lines concatenated.

    stderr lines and read errors are logged, not returned. A non-zero exit
    is logged as a warning; whatever stdout was captured is still returned
    (empty string if nothing).

    Raises:
        LaunchFailedError: the binary could not be launched.
    """
    output: list[str] = []

    def on_stdout(line: str | StreamReadError) -> None:
        if isinstance(line, StreamReadError):
            logger.error("Error while getting stdout from %s: %s", binary_name, line)
        else:
            output.append(line)

    def on_stderr(line: str | StreamReadError) -> None:
        if isinstance(line, StreamReadError):
            logger.error("Error while getting stderr from %s: %s", binary_name, line)
        else:
            logger.error("Error executing %s: %s", binary_name, line)

    outcome = await exec_with_output(binary_name, ["--version"], on_stdout, on_stderr)
    if not outcome.success:
        logger.warning("%s --version returned %s", binary_name, outcome.exit_status)
    return "".join(output)


async def does_binary_exist(binary: str | os.PathLike) -> bool:
    """Return True if `binary` can be launched.

    The probe process runs with all standard streams on /dev/null and is
    killed and reaped as soon as its creation is confirmed, so nothing is
    left running.
    """
    with logfire.span("cmd.binary_exists {binary}", binary=str(binary)):
        try:
            process = await asyncio.create_subprocess_exec(
                binary,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except (OSError, ValueError) as e:
            logger.debug("Binary %s not launchable: %s", binary, e)
            return False

        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        return True
