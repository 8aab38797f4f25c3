"""cmd — run external infrastructure CLIs and observe them reliably.

Public API:
  exec_command, exec_with_envs          — run, return Success / Failure
  exec_with_output,
  exec_with_envs_and_output             — same, streaming each line to handlers
  does_binary_exist                     — can this binary be launched?
  run_version_command_for               — stdout of `<binary> --version`
  command_to_string                     — audit-log rendering of a command
  BinaryLocator, ExitStatus, Success, Failure and the CommandError family

Typical usage:
    from opsagent.cmd import exec_with_output

    outcome = await exec_with_output("/srv/infra terraform", ["plan"], print, print)
    outcome.raise_for_status()
"""

from opsagent.cmd.errors import (
    CommandError,
    CommandFailedError,
    InvalidInputError,
    LaunchFailedError,
    StreamReadError,
    WaitFailedError,
)
from opsagent.cmd.formatter import command_to_string
from opsagent.cmd.models import BinaryLocator, ProcessSpec
from opsagent.cmd.outcome import ExecutionOutcome, ExitStatus, Failure, Success
from opsagent.cmd.utilities import (
    does_binary_exist,
    exec_command,
    exec_with_envs,
    exec_with_envs_and_output,
    exec_with_output,
    run_version_command_for,
)

__all__ = [
    "BinaryLocator",
    "CommandError",
    "CommandFailedError",
    "ExecutionOutcome",
    "ExitStatus",
    "Failure",
    "InvalidInputError",
    "LaunchFailedError",
    "ProcessSpec",
    "StreamReadError",
    "Success",
    "WaitFailedError",
    "command_to_string",
    "does_binary_exist",
    "exec_command",
    "exec_with_envs",
    "exec_with_envs_and_output",
    "exec_with_output",
    "run_version_command_for",
]
