"""Error kinds raised by the command execution subsystem.

Every failure is a distinct type so a caller can decide on retry policy
without parsing message text:

  InvalidInputError  — malformed locator, argument or env override. Never retried.
  LaunchFailedError  — the OS could not create the process (not found, EACCES, ...).
  WaitFailedError    — the process ran but could not be waited on.
  CommandFailedError — the process exited unsuccessfully; carries the ExitStatus.

StreamReadError is not raised: it is handed to line handlers as a value so
that one broken stream never aborts the invocation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opsagent.cmd.outcome import ExitStatus


class CommandError(Exception):
    """Base class for command execution errors."""


class InvalidInputError(CommandError, ValueError):
    """Raised when a locator, argument or env override cannot be used."""


class LaunchFailedError(CommandError):
    """Raised when the process could not be created."""

    def __init__(self, executable: str, reason: str) -> None:
        self.executable = executable
        self.reason = reason
        super().__init__(f"Failed to launch '{executable}': {reason}")


class WaitFailedError(CommandError):
    """Raised when waiting for process exit fails."""


class CommandFailedError(CommandError):
    """Raised by Failure.raise_for_status() for a non-successful exit."""

    def __init__(self, exit_status: ExitStatus) -> None:
        self.exit_status = exit_status
        super().__init__(f"error while executing an internal command ({exit_status})")


class StreamReadError(Exception):
    """A read error on one output stream, delivered to that stream's handler."""

    def __init__(self, stream: str, reason: str) -> None:
        self.stream = stream
        self.reason = reason
        super().__init__(f"Error while reading {stream}: {reason}")
