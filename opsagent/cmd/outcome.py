"""Execution outcome and exit-status mapping.

A finished invocation yields exactly one of Success or Failure. Both carry
the full ExitStatus so a caller can always log the code or signal and
correlate it with the external tool's own documented exit codes.
"""

from __future__ import annotations

import signal as _signal
from dataclasses import dataclass
from typing import ClassVar

from opsagent.cmd.errors import CommandFailedError, WaitFailedError


@dataclass(frozen=True)
class ExitStatus:
    """Platform exit status of a finished process.

    Follows the asyncio/subprocess convention: a negative returncode -N
    means the process was terminated by signal N.
    """

    returncode: int

    @property
    def exited_normally(self) -> bool:
        return self.returncode >= 0

    @property
    def code(self) -> int | None:
        """Exit code, or None when the process was killed by a signal."""
        return self.returncode if self.returncode >= 0 else None

    @property
    def signal(self) -> int | None:
        """Terminating signal number, or None for a normal exit."""
        return -self.returncode if self.returncode < 0 else None

    @property
    def signal_name(self) -> str | None:
        if self.signal is None:
            return None
        try:
            return _signal.Signals(self.signal).name
        except ValueError:
            return None

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def __str__(self) -> str:
        if self.exited_normally:
            return f"exit code {self.returncode}"
        if self.signal_name:
            return f"killed by signal {self.signal} ({self.signal_name})"
        return f"killed by signal {self.signal}"


@dataclass(frozen=True)
class Success:
    """The process exited normally with code 0."""

    exit_status: ExitStatus
    success: ClassVar[bool] = True

    def raise_for_status(self) -> None:
        return None


@dataclass(frozen=True)
class Failure:
    """The process ran and exited unsuccessfully (non-zero code or signal)."""

    exit_status: ExitStatus
    success: ClassVar[bool] = False

    def raise_for_status(self) -> None:
        raise CommandFailedError(self.exit_status)


ExecutionOutcome = Success | Failure


def map_exit_status(returncode: int | None) -> ExecutionOutcome:
    """Translate a waited-on returncode into an ExecutionOutcome.

    Raises:
        WaitFailedError: returncode is None, i.e. no exit status was obtained.
            This is never coerced into a Failure.
    """
    if returncode is None:
        raise WaitFailedError("Process exit status is unavailable after wait()")
    status = ExitStatus(returncode)
    if status.success:
        return Success(status)
    return Failure(status)
