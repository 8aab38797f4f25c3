"""Data types for one command invocation.

BinaryLocator replaces the legacy "one string means two things" convention:
a locator such as "/srv/infra terraform" carries a working directory and an
executable separated by whitespace. The structured form has an explicit,
optional working_dir and a mandatory executable, so executable paths that
legitimately contain spaces can be expressed. The legacy string form is
still accepted everywhere via BinaryLocator.parse().

ProcessSpec is the fully resolved, launch-ready description produced by the
command builder. It is plain data — building one never touches the OS.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from opsagent.cmd.errors import InvalidInputError


def _check_text(value: str, what: str) -> str:
    """Reject text that cannot be handed to the OS as UTF-8."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        msg = f"{what} is not valid UTF-8 text: {e}"
        raise ValueError(msg) from e
    if "\x00" in value:
        msg = f"{what} must not contain NUL bytes"
        raise ValueError(msg)
    return value


class BinaryLocator(BaseModel):
    """Where to run (optional) and what to run (mandatory)."""

    model_config = ConfigDict(frozen=True)

    executable: str
    working_dir: str | None = None

    @field_validator("executable")
    @classmethod
    def validate_executable(cls, v: str) -> str:
        if not v:
            msg = "Executable must not be empty"
            raise ValueError(msg)
        return _check_text(v, "Executable")

    @field_validator("working_dir")
    @classmethod
    def validate_working_dir(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v:
            msg = "Working directory must not be empty when given"
            raise ValueError(msg)
        return _check_text(v, "Working directory")

    @classmethod
    def parse(cls, value: str | bytes | os.PathLike | BinaryLocator) -> BinaryLocator:
        """Build a locator from the legacy whitespace-separated form.

        "terraform"            -> executable="terraform"
        "/srv/infra terraform" -> working_dir="/srv/infra", executable="terraform"

        More than two tokens is rejected rather than silently truncated.

        Raises:
            InvalidInputError: empty, undecodable, or over-long locator.
        """
        if isinstance(value, BinaryLocator):
            return value

        raw = os.fspath(value)
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                msg = f"Binary locator is not valid UTF-8: {e}"
                raise InvalidInputError(msg) from e

        tokens = raw.split()
        if not tokens:
            raise InvalidInputError("Binary locator must not be empty")
        if len(tokens) > 2:
            msg = (
                f"Binary locator '{raw}' has {len(tokens)} tokens; expected "
                "'<executable>' or '<working_dir> <executable>'. "
                "Use BinaryLocator(...) for paths containing spaces."
            )
            raise InvalidInputError(msg)

        try:
            if len(tokens) == 1:
                return cls(executable=tokens[0])
            return cls(working_dir=tokens[0], executable=tokens[1])
        except ValidationError as e:
            raise InvalidInputError(str(e)) from e

    def display_segment(self) -> str:
        """The leading segment of the locator, as rendered in command logs.

        With a working_dir this is the directory alone, so the audit line for
        BinaryLocator(working_dir="/tmp/work", executable="mytool") starts with
        "/tmp/work" and does not name the executable. The span opened around each
        run carries the executable separately.
        """
        return self.working_dir if self.working_dir is not None else self.executable

    def __str__(self) -> str:
        if self.working_dir is None:
            return self.executable
        return f"{self.working_dir} {self.executable}"


@dataclass(frozen=True)
class ProcessSpec:
    """Launch-ready process description.

    stdout and stderr are always captured through pipes; stdin is inherited.
    env is the merged environment (inherited + overrides); env_overrides keeps
    the caller's overrides in the order given, for audit output.
    """

    executable: str
    args: tuple[str, ...]
    cwd: str | None
    env: dict[str, str]
    env_overrides: tuple[tuple[str, str], ...] = field(default=())

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.executable, *self.args)
