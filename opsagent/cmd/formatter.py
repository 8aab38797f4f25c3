"""Command formatter — render a command as a single audit-log line.

Pure: no I/O, no logging. The invocation layer decides where the line goes.

    command_to_string("/tmp/work mytool", ["--flag", "x"], {"FOO": "bar"})
    -> "FOO=bar /tmp/work --flag x"

Env pairs come first, then the leading segment of the binary locator, then
the arguments. Empty segments are dropped so there are no stray spaces.
With a working directory in the locator only the directory is rendered; see
BinaryLocator.display_segment().
"""

from __future__ import annotations

import os
from collections.abc import Sequence

from opsagent.cmd.builder import EnvOverrides, env_pairs
from opsagent.cmd.errors import InvalidInputError
from opsagent.cmd.models import BinaryLocator


def _binary_segment(binary: str | bytes | os.PathLike | BinaryLocator) -> str:
    if isinstance(binary, BinaryLocator):
        return binary.display_segment()
    raw = os.fspath(binary)
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            msg = f"Binary locator is not valid UTF-8: {e}"
            raise InvalidInputError(msg) from e
    tokens = raw.split()
    return tokens[0] if tokens else ""


def command_to_string(
    binary: str | bytes | os.PathLike | BinaryLocator,
    args: Sequence[str] = (),
    envs: EnvOverrides | None = None,
) -> str:
    """Render binary, args and env overrides as one log line.

    Raises:
        InvalidInputError: the locator is not valid UTF-8.
    """
    segments = [
        " ".join(f"{name}={value}" for name, value in env_pairs(envs)),
        _binary_segment(binary),
        " ".join(args),
    ]
    return " ".join(s for s in segments if s)
