"""Command builder — turn a locator, arguments and env overrides into a ProcessSpec.

Pure data transformation: nothing is launched and the filesystem is not
consulted. The inherited environment is read from os.environ (or the
`base_env` argument) and overrides are layered on top, never replacing it.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping, Sequence

from opsagent.cmd.errors import InvalidInputError
from opsagent.cmd.models import BinaryLocator, ProcessSpec

EnvOverrides = Mapping[str, str] | Iterable[tuple[str, str]]


def env_pairs(envs: EnvOverrides | None) -> list[tuple[str, str]]:
    """Normalize env overrides to an ordered list of validated (name, value) pairs.

    Raises:
        InvalidInputError: a name is empty or contains '=', or a name/value is
            not a str or contains a NUL byte.
    """
    if envs is None:
        return []
    items = envs.items() if isinstance(envs, Mapping) else envs

    pairs: list[tuple[str, str]] = []
    for item in items:
        try:
            name, value = item
        except (TypeError, ValueError) as e:
            msg = f"Environment override must be a (name, value) pair, got {item!r}"
            raise InvalidInputError(msg) from e
        if not isinstance(name, str) or not isinstance(value, str):
            msg = f"Environment override {item!r} must be a pair of strings"
            raise InvalidInputError(msg)
        if not name or "=" in name:
            msg = f"Invalid environment variable name: {name!r}"
            raise InvalidInputError(msg)
        if "\x00" in name or "\x00" in value:
            msg = f"Environment override {name!r} must not contain NUL bytes"
            raise InvalidInputError(msg)
        pairs.append((name, value))
    return pairs


def _check_args(args: Sequence[str]) -> tuple[str, ...]:
    if isinstance(args, str):
        msg = "Arguments must be a sequence of strings, not a single string"
        raise InvalidInputError(msg)
    checked = tuple(args)
    for arg in checked:
        if not isinstance(arg, str):
            msg = f"Argument {arg!r} is not a string"
            raise InvalidInputError(msg)
        if "\x00" in arg:
            msg = f"Argument {arg!r} must not contain NUL bytes"
            raise InvalidInputError(msg)
    return checked


def build_process_spec(
    binary: str | bytes | os.PathLike | BinaryLocator,
    args: Sequence[str] = (),
    envs: EnvOverrides | None = None,
    *,
    base_env: Mapping[str, str] | None = None,
) -> ProcessSpec:
    """Build a launch-ready ProcessSpec.

    Args:
        binary: Executable, optionally prefixed by a working directory
            ("<dir> <executable>"), or a structured BinaryLocator.
        args: Arguments, passed verbatim and in order.
        envs: Overrides applied on top of the inherited environment.
            Later duplicates win.
        base_env: Environment to inherit. Defaults to os.environ.

    Raises:
        InvalidInputError: malformed locator, argument or override.
    """
    locator = BinaryLocator.parse(binary)
    checked_args = _check_args(args)
    overrides = env_pairs(envs)

    env = dict(os.environ if base_env is None else base_env)
    env.update(overrides)

    return ProcessSpec(
        executable=locator.executable,
        args=checked_args,
        cwd=locator.working_dir,
        env=env,
        env_overrides=tuple(overrides),
    )
