"""Terraform wrapper — run terraform inside a root module directory.

Provider plugins are shared across workspaces through TF_PLUGIN_CACHE_DIR,
so repeated `terraform init` calls don't re-download them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from opsagent.cmd.drainer import LineHandler
from opsagent.cmd.errors import StreamReadError
from opsagent.cmd.models import BinaryLocator
from opsagent.cmd.outcome import ExecutionOutcome
from opsagent.cmd.utilities import exec_with_envs_and_output

logger = logging.getLogger(__name__)

TF_PLUGIN_CACHE_DIR = "TF_PLUGIN_CACHE_DIR"


def plugin_cache_dir() -> str:
    """Shared plugin cache, ~/.terraform.d/plugin-cache."""
    return str(Path.home() / ".terraform.d" / "plugin-cache")


def _log_line(level: int) -> LineHandler:
    def handler(line: str | StreamReadError) -> None:
        if isinstance(line, StreamReadError):
            logger.error("%s", line)
        else:
            logger.log(level, "terraform: %s", line)

    return handler


async def terraform_exec(root_dir: str, args: Sequence[str]) -> ExecutionOutcome:
    """Run `terraform <args>` with `root_dir` as working directory.

    Output is streamed to the module logger (stdout at INFO, stderr at WARNING).
    """
    return await exec_with_envs_and_output(
        BinaryLocator(working_dir=root_dir, executable="terraform"),
        args,
        [(TF_PLUGIN_CACHE_DIR, plugin_cache_dir())],
        _log_line(logging.INFO),
        _log_line(logging.WARNING),
    )


async def terraform_init_validate_plan_apply(root_dir: str) -> ExecutionOutcome:
    """init, validate, plan and apply, stopping at the first failed step."""
    steps: list[list[str]] = [
        ["init", "-input=false"],
        ["validate"],
        ["plan", "-input=false", "-out", "tf_plan"],
        ["apply", "-input=false", "-auto-approve", "tf_plan"],
    ]
    outcome = await terraform_exec(root_dir, steps[0])
    for step in steps[1:]:
        if not outcome.success:
            break
        outcome = await terraform_exec(root_dir, step)
    if not outcome.success:
        logger.error("terraform failed in %s: %s", root_dir, outcome.exit_status)
    return outcome
