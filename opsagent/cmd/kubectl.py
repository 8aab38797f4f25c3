"""kubectl wrapper — run kubectl against an explicit kubeconfig file."""

from __future__ import annotations

from collections.abc import Sequence

from opsagent.cmd.builder import EnvOverrides, env_pairs
from opsagent.cmd.drainer import LineHandler
from opsagent.cmd.outcome import ExecutionOutcome
from opsagent.cmd.utilities import exec_with_envs_and_output

KUBECONFIG = "KUBECONFIG"


async def kubectl_exec_with_output(
    args: Sequence[str],
    kubeconfig_path: str,
    envs: EnvOverrides | None,
    stdout_output: LineHandler,
    stderr_output: LineHandler,
) -> ExecutionOutcome:
    """Run `kubectl <args>` with KUBECONFIG pointing at `kubeconfig_path`.

    KUBECONFIG comes first in the overrides, so an explicit KUBECONFIG in
    `envs` takes precedence.
    """
    overrides = [(KUBECONFIG, kubeconfig_path), *env_pairs(envs)]
    return await exec_with_envs_and_output(
        "kubectl", args, overrides, stdout_output, stderr_output
    )
