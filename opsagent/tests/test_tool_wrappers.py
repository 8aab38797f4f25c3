"""Tests for the terraform and kubectl wrappers.

The underlying entry point is mocked; these tests only pin down the locator,
arguments and env overrides each wrapper passes through.
"""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

from opsagent.cmd.errors import StreamReadError
from opsagent.cmd.kubectl import KUBECONFIG, kubectl_exec_with_output
from opsagent.cmd.models import BinaryLocator
from opsagent.cmd.outcome import ExitStatus, Failure, Success
from opsagent.cmd.terraform import (
    TF_PLUGIN_CACHE_DIR,
    plugin_cache_dir,
    terraform_exec,
    terraform_init_validate_plan_apply,
)

OK = Success(ExitStatus(0))
FAILED = Failure(ExitStatus(1))


class TestTerraformExec:
    async def test_runs_in_root_dir_with_plugin_cache(self):
        mock_exec = AsyncMock(return_value=OK)
        with patch("opsagent.cmd.terraform.exec_with_envs_and_output", mock_exec):
            outcome = await terraform_exec("/srv/infra", ["plan"])

        assert outcome is OK
        binary, args, envs, _, _ = mock_exec.call_args.args
        assert binary == BinaryLocator(working_dir="/srv/infra", executable="terraform")
        assert args == ["plan"]
        assert envs == [(TF_PLUGIN_CACHE_DIR, plugin_cache_dir())]

    async def test_output_goes_to_logger(self, caplog):
        async def fake_exec(binary, args, envs, stdout_output, stderr_output):
            stdout_output("Plan: 1 to add")
            stderr_output("Warning: deprecated")
            stderr_output(StreamReadError("stderr", "bad bytes"))
            return OK

        with (
            patch("opsagent.cmd.terraform.exec_with_envs_and_output", side_effect=fake_exec),
            caplog.at_level(logging.INFO, logger="opsagent.cmd.terraform"),
        ):
            await terraform_exec("/srv/infra", ["plan"])

        levels = {r.getMessage(): r.levelno for r in caplog.records}
        assert levels["terraform: Plan: 1 to add"] == logging.INFO
        assert levels["terraform: Warning: deprecated"] == logging.WARNING
        assert levels["Error while reading stderr: bad bytes"] == logging.ERROR

    def test_plugin_cache_under_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert plugin_cache_dir() == f"{tmp_path}/.terraform.d/plugin-cache"


class TestTerraformPipeline:
    async def test_runs_all_steps(self):
        mock_exec = AsyncMock(return_value=OK)
        with patch("opsagent.cmd.terraform.terraform_exec", mock_exec):
            outcome = await terraform_init_validate_plan_apply("/srv/infra")

        assert outcome is OK
        steps = [c.args[1][0] for c in mock_exec.call_args_list]
        assert steps == ["init", "validate", "plan", "apply"]

    async def test_stops_at_first_failure(self):
        mock_exec = AsyncMock(side_effect=[OK, FAILED, OK, OK])
        with patch("opsagent.cmd.terraform.terraform_exec", mock_exec):
            outcome = await terraform_init_validate_plan_apply("/srv/infra")

        assert outcome is FAILED
        assert mock_exec.await_count == 2

    async def test_failed_init_runs_nothing_else(self):
        mock_exec = AsyncMock(side_effect=[FAILED])
        with patch("opsagent.cmd.terraform.terraform_exec", mock_exec):
            outcome = await terraform_init_validate_plan_apply("/srv/infra")

        assert outcome is FAILED
        assert mock_exec.await_count == 1


class TestKubectlExec:
    async def test_kubeconfig_prepended(self):
        mock_exec = AsyncMock(return_value=OK)
        out, err = MagicMock(), MagicMock()
        with patch("opsagent.cmd.kubectl.exec_with_envs_and_output", mock_exec):
            await kubectl_exec_with_output(
                ["get", "nodes"], "/ws/kubernetes_config_c-1", {"A": "1"}, out, err
            )

        mock_exec.assert_awaited_once_with(
            "kubectl",
            ["get", "nodes"],
            [(KUBECONFIG, "/ws/kubernetes_config_c-1"), ("A", "1")],
            out,
            err,
        )

    async def test_no_extra_envs(self):
        mock_exec = AsyncMock(return_value=OK)
        with patch("opsagent.cmd.kubectl.exec_with_envs_and_output", mock_exec):
            await kubectl_exec_with_output(["version"], "/kc", None, MagicMock(), MagicMock())

        assert mock_exec.call_args.args[2] == [(KUBECONFIG, "/kc")]
