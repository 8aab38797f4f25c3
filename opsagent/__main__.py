"""Entry point: fetch the kubeconfig of a DigitalOcean cluster by name.

    python -m opsagent <cluster-name>

Resolves the cluster id through the DigitalOcean API, downloads the
generated kubeconfig from Spaces into WORKSPACE_DIRECTORY, prints its path,
and logs the versions of the CLIs the agent drives (terraform, kubectl) when
they are installed.

Configuration is read from environment variables / .env (see opsagent.config).
Logfire is configured here and nowhere else.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import logfire

from opsagent.cloud.digitalocean import ClusterLookupError, get_uuid_of_cluster
from opsagent.cmd import LaunchFailedError, does_binary_exist, run_version_command_for
from opsagent.config import get_settings
from opsagent.storage.spaces import ObjectStorageError, kubernetes_config_path

# ── Logging ───────────────────────────────────────────────────────────────────

logging.basicConfig(
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

_PROBED_BINARIES = ("terraform", "kubectl")


async def fetch_kubeconfig(cluster_name: str) -> str:
    """Resolve `cluster_name` and download its kubeconfig; return the file path."""
    settings = get_settings()

    cluster_id = await get_uuid_of_cluster(
        settings.digitalocean_token.get_secret_value(),
        cluster_name,
        api_url=settings.digitalocean_api_url,
    )

    Path(settings.workspace_directory).mkdir(parents=True, exist_ok=True)
    return await kubernetes_config_path(
        settings.workspace_directory,
        cluster_id,
        settings.spaces_region,
        settings.spaces_secret_key.get_secret_value(),
        settings.spaces_access_id,
    )


async def report_tool_versions() -> None:
    for binary in _PROBED_BINARIES:
        if not await does_binary_exist(binary):
            logger.warning("%s not found on PATH", binary)
            continue
        try:
            version = await run_version_command_for(binary)
        except LaunchFailedError as e:
            logger.warning("Could not query %s version: %s", binary, e)
            continue
        logger.info("%s: %s", binary, version or "unknown version")


async def _run(cluster_name: str) -> int:
    try:
        path = await fetch_kubeconfig(cluster_name)
    except (ClusterLookupError, ObjectStorageError) as e:
        logger.error("%s", e)
        return 1

    print(path)
    await report_tool_versions()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="opsagent",
        description="Download the kubeconfig of a DigitalOcean Kubernetes cluster.",
    )
    parser.add_argument("cluster_name", help="cluster name as shown by the DigitalOcean API")
    args = parser.parse_args(argv)

    settings = get_settings()

    # Token is optional; if unset logfire runs in local/dev mode.
    logfire_token = settings.logfire_token
    logfire.configure(
        token=logfire_token.get_secret_value() if logfire_token else None,
        service_name="opsagent",
        send_to_logfire="if-token-present",
    )

    return asyncio.run(_run(args.cluster_name))


if __name__ == "__main__":
    sys.exit(main())
