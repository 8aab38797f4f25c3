"""Spaces object storage — fetch generated kubeconfigs for DigitalOcean clusters.

DigitalOcean writes each cluster's kubeconfig to an S3-compatible Spaces
bucket. The layout is fixed:

    bucket: qovery-kubeconfigs-<cluster-id>
    key:    <cluster-id>.yaml

kubernetes_config_path() downloads the object and writes it verbatim to
<workspace>/kubernetes_config_<cluster-id>, returning that path so it can be
passed to kubectl as KUBECONFIG.

boto3 is synchronous; calls are pushed to a worker thread with
asyncio.to_thread so the event loop keeps draining other processes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import boto3
import logfire
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str, str], Any]


class ObjectStorageError(Exception):
    """Raised when an object cannot be fetched or persisted."""


def kubeconfig_bucket_name(cluster_id: str) -> str:
    return f"qovery-kubeconfigs-{cluster_id}"


def kubeconfig_object_key(cluster_id: str) -> str:
    return f"{cluster_id}.yaml"


def kubeconfig_file_path(workspace_directory: str, cluster_id: str) -> str:
    return f"{workspace_directory}/kubernetes_config_{cluster_id}"


def spaces_endpoint(region: str) -> str:
    return f"https://{region}.digitaloceanspaces.com"


def make_spaces_client(access_id: str, secret_key: str, region: str) -> Any:
    """Build a boto3 S3 client pointed at the region's Spaces endpoint."""
    return boto3.session.Session().client(
        "s3",
        region_name=region,
        endpoint_url=spaces_endpoint(region),
        aws_access_key_id=access_id,
        aws_secret_access_key=secret_key,
    )


def _get_object_body(client: Any, bucket_name: str, object_key: str) -> str:
    response = client.get_object(Bucket=bucket_name, Key=object_key)
    return response["Body"].read().decode("utf-8")


async def download_space_object(
    access_id: str,
    secret_key: str,
    bucket_name: str,
    object_key: str,
    region: str,
    *,
    client_factory: ClientFactory = make_spaces_client,
) -> str:
    """Return the body of `bucket_name/object_key` as text.

    Raises:
        ObjectStorageError: credentials, network, missing bucket/key, or a
            body that is not UTF-8.
    """
    with logfire.span("spaces.download", bucket=bucket_name, key=object_key, region=region):
        try:
            client = client_factory(access_id, secret_key, region)
            return await asyncio.to_thread(_get_object_body, client, bucket_name, object_key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "unknown")
            msg = f"Unable to download {bucket_name}/{object_key} ({code}): {e}"
            raise ObjectStorageError(msg) from e
        except BotoCoreError as e:
            msg = f"Unable to download {bucket_name}/{object_key}: {e}"
            raise ObjectStorageError(msg) from e
        except UnicodeDecodeError as e:
            msg = f"Object {bucket_name}/{object_key} is not valid UTF-8"
            raise ObjectStorageError(msg) from e


async def kubernetes_config_path(
    workspace_directory: str,
    kubernetes_cluster_id: str,
    region: str,
    spaces_secret_key: str,
    spaces_access_id: str,
    *,
    client_factory: ClientFactory = make_spaces_client,
) -> str:
    """Download a cluster's kubeconfig into the workspace and return its path.

    Raises:
        ObjectStorageError: download failed, or the file could not be written.
    """
    body = await download_space_object(
        spaces_access_id,
        spaces_secret_key,
        kubeconfig_bucket_name(kubernetes_cluster_id),
        kubeconfig_object_key(kubernetes_cluster_id),
        region,
        client_factory=client_factory,
    )

    path = kubeconfig_file_path(workspace_directory, kubernetes_cluster_id)
    try:
        Path(path).write_text(body, encoding="utf-8")
    except OSError as e:
        msg = f"Unable to write kubeconfig to {path}: {e}"
        raise ObjectStorageError(msg) from e

    logger.info("Wrote kubeconfig for cluster %s to %s", kubernetes_cluster_id, path)
    return path
