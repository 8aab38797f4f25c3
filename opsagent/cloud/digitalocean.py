"""DigitalOcean cluster lookup — resolve a cluster name to its id.

One GET to the clusters listing endpoint, a 200 with a JSON body is expected,
and the id of the cluster whose name matches exactly is returned. Each way
this can go wrong has its own ClusterLookupError subclass; a missing name is
ClusterNotFoundError, never a made-up id.

Observability: the lookup is wrapped in a logfire span.
"""

from __future__ import annotations

import logging

import httpx
import logfire
from pydantic import ValidationError

from opsagent.cloud.models import Clusters

logger = logging.getLogger(__name__)

DO_CLUSTER_API_PATH = "https://api.digitalocean.com/v2/kubernetes/clusters"

_API_TIMEOUT: float = 30.0


class ClusterLookupError(Exception):
    """Raised when a cluster id cannot be resolved."""


class ClusterApiUnreachableError(ClusterLookupError):
    """No response could be obtained from the API."""


class UnexpectedStatusError(ClusterLookupError):
    """The API answered with something other than 200."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(
            f"Received unexpected status code {status_code} from DigitalOcean "
            "while retrieving the cluster list"
        )


class ClusterListDecodeError(ClusterLookupError):
    """The response body is not the expected clusters JSON document."""


class ClusterNotFoundError(ClusterLookupError):
    """No cluster in the listing has the requested name."""

    def __init__(self, cluster_name: str) -> None:
        self.cluster_name = cluster_name
        super().__init__(f"Unable to retrieve cluster id for name '{cluster_name}'")


def bearer_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }


def search_uuid_cluster_for(cluster_name: str, clusters: Clusters) -> str | None:
    """Return the id of the first cluster named exactly `cluster_name`."""
    for cluster in clusters.kubernetes_clusters:
        if cluster.name == cluster_name:
            return cluster.id
    return None


async def get_uuid_of_cluster(
    token: str,
    cluster_name: str,
    *,
    api_url: str = DO_CLUSTER_API_PATH,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Resolve `cluster_name` to its DigitalOcean cluster id.

    Args:
        token: DigitalOcean API token.
        cluster_name: Human-readable cluster name, matched exactly.
        api_url: Clusters listing endpoint.
        client: Optional pre-built client (tests inject a MockTransport).

    Raises:
        ClusterApiUnreachableError: network/transport failure.
        UnexpectedStatusError: non-200 response.
        ClusterListDecodeError: body is not a valid clusters listing.
        ClusterNotFoundError: no cluster has that name.
    """
    with logfire.span("digitalocean.cluster_lookup", cluster_name=cluster_name):
        try:
            if client is None:
                async with httpx.AsyncClient(timeout=_API_TIMEOUT) as own_client:
                    response = await own_client.get(api_url, headers=bearer_headers(token))
            else:
                response = await client.get(api_url, headers=bearer_headers(token))
        except httpx.HTTPError as e:
            msg = f"Unable to get any response from DigitalOcean: {e}"
            raise ClusterApiUnreachableError(msg) from e

        if response.status_code != httpx.codes.OK:
            raise UnexpectedStatusError(response.status_code)

        try:
            clusters = Clusters.model_validate_json(response.text)
        except ValidationError as e:
            logger.error("Invalid clusters listing from DigitalOcean: %s", e)
            msg = "Failed to deserialize JSON received from the DigitalOcean API"
            raise ClusterListDecodeError(msg) from e

        cluster_id = search_uuid_cluster_for(cluster_name, clusters)
        if cluster_id is None:
            raise ClusterNotFoundError(cluster_name)

        logfire.info(
            "Resolved cluster {cluster_name} to {cluster_id}",
            cluster_name=cluster_name,
            cluster_id=cluster_id,
        )
        return cluster_id
