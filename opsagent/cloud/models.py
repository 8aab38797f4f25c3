"""Pydantic models for the DigitalOcean Kubernetes clusters listing.

Only the fields the agent needs are declared; everything else in the API
response is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel


class Cluster(BaseModel):
    id: str
    name: str


class Clusters(BaseModel):
    """Body of GET /v2/kubernetes/clusters."""

    kubernetes_clusters: list[Cluster]
