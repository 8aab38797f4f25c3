"""opsagent configuration — centralized environment variable management.

Credentials and paths are injected into the agent's environment (systemd
EnvironmentFile in production, a .env file in development). This module is
the single place where those variables are declared, validated, and typed.

No module should call os.environ for configuration — import settings from here.

Usage:
    from opsagent.config import get_settings

    settings = get_settings()
    token = settings.digitalocean_token.get_secret_value()

Environment variables:

  Required:
    DIGITALOCEAN_TOKEN    — DigitalOcean API token used to resolve cluster ids.
    SPACES_ACCESS_ID      — Spaces (S3-compatible) access key id.
    SPACES_SECRET_KEY     — Spaces secret key.

  Optional:
    SPACES_REGION         — Spaces region holding the kubeconfig buckets.
                            Default: "fra1".
    WORKSPACE_DIRECTORY   — Absolute directory where kubeconfigs are written.
                            Default: "/tmp/opsagent".
    DIGITALOCEAN_API_URL  — Kubernetes clusters listing endpoint. Override for
                            testing against a stub API.
    LOGFIRE_TOKEN         — Logfire project token. If unset, logfire runs in
                            local/dev mode (no remote export).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import PurePosixPath

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from opsagent.cloud.digitalocean import DO_CLUSTER_API_PATH


class OpsSettings(BaseSettings):
    """Centralized configuration for opsagent.

    Field names map to env vars by uppercasing: spaces_region → SPACES_REGION.
    Instantiate via get_settings() to benefit from caching.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # ── DigitalOcean API ─────────────────────────────────────────────────────

    digitalocean_token: SecretStr
    """API token sent as a bearer header. SecretStr prevents accidental logging."""

    digitalocean_api_url: str = DO_CLUSTER_API_PATH

    # ── Spaces object storage ────────────────────────────────────────────────

    spaces_access_id: str
    spaces_secret_key: SecretStr
    spaces_region: str = "fra1"

    # ── Local workspace ──────────────────────────────────────────────────────

    workspace_directory: str = "/tmp/opsagent"
    """Directory receiving kubernetes_config_<cluster-id> files."""

    # ── Observability ────────────────────────────────────────────────────────

    logfire_token: SecretStr | None = None

    # ── Validators ───────────────────────────────────────────────────────────

    @field_validator("spaces_region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "SPACES_REGION must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("workspace_directory")
    @classmethod
    def validate_workspace_directory(cls, v: str) -> str:
        if not PurePosixPath(v).is_absolute():
            msg = f"WORKSPACE_DIRECTORY must be an absolute path, got '{v}'"
            raise ValueError(msg)
        return v.rstrip("/") or "/"


@lru_cache(maxsize=1)
def get_settings() -> OpsSettings:
    """Return the cached OpsSettings instance.

    Reads from environment on first call, then caches for the process lifetime.
    Call clear_settings_cache() in tests to reset between test cases.
    """
    return OpsSettings()  # pyright: ignore[reportCallIssue]  BaseSettings reads from env


def clear_settings_cache() -> None:
    """Clear the settings cache."""
    get_settings.cache_clear()
