"""Tests for OpsSettings — environment-driven configuration."""

import pytest
from pydantic import ValidationError

from opsagent.cloud.digitalocean import DO_CLUSTER_API_PATH
from opsagent.config import OpsSettings, clear_settings_cache, get_settings

REQUIRED_ENV = {
    "DIGITALOCEAN_TOKEN": "do-token",
    "SPACES_ACCESS_ID": "access",
    "SPACES_SECRET_KEY": "secret",
}
OPTIONAL_ENV = (
    "SPACES_REGION",
    "WORKSPACE_DIRECTORY",
    "DIGITALOCEAN_API_URL",
    "LOGFIRE_TOKEN",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Start every test from a clean environment, away from any local .env file."""
    monkeypatch.chdir(tmp_path)
    for name in (*REQUIRED_ENV, *OPTIONAL_ENV):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def required_env(monkeypatch):
    for name, value in REQUIRED_ENV.items():
        monkeypatch.setenv(name, value)


class TestOpsSettings:
    def test_defaults(self, required_env):
        settings = OpsSettings()
        assert settings.spaces_region == "fra1"
        assert settings.workspace_directory == "/tmp/opsagent"
        assert settings.digitalocean_api_url == DO_CLUSTER_API_PATH
        assert settings.logfire_token is None

    def test_secrets_are_masked(self, required_env):
        settings = OpsSettings()
        assert settings.digitalocean_token.get_secret_value() == "do-token"
        assert "do-token" not in repr(settings)
        assert "secret" not in str(settings.spaces_secret_key)

    def test_missing_required_vars(self):
        with pytest.raises(ValidationError) as exc_info:
            OpsSettings()
        missing = {err["loc"][0] for err in exc_info.value.errors()}
        assert missing == {"digitalocean_token", "spaces_access_id", "spaces_secret_key"}

    def test_overrides(self, required_env, monkeypatch):
        monkeypatch.setenv("SPACES_REGION", " ams3 ")
        monkeypatch.setenv("WORKSPACE_DIRECTORY", "/var/lib/opsagent/")
        settings = OpsSettings()
        assert settings.spaces_region == "ams3"
        assert settings.workspace_directory == "/var/lib/opsagent"

    def test_empty_region_rejected(self, required_env, monkeypatch):
        monkeypatch.setenv("SPACES_REGION", "  ")
        with pytest.raises(ValidationError, match="SPACES_REGION"):
            OpsSettings()

    def test_relative_workspace_rejected(self, required_env, monkeypatch):
        monkeypatch.setenv("WORKSPACE_DIRECTORY", "workspace")
        with pytest.raises(ValidationError, match="absolute"):
            OpsSettings()

    def test_reads_dotenv(self, tmp_path):
        (tmp_path / ".env").write_text(
            "DIGITALOCEAN_TOKEN=from-file\nSPACES_ACCESS_ID=a\nSPACES_SECRET_KEY=s\n"
        )
        settings = OpsSettings()
        assert settings.digitalocean_token.get_secret_value() == "from-file"


class TestGetSettings:
    def test_cached(self, required_env):
        assert get_settings() is get_settings()

    def test_clear_cache(self, required_env, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("SPACES_REGION", "sgp1")
        clear_settings_cache()
        second = get_settings()
        assert first is not second
        assert second.spaces_region == "sgp1"
