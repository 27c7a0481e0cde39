"""
Unit tests for layered configuration loading.
"""

import pytest
from pydantic import ValidationError

from glaneur.config.settings import Settings, load_config


class TestLoadConfig:
    """Test YAML and environment layering."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for key in ("DATABASE_URL", "JWT_SECRET_KEY", "SOLANA_RPC_URL", "LOG_LEVEL"):
            monkeypatch.delenv(key, raising=False)

    def test_test_profile_merges_default(self):
        """Test environment YAML is layered over default.yaml."""
        settings = load_config(env="test")

        assert settings.ENV == "test"
        assert settings.DATABASE_URL.startswith("sqlite+aiosqlite")
        assert settings.REDIS_ENABLED is False
        assert settings.COLLECT_BURST_LIMIT == 2
        assert settings.CHALLENGE_TTL_SECONDS == 300

    def test_environment_wins_over_yaml(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        settings = load_config(env="test")

        assert settings.LOG_LEVEL == "ERROR"


class TestSettingsValidation:
    """Test field validators."""

    def _base(self, **overrides) -> dict:
        values = {
            "DATABASE_URL": "sqlite+aiosqlite:///x.db",
            "JWT_SECRET_KEY": "k",
            "SOLANA_RPC_URL": "http://localhost:8899",
        }
        values.update(overrides)
        return values

    def test_log_level_normalized(self):
        assert Settings(**self._base(LOG_LEVEL="debug")).LOG_LEVEL == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(**self._base(LOG_LEVEL="LOUD"))

    def test_invalid_network(self):
        with pytest.raises(ValidationError):
            Settings(**self._base(SOLANA_NETWORK="moonnet"))
