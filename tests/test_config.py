"""Tests for configuration models and loading."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from agentid.config import AppConfig, SigningConfig, StoreConfig, load_config
from agentid.exceptions import ConfigurationError


class TestDefaults:
    """Default configuration values."""

    def test_defaults(self):
        """An empty config is valid and points at the test provider."""
        config = AppConfig()

        assert config.provider.base_url == "https://client.test.grandid.com"
        assert not config.provider.is_configured
        assert config.signing.algorithm == "RS256"
        assert config.signing.issuer == "agentid"
        assert config.signing.token_ttl_seconds == 3600
        assert config.store.redis_url is None
        assert config.store.pending_ttl_seconds == 600
        assert config.api.min_poll_interval_seconds == 2.0

    def test_terminal_ttl_follows_token_ttl(self):
        """Terminal session retention is the credential lifetime."""
        config = AppConfig.model_validate({"signing": {"token_ttl_seconds": 900}})

        assert config.terminal_ttl_seconds == 900

    def test_symmetric_algorithm_rejected(self):
        """Only asymmetric signing algorithms are accepted."""
        with pytest.raises(ValidationError):
            SigningConfig(algorithm="HS256")

    def test_pending_ttl_bounds(self):
        """Pending TTL must stay within sane bounds."""
        with pytest.raises(ValidationError):
            StoreConfig(pending_ttl_seconds=5)

    def test_unknown_fields_ignored(self):
        """Unknown top-level keys do not fail validation."""
        config = AppConfig.model_validate({"future_section": {"x": 1}})

        assert config.store.redis_url is None


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_default_file_is_fine(self, tmp_path, monkeypatch):
        """No file at the default location means defaults plus environment."""
        monkeypatch.setattr("agentid.config.get_default_config_path", lambda: tmp_path / "none.json")

        config = load_config(environ={})

        assert config == AppConfig()

    def test_explicit_missing_file_raises(self, tmp_path):
        """An explicitly named file must exist."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.json", environ={})

    def test_reads_file(self, tmp_path):
        """Values come from the JSON file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"provider": {"api_key": "file-key"}, "store": {"key_prefix": "x"}}))

        config = load_config(path, environ={})

        assert config.provider.api_key == "file-key"
        assert config.store.key_prefix == "x"

    def test_environment_overrides_file(self, tmp_path):
        """Environment variables win over file values."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"provider": {"api_key": "file-key"}}))

        config = load_config(
            path,
            environ={
                "GRANDID_API_KEY": "env-key",
                "GRANDID_SERVICE_KEY": "env-service",
                "REDIS_URL": "redis://cache:6379/0",
                "AGENTID_PUBLIC_BASE_URL": "https://id.example.com",
            },
        )

        assert config.provider.api_key == "env-key"
        assert config.provider.is_configured
        assert config.store.redis_url == "redis://cache:6379/0"
        assert config.api.public_base_url == "https://id.example.com"

    def test_pem_newline_escapes_restored(self, tmp_path, private_pem):
        """PEM values passed with literal \\n escapes are restored."""
        path = tmp_path / "config.json"
        path.write_text("{}")

        config = load_config(path, environ={"JWT_PRIVATE_KEY": private_pem.replace("\n", "\\n")})

        assert config.signing.private_key_pem == private_pem

    def test_cors_origins_from_environment(self, tmp_path):
        """AGENTID_CORS_ORIGINS is a comma-separated list."""
        path = tmp_path / "config.json"
        path.write_text("{}")

        config = load_config(path, environ={"AGENTID_CORS_ORIGINS": "https://a.example, https://b.example,"})

        assert config.api.cors_origins == ["https://a.example", "https://b.example"]

    def test_empty_environment_values_ignored(self, tmp_path):
        """Empty variables do not blank out file values."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"provider": {"api_key": "file-key"}}))

        config = load_config(path, environ={"GRANDID_API_KEY": ""})

        assert config.provider.api_key == "file-key"

    def test_invalid_json_raises(self, tmp_path):
        """Malformed JSON is a configuration error."""
        path = tmp_path / "config.json"
        path.write_text("{nope")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_config(path, environ={})

    def test_non_object_raises(self, tmp_path):
        """The file must contain a JSON object."""
        path = tmp_path / "config.json"
        path.write_text("[]")

        with pytest.raises(ConfigurationError, match="expected a JSON object"):
            load_config(path, environ={})

    def test_invalid_values_listed(self, tmp_path):
        """Validation failures name the offending field."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"signing": {"token_ttl_seconds": 5}}))

        with pytest.raises(ConfigurationError, match="signing.token_ttl_seconds"):
            load_config(path, environ={})
