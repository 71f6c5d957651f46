"""Tests for the agentid CLI."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import httpx
import pytest
from click.testing import CliRunner

from agentid import __version__
from agentid.cli.commands import verify as verify_module
from agentid.cli.main import cli
from agentid.config import _ENV_OVERRIDES

PERSONAL_NUMBER = "199001010000"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of config loading."""
    for env_var in [*_ENV_OVERRIDES, "AGENTID_CORS_ORIGINS"]:
        monkeypatch.delenv(env_var, raising=False)


class TestCliGroup:
    """Tests for the top-level group."""

    def test_version(self, runner):
        """--version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        """Help output names every command."""
        result = runner.invoke(cli, ["-h"])

        assert result.exit_code == 0
        for command in ("serve", "verify", "config"):
            assert command in result.output
        assert "Quick Start" in result.output

    def test_no_command_shows_help(self, runner):
        """Invoking without a command prints help."""
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "Usage" in result.output


class TestVerifyCommand:
    """Tests for 'agentid verify'."""

    def test_valid_token(self, runner, issuer, monkeypatch):
        """A valid credential prints its subject and exits 0."""
        credential = issuer.issue(PERSONAL_NUMBER)
        monkeypatch.setattr(verify_module, "_fetch_jwks", lambda url: issuer.public_key_set())

        result = runner.invoke(cli, ["verify", credential.token, "--jwks-url", "https://id.example/jwks"])

        assert result.exit_code == 0
        assert "Credential valid" in result.output
        assert credential.subject in result.output
        assert credential.jti in result.output

    def test_rejected_token(self, runner, issuer, monkeypatch):
        """A credential from another issuer exits 1."""
        credential = issuer.issue(PERSONAL_NUMBER)
        monkeypatch.setattr(verify_module, "_fetch_jwks", lambda url: issuer.public_key_set())

        result = runner.invoke(
            cli,
            ["verify", credential.token, "--jwks-url", "https://id.example/jwks", "--issuer", "someone-else"],
        )

        assert result.exit_code == 1
        assert "Credential rejected" in result.output

    def test_jwks_url_required(self, runner):
        """--jwks-url is mandatory."""
        result = runner.invoke(cli, ["verify", "token"])

        assert result.exit_code != 0
        assert "--jwks-url" in result.output

    def test_unreachable_key_set(self, runner, monkeypatch):
        """An unreachable key set endpoint is a usage error, not a traceback."""
        request = httpx.Request("GET", "https://id.example/jwks")
        monkeypatch.setattr(
            verify_module.httpx,
            "get",
            MagicMock(side_effect=httpx.ConnectError("down", request=request)),
        )

        result = runner.invoke(cli, ["verify", "token", "--jwks-url", "https://id.example/jwks"])

        assert result.exit_code == 1
        assert "Cannot reach key set endpoint" in result.output

    def test_key_set_http_error(self, runner, monkeypatch):
        """A non-2xx key set response is reported with its status."""
        request = httpx.Request("GET", "https://id.example/jwks")
        monkeypatch.setattr(
            verify_module.httpx,
            "get",
            MagicMock(return_value=httpx.Response(503, request=request)),
        )

        result = runner.invoke(cli, ["verify", "token", "--jwks-url", "https://id.example/jwks"])

        assert result.exit_code == 1
        assert "HTTP 503" in result.output


class TestConfigCheck:
    """Tests for 'agentid config check'."""

    def test_complete_configuration(self, runner, tmp_path, app_config):
        """A complete configuration exits 0 and never prints secrets."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(app_config.model_dump()))

        result = runner.invoke(cli, ["config", "check", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Configuration is complete" in result.output
        assert "api-key" not in result.output
        assert "BEGIN PRIVATE KEY" not in result.output
        assert "In-memory session store" in result.output

    def test_missing_secrets(self, runner, tmp_path):
        """Missing provider keys and signing key exit 1."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")

        result = runner.invoke(cli, ["config", "check", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Provider credentials missing" in result.output
        assert "not configured" in result.output

    def test_secrets_from_environment(self, runner, tmp_path, app_config):
        """Environment variables fill in secrets absent from the file."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")
        env = {
            "GRANDID_API_KEY": "api-key",
            "GRANDID_SERVICE_KEY": "service-key",
            "JWT_PRIVATE_KEY": app_config.signing.private_key_pem.replace("\n", "\\n"),
            "JWT_HMAC_SECRET": "secret",
        }

        result = runner.invoke(cli, ["config", "check", "--config", str(config_file)], env=env)

        assert result.exit_code == 0, result.output

    def test_invalid_file(self, runner, tmp_path):
        """Invalid JSON exits 1 with the parse error."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        result = runner.invoke(cli, ["config", "check", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


class TestServeCommand:
    """Tests for 'agentid serve'."""

    def test_runs_uvicorn(self, runner, tmp_path, monkeypatch):
        """serve builds the app and hands it to uvicorn with host and port."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")
        run = MagicMock()
        monkeypatch.setattr("agentid.cli.commands.serve.uvicorn.run", run)

        result = runner.invoke(
            cli,
            ["serve", "--host", "0.0.0.0", "--port", "9000", "--config", str(config_file)],
        )

        assert result.exit_code == 0, result.output
        run.assert_called_once()
        assert run.call_args.kwargs["host"] == "0.0.0.0"
        assert run.call_args.kwargs["port"] == 9000
        assert run.call_args.kwargs["log_config"] is None

    def test_missing_config_file(self, runner, tmp_path):
        """An explicit config path that does not exist exits 1."""
        result = runner.invoke(cli, ["serve", "--config", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "not found" in result.output
