"""Unit tests for the envgate CLI."""

import json

import pytest
from typer.testing import CliRunner

from envgate import __version__
from envgate.cli import app

VALID_ENV = """
API_URL="https://api.myapp.com/v1/"
DB_HOST="localhost"
ENVIRONMENT="PRODUCTION"
ENABLE_DEBUG="true"
TRUSTED_PROXY_IP="192.168.1.100"
"""


def _json_output(result):
    """Parse the JSON report, ignoring log lines when stderr is mixed in."""
    output = result.stdout
    return json.loads(output[output.index("{"):output.rindex("}") + 1])


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text(VALID_ENV, encoding="utf-8")
    return path


@pytest.fixture
def empty_config(tmp_path):
    """Explicit empty config so no .envgate.json is picked up from the cwd."""
    path = tmp_path / ".envgate.json"
    path.write_text("{}", encoding="utf-8")
    return path


class TestValidateCLI:
    """Test the validate command."""

    def test_valid_file(self, runner, env_file, empty_config):
        result = runner.invoke(app, [
            "validate", str(env_file), "-k", "DB_HOST", "--config", str(empty_config)
        ])

        assert result.exit_code == 0
        assert "Validation Status: PASS" in result.stdout
        assert "No issues found!" in result.stdout

    def test_missing_keys(self, runner, env_file, empty_config):
        result = runner.invoke(app, [
            "validate", str(env_file), "-k", "REDIS_HOST", "-k", "CACHE_SIZE",
            "--config", str(empty_config), "--format", "json"
        ])

        assert result.exit_code == 1
        data = _json_output(result)
        assert data["status"] == "fail"
        assert data["missing_keys"] == ["CACHE_SIZE", "REDIS_HOST"]

    def test_content_violation_json(self, runner, tmp_path, empty_config):
        env_path = tmp_path / "bad.env"
        env_path.write_text('API_URL="http://api.example.com"\n', encoding="utf-8")

        result = runner.invoke(app, [
            "validate", str(env_path), "--config", str(empty_config), "-f", "json"
        ])

        assert result.exit_code == 1
        data = _json_output(result)
        assert data["violation"]["key"] == "API_URL"
        assert data["violation"]["policy"] == "URLValidationPlugin"
        assert "must be one of [https]" in data["violation"]["reason"]

    def test_markdown_format(self, runner, env_file, empty_config):
        result = runner.invoke(app, [
            "validate", str(env_file), "--config", str(empty_config), "-f", "markdown"
        ])

        assert result.exit_code == 0
        assert "# Validation Report" in result.stdout
        assert "**Status:** pass" in result.stdout

    def test_require_quotes(self, runner, tmp_path, empty_config):
        env_path = tmp_path / "unquoted.env"
        env_path.write_text("DB_HOST=localhost\n", encoding="utf-8")

        result = runner.invoke(app, [
            "validate", str(env_path), "--require-quotes", "--config", str(empty_config), "-f", "json"
        ])

        assert result.exit_code == 1
        assert _json_output(result)["violation"]["policy"] == "QuotedValueValidationPlugin"

    def test_config_policies_applied(self, runner, tmp_path):
        config_path = tmp_path / "envgate.json"
        config_path.write_text(json.dumps({
            "requiredKeys": ["CACHE_SIZE"],
            "policies": [{"kind": "range", "key": "CACHE_SIZE", "minimum": 128, "maximum": 1024}],
        }), encoding="utf-8")
        env_path = tmp_path / ".env"
        env_path.write_text("CACHE_SIZE=64\n", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(env_path), "-c", str(config_path), "-f", "json"])

        assert result.exit_code == 1
        assert _json_output(result)["violation"]["reason"] == "CACHE_SIZE must be between 128 and 1024"

    def test_invalid_format(self, runner, env_file):
        result = runner.invoke(app, ["validate", str(env_file), "--format", "xml"])

        assert result.exit_code == 1
        assert "Invalid format 'xml'" in result.stdout

    def test_missing_file(self, runner, tmp_path, empty_config):
        result = runner.invoke(app, [
            "validate", str(tmp_path / "nope.env"), "--config", str(empty_config)
        ])

        assert result.exit_code == 1
        assert "Error:" in result.stdout

    def test_invalid_config(self, runner, env_file, tmp_path):
        config_path = tmp_path / "broken.json"
        config_path.write_text("{ nope", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(env_file), "-c", str(config_path)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.stdout

    def test_missing_config_file(self, runner, env_file, tmp_path):
        result = runner.invoke(app, [
            "validate", str(env_file), "--config", str(tmp_path / "typo.json")
        ])

        assert result.exit_code == 1
        assert "Config file not found" in result.stdout
        assert "Validation Status" not in result.stdout

    def test_bracketed_key_names_printed_literally(self, runner, env_file, empty_config):
        result = runner.invoke(app, [
            "validate", str(env_file), "-k", "DB[0]", "-k", "CACHE[size]", "--config", str(empty_config)
        ])

        assert result.exit_code == 1
        assert "DB[0]" in result.stdout
        assert "CACHE[size]" in result.stdout

    def test_bracketed_key_names_in_markdown(self, runner, env_file, empty_config):
        result = runner.invoke(app, [
            "validate", str(env_file), "-k", "DB[0]", "--config", str(empty_config), "-f", "markdown"
        ])

        assert result.exit_code == 1
        assert "- DB[0]" in result.stdout


class TestPoliciesCLI:
    """Test the policies command."""

    def test_lists_built_ins(self, runner, empty_config):
        result = runner.invoke(app, ["policies", "--config", str(empty_config)])

        assert result.exit_code == 0
        assert "URLValidationPlugin" in result.stdout
        assert "TRUSTED_PROXY_IP" in result.stdout

    def test_lists_config_policies(self, runner, tmp_path):
        config_path = tmp_path / "envgate.json"
        config_path.write_text(json.dumps({
            "policies": [{"kind": "range", "key": "CACHE_SIZE", "maximum": 1024}],
        }), encoding="utf-8")

        result = runner.invoke(app, ["policies", "-c", str(config_path)])

        assert result.exit_code == 0
        assert "CACHE_SIZE" in result.stdout

    def test_missing_config_file(self, runner, tmp_path):
        result = runner.invoke(app, ["policies", "-c", str(tmp_path / "typo.json")])

        assert result.exit_code == 1
        assert "Config file not found" in result.stdout


def test_version(runner):
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout
