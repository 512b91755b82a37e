"""Unit tests for config_template module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from src.accounts.runtime.config.config_template import (
    load_templated_yaml,
    promote_environment_variables,
    substitute_env_vars,
)


class TestSubstituteEnvVars:
    """Test cases for substitute_env_vars function."""

    def test_substitute_simple_env_var(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert substitute_env_vars("${TEST_VAR}") == "test_value"

    def test_substitute_env_var_with_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-default_value}") == "default_value"

    def test_substitute_env_var_with_empty_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-}") == ""

    def test_substitute_required_env_var_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Required environment variable MISSING_VAR not set"):
                substitute_env_vars("${MISSING_VAR}")

    def test_substitute_env_var_with_custom_error(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="MISSING_VAR: needed for refresh"):
                substitute_env_vars("${MISSING_VAR:?needed for refresh}")

    def test_websocket_template_left_alone(self):
        """Plain ``{token}`` placeholders are not environment references."""
        text = "wss://chat.test/ws?accessToken={token}"
        assert substitute_env_vars(text) == text


class TestPromoteEnvironmentVariables:
    def test_prefixed_variables_win(self):
        with patch.dict(os.environ, {"TEST_DATABASE_URL": "sqlite:///test.db"}, clear=True):
            promote_environment_variables("test")

            assert os.environ["DATABASE_URL"] == "sqlite:///test.db"


class TestLoadTemplatedYaml:
    """Test loading config.yaml files."""

    def _write(self, tmp_path: Path, content: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(content)
        return path

    def test_load_full_config(self, tmp_path: Path):
        path = self._write(
            tmp_path,
            """
config:
  database:
    url: ${DB_URL:-sqlite:///./other.db}
  providers:
    google:
      token_endpoint: https://oauth.test/token
      client_id: "${GOOGLE_CLIENT_ID:-}"
  accounts:
    admin_emails: "${ADMIN_EMAILS:-}"
""",
        )
        with patch.dict(
            os.environ,
            {"ADMIN_EMAILS": "a@example.com, b@example.com", "GOOGLE_CLIENT_ID": "cid"},
            clear=True,
        ):
            config = load_templated_yaml(path)

        assert config.database.url == "sqlite:///./other.db"
        assert config.providers["google"].client_id == "cid"
        assert set(config.providers) == {"google"}
        assert config.accounts.admin_emails == ["a@example.com", "b@example.com"]

    def test_empty_admin_list(self, tmp_path: Path):
        path = self._write(tmp_path, 'config:\n  accounts:\n    admin_emails: "${ADMIN_EMAILS:-}"\n')
        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(path)

        assert config.accounts.admin_emails == []

    def test_disabled_providers_dropped(self, tmp_path: Path):
        path = self._write(
            tmp_path,
            """
config:
  providers:
    google:
      token_endpoint: https://oauth.test/token
    restream:
      token_endpoint: https://oauth.test/rs
      enabled: false
""",
        )
        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(path)

        assert set(config.providers) == {"google"}

    def test_invalid_config_rejected(self, tmp_path: Path):
        path = self._write(tmp_path, "config:\n  accounts:\n    stream_key_bytes: 16\n")
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Invalid configuration"):
                load_templated_yaml(path)

    def test_empty_file_rejected(self, tmp_path: Path):
        path = self._write(tmp_path, "")
        with pytest.raises(ValueError, match="Failed to parse YAML"):
            load_templated_yaml(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_templated_yaml(tmp_path / "missing.yaml")
