"""Unit tests for settings loading."""

from pathlib import Path
from textwrap import dedent

import pytest

from prlineage.config import ConfigError, Settings, load_settings


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """Create a temporary settings file."""
    content = dedent("""
        jira:
          url: https://issues.example.com
          user: someone
          password: secret
        github:
          token: gh-token
        downstreamOrg: downstream
        timeout: 12
        maxConnections: 8
    """).strip()

    path = tmp_path / "settings.yaml"
    path.write_text(content)
    return path


@pytest.mark.unit
class TestLoadSettings:
    """Tests for load_settings."""

    def test_load_valid_settings(self, settings_file: Path) -> None:
        settings = load_settings(settings_file)

        assert settings.jira.url == "https://issues.example.com"
        assert settings.jira.user == "someone"
        assert settings.jira.password == "secret"
        assert settings.github.token == "gh-token"
        assert settings.github.url == "https://api.github.com"
        assert settings.downstream_org == "downstream"
        assert settings.timeout == 12.0
        assert settings.max_connections == 8
        settings.validate()

    def test_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("")

        settings = load_settings(path)

        assert settings.downstream_org == "openshift"
        assert settings.timeout == 30.0
        assert settings.max_connections is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("jira: [unclosed")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)

    def test_bad_section(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("jira: just-a-string\n")

        with pytest.raises(ConfigError, match="'jira'"):
            load_settings(path)


@pytest.mark.unit
class TestOverridesAndValidation:
    """Tests for with_overrides and validate."""

    def test_overrides_replace_file_values(self, settings_file: Path) -> None:
        settings = load_settings(settings_file).with_overrides(
            jira_user="other", github_token="cli-token", downstream_org="mirror"
        )

        assert settings.jira.user == "other"
        assert settings.jira.password == "secret"
        assert settings.github.token == "cli-token"
        assert settings.downstream_org == "mirror"

    def test_none_keeps_existing_values(self, settings_file: Path) -> None:
        original = load_settings(settings_file)

        assert original.with_overrides() == original

    def test_validate_lists_all_missing(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Settings().with_overrides(jira_url="https://issues.example.com").validate()

        message = str(exc_info.value)
        assert "jira.user" in message
        assert "jira.password" in message
        assert "github.token" in message
        assert "jira.url" not in message

    def test_empty_downstream_org_is_reported(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("downstreamOrg: \"\"\n")
        settings = load_settings(path).with_overrides(
            jira_url="https://issues.example.com",
            jira_user="someone",
            jira_password="secret",
            github_token="gh-token",
        )

        with pytest.raises(ConfigError, match="downstreamOrg"):
            settings.validate()

    def test_validate_rejects_zero_connections(self, settings_file: Path) -> None:
        settings = load_settings(settings_file)
        settings.max_connections = 0

        with pytest.raises(ConfigError, match="maxConnections"):
            settings.validate()
