"""Settings loading for pr-lineage.

Settings come from an optional YAML file and are overridden by command line
options or environment variables.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_DOWNSTREAM_ORG = "openshift"
DEFAULT_GITHUB_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class JiraSettings:
    """Jira server and basic-auth credentials."""

    url: str = ""
    user: str = ""
    password: str = ""


@dataclass
class GitHubSettings:
    """GitHub API endpoint and token."""

    token: str = ""
    url: str = DEFAULT_GITHUB_URL


@dataclass
class Settings:
    """Complete runtime settings.

    Attributes:
        jira: Jira connection settings.
        github: GitHub connection settings.
        downstream_org: Organization searched for mirrored pull requests.
        timeout: Per-request timeout in seconds.
        max_connections: Cap on simultaneous connections per client.
            None leaves outbound concurrency unbounded.
    """

    jira: JiraSettings = field(default_factory=JiraSettings)
    github: GitHubSettings = field(default_factory=GitHubSettings)
    downstream_org: str = DEFAULT_DOWNSTREAM_ORG
    timeout: float = DEFAULT_TIMEOUT
    max_connections: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a parsed YAML mapping.

        Args:
            data: Settings dictionary from YAML.

        Returns:
            Parsed settings. Missing values keep their defaults; call
            validate() once overrides are applied.

        Raises:
            ConfigError: If a section or value has the wrong type.
        """
        jira_data = _section(data, "jira")
        github_data = _section(data, "github")

        jira = JiraSettings(
            url=str(jira_data.get("url") or ""),
            user=str(jira_data.get("user") or ""),
            password=str(jira_data.get("password") or ""),
        )
        github = GitHubSettings(
            token=str(github_data.get("token") or ""),
            url=str(github_data.get("url") or DEFAULT_GITHUB_URL),
        )

        try:
            timeout = float(data.get("timeout", DEFAULT_TIMEOUT))
            max_connections = data.get("maxConnections")
            if max_connections is not None:
                max_connections = int(max_connections)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        return cls(
            jira=jira,
            github=github,
            downstream_org=str(data.get("downstreamOrg", DEFAULT_DOWNSTREAM_ORG) or ""),
            timeout=timeout,
            max_connections=max_connections,
        )

    def with_overrides(
        self,
        jira_url: str | None = None,
        jira_user: str | None = None,
        jira_password: str | None = None,
        github_token: str | None = None,
        downstream_org: str | None = None,
        timeout: float | None = None,
        max_connections: int | None = None,
    ) -> Settings:
        """Return a copy with every non-None argument applied."""
        jira = dataclasses.replace(
            self.jira,
            url=jira_url or self.jira.url,
            user=jira_user or self.jira.user,
            password=jira_password or self.jira.password,
        )
        github = dataclasses.replace(self.github, token=github_token or self.github.token)
        return dataclasses.replace(
            self,
            jira=jira,
            github=github,
            downstream_org=downstream_org or self.downstream_org,
            timeout=timeout if timeout is not None else self.timeout,
            max_connections=(
                max_connections if max_connections is not None else self.max_connections
            ),
        )

    def validate(self) -> None:
        """Check that every required setting is present.

        Raises:
            ConfigError: Naming all missing settings.
        """
        required = {
            "jira.url": self.jira.url,
            "jira.user": self.jira.user,
            "jira.password": self.jira.password,
            "github.token": self.github.token,
            "downstreamOrg": self.downstream_org,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.max_connections is not None and self.max_connections < 1:
            raise ConfigError(f"maxConnections must be at least 1, got {self.max_connections}")


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_settings(config_path: Path | str) -> Settings:
    """Load settings from a YAML file.

    Args:
        config_path: Path to the settings file.

    Returns:
        Parsed settings (not yet validated).

    Raises:
        ConfigError: If file doesn't exist or is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Settings file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Settings must be a YAML mapping, got {type(data).__name__}")

    return Settings.from_dict(data)
