"""CLI entry point for pr-lineage.

Resolves the given Jira tickets into a tree of linked pull requests and their
downstream mirrors and prints it to stdout.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import click

from prlineage.config import ConfigError, Settings, load_settings
from prlineage.exceptions import AuthError, LineageError
from prlineage.github import GitHubClient
from prlineage.jira import JiraClient
from prlineage.logging import setup_logging
from prlineage.render import ResultRenderer
from prlineage.resolver import resolve_lineage

logger = logging.getLogger(__name__)


async def run(settings: Settings, keys: Sequence[str], show_errors: bool = False) -> str:
    """Resolve the root tickets and return the rendered tree.

    Both clients are constructed before any request is made, so credential
    problems surface as AuthError before resolution begins.
    """
    tracker = JiraClient(
        settings.jira.url,
        settings.jira.user,
        settings.jira.password,
        timeout=settings.timeout,
        max_connections=settings.max_connections,
    )
    code_host = GitHubClient(
        settings.github.token,
        base_url=settings.github.url,
        timeout=settings.timeout,
        max_connections=settings.max_connections,
    )
    async with tracker, code_host:
        issues, failures = await resolve_lineage(
            keys, tracker, code_host, settings.downstream_org
        )

    logger.debug("Resolved %d of %d root issue(s)", len(issues), len(issues) + len(failures))
    renderer = ResultRenderer(settings.downstream_org, settings.jira.url, show_errors=show_errors)
    return renderer.render(issues, failures)


@click.command()
@click.version_option(package_name="pr-lineage")
@click.argument("keys", nargs=-1, required=True)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="PR_LINEAGE_CONFIG",
    help="Path to a YAML settings file",
)
@click.option("--jira-url", envvar="JIRA_URL", help="The Jira server URL")
@click.option("--jira-user", envvar="JIRA_USER", help="The Jira username")
@click.option("--jira-password", envvar="JIRA_PASSWORD", help="The Jira password")
@click.option("--github-token", envvar="GITHUB_TOKEN", help="The GitHub API token")
@click.option(
    "--downstream-org",
    default=None,
    help="The downstream GitHub organization (default: openshift)",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-request timeout in seconds (default: 30)",
)
@click.option(
    "--max-connections",
    type=click.IntRange(min=1),
    default=None,
    help="Limit simultaneous connections per API (default: unlimited)",
)
@click.option("--show-errors", is_flag=True, help="Show failed lookups in the tree")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def main(
    keys: tuple[str, ...],
    config_path: Path | None,
    jira_url: str | None,
    jira_user: str | None,
    jira_password: str | None,
    github_token: str | None,
    downstream_org: str | None,
    timeout: float | None,
    max_connections: int | None,
    show_errors: bool,
    verbose: bool,
) -> None:
    """Show the pull requests linked from Jira tickets and their downstream mirrors.

    KEYS are Jira ticket keys, e.g. PROJ-1. Epics, Features and Stories are
    expanded into their child tickets.
    """
    setup_logging(verbose=verbose)

    try:
        settings = load_settings(config_path) if config_path else Settings()
        settings = settings.with_overrides(
            jira_url=jira_url,
            jira_user=jira_user,
            jira_password=jira_password,
            github_token=github_token,
            downstream_org=downstream_org,
            timeout=timeout,
            max_connections=max_connections,
        )
        settings.validate()
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    try:
        output = asyncio.run(run(settings, keys, show_errors=show_errors))
    except AuthError as e:
        click.echo(f"Could not create client: {e}", err=True)
        sys.exit(1)
    except LineageError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(output)


if __name__ == "__main__":
    main()
