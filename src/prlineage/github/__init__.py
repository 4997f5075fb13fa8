"""GitHub client - pull request, commit and merge-state lookups."""

from prlineage.github.client import DEFAULT_PAGE_SIZE, GitHubClient
from prlineage.github.exceptions import (
    GitHubAPIError,
    GitHubAuthError,
    GitHubError,
    PullRequestNotFoundError,
    RepositoryNotFoundError,
)
from prlineage.github.models import Commit, PullRequest

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Commit",
    "GitHubAPIError",
    "GitHubAuthError",
    "GitHubClient",
    "GitHubError",
    "PullRequest",
    "PullRequestNotFoundError",
    "RepositoryNotFoundError",
]
