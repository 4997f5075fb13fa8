"""Custom exceptions for the GitHub client."""

from prlineage.exceptions import AuthError, LineageError, NotFoundError, TransientAPIError


class GitHubError(LineageError):
    """Base exception for GitHub client errors."""


class GitHubAuthError(GitHubError, AuthError):
    """Missing token or credentials rejected by GitHub."""


class RepositoryNotFoundError(GitHubError, NotFoundError):
    """Repository does not exist (e.g. no downstream fork)."""


class PullRequestNotFoundError(GitHubError, NotFoundError):
    """Pull request with given number does not exist."""


class GitHubAPIError(GitHubError, TransientAPIError):
    """Request failed: network error, timeout, rate limit or server error."""
