"""GitHubClient - REST API access for pull request lineage lookups."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from prlineage.github.exceptions import (
    GitHubAPIError,
    GitHubAuthError,
    GitHubError,
    PullRequestNotFoundError,
    RepositoryNotFoundError,
)
from prlineage.github.models import Commit, PullRequest
from prlineage.logging import truncate_output

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50

T = TypeVar("T")


class GitHubClient:
    """Async client for the GitHub REST API.

    Only the read-only endpoints needed to follow a pull request to its
    downstream mirrors are implemented. List endpoints follow the
    `Link: rel="next"` header until every page has been read.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        max_connections: int | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        """Initialize GitHub client.

        Args:
            token: GitHub personal access token
            base_url: GitHub API base URL (for testing/enterprise)
            timeout: Per-request timeout in seconds
            max_connections: Cap on simultaneous connections (None = unbounded)
            page_size: Items requested per page on list endpoints

        Raises:
            GitHubAuthError: If no token is given
        """
        if not token:
            raise GitHubAuthError("A GitHub API token is required")
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_connections = max_connections
        self.page_size = page_size
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for GitHub API."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=self.timeout,
                limits=httpx.Limits(
                    max_connections=self.max_connections,
                    max_keepalive_connections=self.max_connections,
                ),
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """Issue a GET request, mapping transport failures to GitHubAPIError."""
        try:
            return await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"Request to {url} failed: {e!r}") from e

    def _check(
        self,
        response: httpx.Response,
        what: str,
        not_found: type[GitHubError] | None = None,
    ) -> None:
        """Raise the error matching a non-2xx response.

        Args:
            response: Response to check
            what: Human readable description of the request, used in messages
            not_found: Error raised for 404 (GitHubAPIError when None)
        """
        if response.is_success:
            return
        message = (
            f"Failed to get {what}: {response.status_code} - {truncate_output(response.text)}"
        )
        if response.status_code == 401:
            raise GitHubAuthError(message)
        if response.status_code == 404 and not_found is not None:
            raise not_found(message)
        raise GitHubAPIError(message)

    def _parse(self, response: httpx.Response, what: str, build: Callable[[Any], T]) -> T:
        """Decode a response body with `build`.

        Raises:
            GitHubAPIError: If the body isn't JSON or lacks expected fields
        """
        try:
            return build(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise GitHubAPIError(f"Malformed response for {what}: {e!r}") from e

    def _parse_page(
        self, response: httpx.Response, what: str, parse: Callable[[Any], T]
    ) -> list[T]:
        def build(data: Any) -> list[T]:
            if not isinstance(data, list):
                raise TypeError(f"expected a JSON list, got {type(data).__name__}")
            return [parse(item) for item in data]

        return self._parse(response, what, build)

    async def _paginate(
        self,
        url: str,
        what: str,
        parse: Callable[[Any], T],
        params: dict[str, Any] | None = None,
        not_found: type[GitHubError] | None = None,
    ) -> list[T]:
        """Collect every item of a paginated list endpoint."""
        response = await self._get(url, params={**(params or {}), "per_page": self.page_size})
        self._check(response, what, not_found)
        return await self._follow(response, what, parse, not_found)

    async def _follow(
        self,
        response: httpx.Response,
        what: str,
        parse: Callable[[Any], T],
        not_found: type[GitHubError] | None = None,
    ) -> list[T]:
        """Return the items of a first page plus every page linked after it."""
        items = self._parse_page(response, what, parse)
        next_url = response.links.get("next", {}).get("url")
        while next_url is not None:
            # The next link already carries the query string
            response = await self._get(next_url)
            self._check(response, what, not_found)
            items.extend(self._parse_page(response, what, parse))
            next_url = response.links.get("next", {}).get("url")
        return items

    async def get_pull_request(self, org: str, repo: str, number: int) -> PullRequest:
        """Fetch a single pull request.

        Raises:
            PullRequestNotFoundError: If the pull request doesn't exist
            GitHubAPIError: If the request fails
        """
        what = f"pull request {org}/{repo}#{number}"
        response = await self._get(f"/repos/{org}/{repo}/pulls/{number}")
        self._check(response, what, PullRequestNotFoundError)
        return self._parse(response, what, PullRequest.from_api)

    async def is_merged(self, org: str, repo: str, number: int) -> bool:
        """Check whether a pull request has been merged.

        GitHub answers 204 for merged and 404 for not merged.
        """
        response = await self._get(f"/repos/{org}/{repo}/pulls/{number}/merge")
        if response.status_code == 204:
            return True
        if response.status_code == 404:
            return False
        self._check(response, f"merge status of {org}/{repo}#{number}")
        return False

    async def list_commits(self, org: str, repo: str, number: int) -> list[Commit]:
        """List all commits on a pull request."""
        return await self._paginate(
            f"/repos/{org}/{repo}/pulls/{number}/commits",
            f"commits of {org}/{repo}#{number}",
            Commit.from_api,
            not_found=PullRequestNotFoundError,
        )

    async def list_pull_requests_with_commit(
        self, org: str, repo: str, sha: str
    ) -> list[PullRequest]:
        """List pull requests in a repository that contain a commit.

        Raises:
            RepositoryNotFoundError: If the repository doesn't exist
            GitHubAPIError: If the request fails
        """
        what = f"pull requests containing {sha} in {org}/{repo}"
        response = await self._get(
            f"/repos/{org}/{repo}/commits/{sha}/pulls", params={"per_page": self.page_size}
        )
        if response.status_code == 422:
            # The commit is unknown to this repository
            logger.debug("Commit %s not found in %s/%s", sha, org, repo)
            return []
        self._check(response, what, RepositoryNotFoundError)
        return await self._follow(
            response, what, PullRequest.from_api, not_found=RepositoryNotFoundError
        )

    async def list_pull_requests(
        self, org: str, repo: str, state: str = "all"
    ) -> list[PullRequest]:
        """List every pull request in a repository.

        Raises:
            RepositoryNotFoundError: If the repository doesn't exist
            GitHubAPIError: If the request fails
        """
        return await self._paginate(
            f"/repos/{org}/{repo}/pulls",
            f"pull requests for {org}/{repo}",
            PullRequest.from_api,
            params={"state": state},
            not_found=RepositoryNotFoundError,
        )
