"""JiraClient - Interfaces with the Jira REST API for ticket lookups."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from prlineage.jira.exceptions import JiraAPIError, JiraAuthError, TicketNotFoundError
from prlineage.jira.models import Ticket
from prlineage.logging import truncate_output

logger = logging.getLogger(__name__)

_TICKET_FIELDS = ["summary", "description", "issuetype", "status", "subtasks", "fixVersions"]

T = TypeVar("T")


class JiraClient:
    """Async client for the Jira REST API (v2) using basic auth."""

    def __init__(
        self,
        url: str,
        user: str,
        password: str,
        timeout: float = 30.0,
        max_connections: int | None = None,
        page_size: int = 50,
    ) -> None:
        """Initialize Jira client.

        Args:
            url: Jira server URL, e.g. https://issues.example.com
            user: Username for basic auth
            password: Password or API token for basic auth
            timeout: Per-request timeout in seconds
            max_connections: Cap on simultaneous connections (None = unbounded)
            page_size: Issues requested per search page

        Raises:
            JiraAuthError: If the URL or credentials are missing
        """
        if not url:
            raise JiraAuthError("A Jira server URL is required")
        if not user or not password:
            raise JiraAuthError("Both a Jira user and password are required")
        self.url = url.rstrip("/")
        self.user = user
        self.password = password
        self.timeout = timeout
        self.max_connections = max_connections
        self.page_size = page_size
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for the Jira API."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.url,
                auth=(self.user, self.password),
                headers={"Accept": "application/json"},
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

    async def __aenter__(self) -> JiraClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _get(self, path: str, params: dict[str, Any], what: str) -> httpx.Response:
        """GET a resource, mapping failures to Jira errors.

        Raises:
            JiraAuthError: On 401
            TicketNotFoundError: On 404
            JiraAPIError: On any other failure
        """
        try:
            response = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise JiraAPIError(f"Request for {what} failed: {e!r}") from e

        if response.is_success:
            return response

        message = f"Failed to get {what}: {response.status_code} - {truncate_output(response.text)}"
        if response.status_code == 401:
            raise JiraAuthError(message)
        if response.status_code == 404:
            raise TicketNotFoundError(message)
        raise JiraAPIError(message)

    def _parse(self, response: httpx.Response, what: str, build: Callable[[Any], T]) -> T:
        """Decode a response body with `build`, mapping malformed payloads to JiraAPIError."""
        try:
            return build(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise JiraAPIError(f"Malformed response for {what}: {e!r}") from e

    async def get_issue(self, key: str, expand_comments: bool = True) -> Ticket:
        """Get ticket details by key.

        Args:
            key: Ticket key, e.g. "PROJ-1"
            expand_comments: Include comment bodies

        Returns:
            Ticket snapshot

        Raises:
            TicketNotFoundError: If ticket doesn't exist
        """
        fields = list(_TICKET_FIELDS)
        if expand_comments:
            fields.append("comment")
        what = f"issue {key}"
        response = await self._get(
            f"/rest/api/2/issue/{key}", {"fields": ",".join(fields)}, what
        )
        return self._parse(response, what, Ticket.from_api)

    async def search_issues(self, jql: str, expand: str | None = None) -> list[Ticket]:
        """Run a JQL query and return every matching ticket in result order.

        Args:
            jql: Query, e.g. '"Epic Link" = PROJ-1'
            expand: Optional Jira expand parameter

        Returns:
            List of matching tickets
        """
        logger.debug("Searching for issues: %s", jql)
        what = f"search {jql!r}"
        params: dict[str, Any] = {
            "jql": jql,
            "fields": ",".join(_TICKET_FIELDS),
            "maxResults": self.page_size,
        }
        if expand:
            params["expand"] = expand

        tickets: list[Ticket] = []
        start_at = 0
        while True:
            params["startAt"] = start_at
            response = await self._get("/rest/api/2/search", params, what)
            page, total = self._parse(response, what, _search_page)
            tickets.extend(page)
            start_at += len(page)
            if not page or start_at >= total:
                break
        return tickets


def _search_page(data: dict[str, Any]) -> tuple[list[Ticket], int]:
    """Tickets of one search result page and the total hit count."""
    issues = data.get("issues") or []
    return [Ticket.from_api(issue) for issue in issues], int(data.get("total", 0))
