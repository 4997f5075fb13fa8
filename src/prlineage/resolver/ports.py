"""Interfaces the resolvers consume from the issue tracker and the code host."""

from __future__ import annotations

from typing import Protocol

from prlineage.github.models import Commit, PullRequest
from prlineage.jira.models import Ticket


class IssueTrackerPort(Protocol):
    """Issue tracker operations used to walk a ticket hierarchy."""

    async def get_issue(self, key: str, expand_comments: bool = True) -> Ticket: ...

    async def search_issues(self, jql: str, expand: str | None = None) -> list[Ticket]: ...


class CodeHostPort(Protocol):
    """Code host operations used to follow a pull request downstream.

    `list_pull_requests_with_commit` must raise a NotFoundError when the
    repository itself does not exist.
    """

    async def get_pull_request(self, org: str, repo: str, number: int) -> PullRequest: ...

    async def is_merged(self, org: str, repo: str, number: int) -> bool: ...

    async def list_commits(self, org: str, repo: str, number: int) -> list[Commit]: ...

    async def list_pull_requests_with_commit(
        self, org: str, repo: str, sha: str
    ) -> list[PullRequest]: ...

    async def list_pull_requests(
        self, org: str, repo: str, state: str = "all"
    ) -> list[PullRequest]: ...
