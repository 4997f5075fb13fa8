"""In-memory issue tracker and code host for resolver tests."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Iterable

import pytest

from prlineage.github import Commit, PullRequest, PullRequestNotFoundError, RepositoryNotFoundError
from prlineage.jira import Ticket, TicketNotFoundError
from prlineage.resolver import IssueTreeResolver, LinkResolver, RepoPullCache

DOWNSTREAM = "down"


def pr_url(org: str, repo: str, number: int) -> str:
    return f"https://github.com/{org}/{repo}/pull/{number}"


class FakeCodeHost:
    """Code host backed by dictionaries, with per-URL delays and failures."""

    def __init__(self) -> None:
        self.pulls: dict[tuple[str, str, int], PullRequest] = {}
        self.merged: set[tuple[str, str, int]] = set()
        self.commits: dict[tuple[str, str, int], list[Commit]] = {}
        self.with_commit: dict[tuple[str, str, str], list[PullRequest]] = {}
        self.missing_repos: set[tuple[str, str]] = set()
        self.delays: dict[str, float] = {}
        self.errors: dict[str, Exception] = {}
        self.fetches: Counter[str] = Counter()
        self.listings: Counter[tuple[str, str]] = Counter()
        self.commit_searches: list[tuple[str, str, str]] = []

    def add_pull(
        self,
        org: str,
        repo: str,
        number: int,
        state: str = "open",
        merged: bool = False,
        commits: Iterable[Commit] = (),
        title: str | None = None,
    ) -> PullRequest:
        pull = PullRequest(
            number=number,
            html_url=pr_url(org, repo, number),
            title=title or f"PR {number}",
            state=state,
            base_ref="main",
            org=org,
            repo=repo,
        )
        self.pulls[(org, repo, number)] = pull
        self.commits[(org, repo, number)] = list(commits)
        if merged:
            self.merged.add((org, repo, number))
        return pull

    def mirror(self, pull: PullRequest, *shas: str) -> None:
        """Report `pull` as containing each of `shas` in its repository."""
        for sha in shas:
            self.with_commit.setdefault((pull.org, pull.repo, sha), []).append(pull)

    async def get_pull_request(self, org: str, repo: str, number: int) -> PullRequest:
        url = pr_url(org, repo, number)
        self.fetches[url] += 1
        await asyncio.sleep(self.delays.get(url, 0))
        if url in self.errors:
            raise self.errors[url]
        try:
            return self.pulls[(org, repo, number)]
        except KeyError:
            raise PullRequestNotFoundError(f"no pull request {url}") from None

    async def is_merged(self, org: str, repo: str, number: int) -> bool:
        await asyncio.sleep(0)
        return (org, repo, number) in self.merged

    async def list_commits(self, org: str, repo: str, number: int) -> list[Commit]:
        await asyncio.sleep(0)
        return list(self.commits.get((org, repo, number), []))

    async def list_pull_requests_with_commit(
        self, org: str, repo: str, sha: str
    ) -> list[PullRequest]:
        self.commit_searches.append((org, repo, sha))
        await asyncio.sleep(0)
        if (org, repo) in self.missing_repos:
            raise RepositoryNotFoundError(f"no repository {org}/{repo}")
        return list(self.with_commit.get((org, repo, sha), []))

    async def list_pull_requests(
        self, org: str, repo: str, state: str = "all"
    ) -> list[PullRequest]:
        self.listings[(org, repo)] += 1
        await asyncio.sleep(0.01)
        if (org, repo) in self.missing_repos:
            raise RepositoryNotFoundError(f"no repository {org}/{repo}")
        return [pull for (o, r, _), pull in self.pulls.items() if (o, r) == (org, repo)]


class FakeTracker:
    """Issue tracker backed by dictionaries."""

    def __init__(self) -> None:
        self.tickets: dict[str, Ticket] = {}
        self.search_results: dict[str, list[str]] = {}
        self.errors: dict[str, Exception] = {}
        self.queries: list[str] = []
        self.fetches: Counter[str] = Counter()

    def add(
        self,
        key: str,
        type: str = "Task",
        description: str = "",
        comments: Iterable[str] = (),
        subtasks: Iterable[str] = (),
    ) -> Ticket:
        ticket = Ticket(
            key=key,
            type=type,
            status="New",
            summary=f"Summary of {key}",
            description=description,
            comments=list(comments),
            subtasks=list(subtasks),
        )
        self.tickets[key] = ticket
        return ticket

    async def get_issue(self, key: str, expand_comments: bool = True) -> Ticket:
        self.fetches[key] += 1
        await asyncio.sleep(0)
        if key in self.errors:
            raise self.errors[key]
        try:
            return self.tickets[key]
        except KeyError:
            raise TicketNotFoundError(f"no issue {key}") from None

    async def search_issues(self, jql: str, expand: str | None = None) -> list[Ticket]:
        self.queries.append(jql)
        await asyncio.sleep(0)
        if jql in self.errors:
            raise self.errors[jql]
        return [self.tickets[key] for key in self.search_results.get(jql, [])]


@pytest.fixture
def code_host() -> FakeCodeHost:
    return FakeCodeHost()


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker()


@pytest.fixture
def cache(code_host: FakeCodeHost) -> RepoPullCache:
    return RepoPullCache(code_host)


@pytest.fixture
def link_resolver(code_host: FakeCodeHost, cache: RepoPullCache) -> LinkResolver:
    return LinkResolver(code_host, cache, DOWNSTREAM)


@pytest.fixture
def issue_resolver(tracker: FakeTracker, link_resolver: LinkResolver) -> IssueTreeResolver:
    return IssueTreeResolver(tracker, link_resolver)
