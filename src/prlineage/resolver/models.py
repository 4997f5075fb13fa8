"""Data models for the lineage resolvers."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from prlineage.exceptions import ParseError, ResolutionError
from prlineage.github.models import Commit, PullRequest
from prlineage.jira.models import Ticket

PULL_REQUEST_URL_PATTERN = re.compile(
    r"https://github\.com/(?P<org>[^/\s]+)/(?P<repo>[^/\s]+)/pull/(?P<id>\d+)"
)


class PullRequestStatus(str, Enum):
    """Resolved pull request status."""

    OPEN = "OPEN"
    CLOSED = "closed"
    MERGED = "merged"

    @classmethod
    def from_state(cls, state: str, merged: bool) -> PullRequestStatus:
        """Combine GitHub's open/closed state with the merge check."""
        if merged:
            return cls.MERGED
        if state == "open":
            return cls.OPEN
        return cls.CLOSED


@dataclass(frozen=True)
class PullRequestRef:
    """Organization, repository and number of a pull request."""

    org: str
    repo: str
    number: int

    @classmethod
    def parse(cls, url: str) -> PullRequestRef:
        """Parse a https://github.com/{org}/{repo}/pull/{id} URL.

        Raises:
            ParseError: If the URL doesn't match or the id isn't positive.
        """
        match = PULL_REQUEST_URL_PATTERN.fullmatch(url.strip())
        if match is None:
            raise ParseError(f"could not parse pull request URL {url!r}")
        number = int(match["id"])
        if number <= 0:
            raise ParseError(f"pull request id in {url!r} must be positive")
        return cls(org=match["org"], repo=match["repo"], number=number)

    @property
    def url(self) -> str:
        return f"https://github.com/{self.org}/{self.repo}/pull/{self.number}"


def find_pull_request_urls(text: str) -> list[str]:
    """Return every pull request URL in text, in order of appearance."""
    return [match.group(0) for match in PULL_REQUEST_URL_PATTERN.finditer(text or "")]


def unique(items: Iterable[str]) -> list[str]:
    """Drop duplicates, keeping first-seen order."""
    return list(dict.fromkeys(items))


@dataclass
class LinkNode:
    """A resolved pull request and the downstream mirrors found for it.

    Attributes:
        url: The URL the pull request was requested by.
        ref: Parsed organization, repository and number.
        status: Merge/close status.
        title: Pull request title.
        base_ref: Branch the pull request targets.
        children: Resolved downstream mirrors, in discovery order.
        failures: Mirrors that were found but could not be resolved.
    """

    url: str
    ref: PullRequestRef
    status: PullRequestStatus
    title: str = ""
    base_ref: str = ""
    children: list[LinkNode] = field(default_factory=list)
    failures: list[ResolutionError] = field(default_factory=list)

    def describe(self) -> str:
        return f'on {self.base_ref} {self.status.value}: {self.url} "{self.title}"'


@dataclass
class IssueNode:
    """A resolved ticket with its linked pull requests and child tickets."""

    ticket: Ticket
    links: list[LinkNode] = field(default_factory=list)
    children: list[IssueNode] = field(default_factory=list)
    link_failures: list[ResolutionError] = field(default_factory=list)
    child_failures: list[ResolutionError] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.ticket.key


@dataclass
class CacheEntry:
    """Every pull request of one repository with its commits."""

    org: str
    repo: str
    pull_requests: list[PullRequest] = field(default_factory=list)
    commits: dict[int, list[Commit]] = field(default_factory=dict)

    def pull_requests_referencing(self, sha: str) -> list[PullRequest]:
        """Pull requests with a commit message mentioning `sha`.

        Cherry-picks created with `git cherry-pick -x` record the original
        hash in the message, so this finds mirrors with rewritten SHAs.
        """
        return [
            pull
            for pull in self.pull_requests
            if any(sha in commit.message for commit in self.commits.get(pull.number, []))
        ]
