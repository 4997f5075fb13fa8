"""Data models for the GitHub client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Commit:
    """A commit listed on a pull request."""

    sha: str
    message: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Commit:
        return cls(sha=data["sha"], message=(data.get("commit") or {}).get("message") or "")


@dataclass(frozen=True)
class PullRequest:
    """Pull request data.

    Attributes:
        number: Pull request number within its repository.
        html_url: Browser URL, e.g. https://github.com/org/repo/pull/5.
        title: Pull request title.
        state: "open" or "closed" as reported by GitHub (merged PRs are "closed").
        base_ref: Branch the pull request targets.
        org: Owner of the base repository.
        repo: Name of the base repository.
    """

    number: int
    html_url: str
    title: str
    state: str
    base_ref: str = ""
    org: str = ""
    repo: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PullRequest:
        base = data.get("base") or {}
        base_repo = base.get("repo") or {}
        return cls(
            number=data["number"],
            html_url=data["html_url"],
            title=data.get("title") or "",
            state=data.get("state") or "",
            base_ref=base.get("ref") or "",
            org=(base_repo.get("owner") or {}).get("login") or "",
            repo=base_repo.get("name") or "",
        )
