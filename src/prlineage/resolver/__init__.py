"""Resolver - builds issue → pull request → downstream mirror trees."""

from prlineage.resolver.cache import RepoPullCache
from prlineage.resolver.issues import IssueTreeResolver, extract_links, resolve_lineage
from prlineage.resolver.links import LinkResolver
from prlineage.resolver.models import (
    PULL_REQUEST_URL_PATTERN,
    CacheEntry,
    IssueNode,
    LinkNode,
    PullRequestRef,
    PullRequestStatus,
    find_pull_request_urls,
)
from prlineage.resolver.ports import CodeHostPort, IssueTrackerPort

__all__ = [
    "PULL_REQUEST_URL_PATTERN",
    "CacheEntry",
    "CodeHostPort",
    "IssueNode",
    "IssueTrackerPort",
    "IssueTreeResolver",
    "LinkNode",
    "LinkResolver",
    "PullRequestRef",
    "PullRequestStatus",
    "RepoPullCache",
    "extract_links",
    "find_pull_request_urls",
    "resolve_lineage",
]
