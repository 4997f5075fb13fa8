"""IssueTreeResolver - walks a ticket hierarchy and resolves every linked pull request."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from prlineage.exceptions import LineageError, ResolutionError
from prlineage.jira.models import EPIC, FEATURE, STORY, Ticket
from prlineage.resolver.cache import RepoPullCache
from prlineage.resolver.links import LinkResolver
from prlineage.resolver.models import IssueNode, find_pull_request_urls, unique
from prlineage.resolver.ports import CodeHostPort, IssueTrackerPort

logger = logging.getLogger(__name__)

# Field linking children to a parent, by parent ticket type
_CHILD_LINK_FIELDS = {
    EPIC: "Epic Link",
    FEATURE: "Parent Link",
}


def extract_links(ticket: Ticket) -> list[str]:
    """Pull request URLs in the description and comments, duplicates removed."""
    urls = find_pull_request_urls(ticket.description)
    for body in ticket.comments:
        urls.extend(find_pull_request_urls(body))
    return unique(urls)


class IssueTreeResolver:
    """Resolves tickets into IssueNode trees.

    Children are found by ticket type: issues whose "Epic Link" points at an
    Epic, issues whose "Parent Link" points at a Feature, and the declared
    subtasks of a Story. Other types are leaves.
    """

    def __init__(self, tracker: IssueTrackerPort, links: LinkResolver) -> None:
        """Initialize the resolver.

        Args:
            tracker: Issue tracker client.
            links: Resolver for the pull requests linked from tickets.
        """
        self.tracker = tracker
        self.links = links

    async def resolve(self, key: str, visited: frozenset[str] = frozenset()) -> IssueNode:
        """Resolve a ticket, its links and, recursively, its children.

        Args:
            key: Ticket key.
            visited: Keys already on the current resolution chain.

        Raises:
            ResolutionError: If the ticket itself can't be fetched.
        """
        logger.debug("Getting details for %s", key)
        try:
            ticket = await self.tracker.get_issue(key, expand_comments=True)
        except LineageError as e:
            raise ResolutionError(key, e) from e

        node = IssueNode(ticket=ticket)
        (node.links, node.link_failures), (node.children, node.child_failures) = (
            await asyncio.gather(
                self.links.resolve_many(extract_links(ticket)),
                self._resolve_children(ticket, visited | {key}),
            )
        )
        return node

    async def resolve_many(
        self, keys: Iterable[str], visited: frozenset[str] = frozenset()
    ) -> tuple[list[IssueNode], list[ResolutionError]]:
        """Resolve distinct keys concurrently, keeping first-seen request order."""
        pending = []
        for key in unique(keys):
            if key in visited:
                logger.warning("Skipping %s: already visited on this chain", key)
                continue
            pending.append(key)

        results = await asyncio.gather(
            *(self.resolve(key, visited) for key in pending), return_exceptions=True
        )

        nodes: list[IssueNode] = []
        failures: list[ResolutionError] = []
        for key, result in zip(pending, results):
            if isinstance(result, ResolutionError):
                logger.warning("Failed to process issue %s: %s", key, result.cause)
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                nodes.append(result)
        return nodes, failures

    async def _resolve_children(
        self, ticket: Ticket, visited: frozenset[str]
    ) -> tuple[list[IssueNode], list[ResolutionError]]:
        try:
            keys = await self.child_keys(ticket)
        except LineageError as e:
            logger.warning("Could not find sub-issues related to %s: %s", ticket.key, e)
            return [], [ResolutionError(ticket.key, e)]
        return await self.resolve_many(keys, visited)

    async def child_keys(self, ticket: Ticket) -> list[str]:
        """Keys of a ticket's children, in tracker order."""
        link_field = _CHILD_LINK_FIELDS.get(ticket.type)
        if link_field is not None:
            children = await self.tracker.search_issues(
                f'"{link_field}" = {ticket.key}', expand="comments"
            )
            return [child.key for child in children]
        if ticket.type == STORY:
            return list(ticket.subtasks)
        return []


async def resolve_lineage(
    keys: Iterable[str],
    tracker: IssueTrackerPort,
    code_host: CodeHostPort,
    downstream_org: str,
) -> tuple[list[IssueNode], list[ResolutionError]]:
    """Resolve root tickets with a fresh cache for this run.

    Returns:
        Resolved root issues in request order, and the roots that failed.
    """
    cache = RepoPullCache(code_host)
    links = LinkResolver(code_host, cache, downstream_org)
    return await IssueTreeResolver(tracker, links).resolve_many(keys)
