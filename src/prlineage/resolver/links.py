"""LinkResolver - follows a pull request to its downstream mirrors."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from prlineage.exceptions import LineageError, NotFoundError, ResolutionError
from prlineage.resolver.cache import RepoPullCache
from prlineage.resolver.models import LinkNode, PullRequestRef, PullRequestStatus, unique
from prlineage.resolver.ports import CodeHostPort

logger = logging.getLogger(__name__)


class LinkResolver:
    """Resolves pull request URLs into LinkNode trees.

    An upstream pull request that is open or merged is matched against the
    downstream organization's repository of the same name, first by asking
    the code host which pull requests contain each commit, then by scanning
    cached commit messages for the commit hash (cherry-picks). Every match is
    resolved the same way, so a mirror of a mirror shows up as a grandchild.
    """

    def __init__(
        self,
        code_host: CodeHostPort,
        cache: RepoPullCache,
        downstream_org: str,
    ) -> None:
        """Initialize the resolver.

        Args:
            code_host: Client for pull request, commit and merge lookups.
            cache: Shared per-repository cache for the cherry-pick fallback.
            downstream_org: Organization holding mirrored pull requests.
        """
        self.code_host = code_host
        self.cache = cache
        self.downstream_org = downstream_org

    async def resolve(self, url: str, visited: frozenset[str] = frozenset()) -> LinkNode:
        """Resolve one pull request URL and, recursively, its mirrors.

        Args:
            url: Pull request URL.
            visited: URLs already on the current resolution chain.

        Returns:
            The resolved LinkNode.

        Raises:
            ResolutionError: If the URL can't be parsed or any lookup fails.
        """
        try:
            return await self._resolve(url, visited | {url})
        except LineageError as e:
            raise ResolutionError(url, e) from e

    async def resolve_many(
        self, urls: Iterable[str], visited: frozenset[str] = frozenset()
    ) -> tuple[list[LinkNode], list[ResolutionError]]:
        """Resolve distinct URLs concurrently.

        Results come back in first-seen request order regardless of which
        lookup finishes first. Failed URLs are logged and returned separately.
        """
        pending = []
        for url in unique(urls):
            if url in visited:
                logger.warning("Skipping %s: already visited on this chain", url)
                continue
            pending.append(url)

        results = await asyncio.gather(
            *(self.resolve(url, visited) for url in pending), return_exceptions=True
        )

        nodes: list[LinkNode] = []
        failures: list[ResolutionError] = []
        for url, result in zip(pending, results):
            if isinstance(result, ResolutionError):
                logger.warning("Failed to get details for %s: %s", url, result.cause)
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                nodes.append(result)
        return nodes, failures

    async def _resolve(self, url: str, visited: frozenset[str]) -> LinkNode:
        logger.debug("Getting details for %s", url)
        ref = PullRequestRef.parse(url)

        pull = await self.code_host.get_pull_request(ref.org, ref.repo, ref.number)
        merged = await self.code_host.is_merged(ref.org, ref.repo, ref.number)
        node = LinkNode(
            url=url,
            ref=ref,
            status=PullRequestStatus.from_state(pull.state, merged),
            title=pull.title,
            base_ref=pull.base_ref,
        )

        if ref.org == self.downstream_org:
            return node

        if node.status is PullRequestStatus.CLOSED:
            # An abandoned upstream PR needs no downstream copy
            return node

        mirrors = await self._find_mirrors(ref, url)
        if mirrors:
            node.children, node.failures = await self.resolve_many(mirrors, visited)
        return node

    async def _find_mirrors(self, ref: PullRequestRef, url: str) -> list[str]:
        """Collect URLs of downstream pull requests carrying the PR's commits."""
        commits = await self.code_host.list_commits(ref.org, ref.repo, ref.number)

        found: dict[int, str] = {}
        for commit in commits:
            try:
                candidates = await self.code_host.list_pull_requests_with_commit(
                    self.downstream_org, ref.repo, commit.sha
                )
            except NotFoundError:
                logger.info(
                    "No downstream repository %s/%s, skipping", self.downstream_org, ref.repo
                )
                break

            # The API returns the source PR too when the commit is shared
            direct = [pull for pull in candidates if pull.html_url != url]
            for pull in direct:
                found.setdefault(pull.number, pull.html_url)

            if not direct:
                entry = await self.cache.get_or_build(self.downstream_org, ref.repo)
                for pull in entry.pull_requests_referencing(commit.sha):
                    if pull.html_url != url:
                        found.setdefault(pull.number, pull.html_url)

        return list(found.values())
