"""RepoPullCache - lazily built per-repository index of pull requests and commits."""

from __future__ import annotations

import asyncio
import logging

from prlineage.exceptions import LineageError
from prlineage.resolver.models import CacheEntry
from prlineage.resolver.ports import CodeHostPort

logger = logging.getLogger(__name__)


class RepoPullCache:
    """Shared cache of every pull request (and its commits) in a repository.

    Each repository is listed at most once per run. A lock per repository is
    held across the whole check-then-build sequence, so concurrent callers for
    the same repository wait for the first build while builds for different
    repositories proceed independently. A failed build is remembered and
    re-raised to later callers instead of being retried.
    """

    def __init__(self, code_host: CodeHostPort) -> None:
        """Initialize the cache.

        Args:
            code_host: Client used to list pull requests and commits.
        """
        self._code_host = code_host
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self._failures: dict[tuple[str, str], LineageError] = {}
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._entries

    async def get_or_build(self, org: str, repo: str) -> CacheEntry:
        """Return the cache entry for org/repo, building it on first use.

        Raises:
            LineageError: If listing pull requests or commits fails.
        """
        key = (org, repo)
        entry = self._entries.get(key)
        if entry is not None:
            return entry

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key in self._failures:
                raise self._failures[key]
            entry = self._entries.get(key)
            if entry is None:
                try:
                    entry = await self._build(org, repo)
                except LineageError as e:
                    logger.warning("Could not build cache for %s/%s: %s", org, repo, e)
                    self._failures[key] = e
                    raise
                self._entries[key] = entry
        return entry

    async def _build(self, org: str, repo: str) -> CacheEntry:
        logger.info("Building cache of pull requests for %s/%s", org, repo)
        pulls = await self._code_host.list_pull_requests(org, repo, state="all")
        entry = CacheEntry(org=org, repo=repo, pull_requests=pulls)
        for pull in pulls:
            entry.commits[pull.number] = await self._code_host.list_commits(
                org, repo, pull.number
            )
        logger.info("Cached %d pull request(s) for %s/%s", len(pulls), org, repo)
        return entry
