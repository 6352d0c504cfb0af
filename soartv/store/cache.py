from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Awaitable, Callable

from ..config import DEFAULT_CONFIG
from ..recommendations.models import Project, UserProfile
from .base import DocumentStore, ProjectQuery

logger = logging.getLogger(__name__)

_MISSING = object()


def _make_key(kind: str, params: dict) -> str:
    normalized = json.dumps({"kind": kind, **params}, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


class CachedDocumentStore:
    """
    Read-through TTL cache in front of another document store.

    Profile lookups and the general project listing are cached. Expired
    entries are kept so they can be served when the backing store fails.
    """

    def __init__(
        self,
        inner: DocumentStore,
        profile_ttl: float = DEFAULT_CONFIG.profile_cache_ttl,
        projects_ttl: float = DEFAULT_CONFIG.projects_cache_ttl,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.inner = inner
        self._profile_ttl = profile_ttl
        self._projects_ttl = projects_ttl
        self._clock = clock
        self._entries: dict[str, dict[str, Any]] = {}
        self._hits = 0
        self._misses = 0

    def _fresh(self, key: str, ttl: float) -> Any:
        entry = self._entries.get(key)
        if entry and self._clock() - entry["created_at"] < ttl:
            return entry["value"]
        return _MISSING

    async def _read_through(
        self,
        key: str,
        ttl: float,
        loader: Callable[[], Awaitable[Any]],
    ) -> Any:
        value = self._fresh(key, ttl)
        if value is not _MISSING:
            self._hits += 1
            return value
        self._misses += 1
        try:
            value = await loader()
        except Exception:
            stale = self._entries.get(key)
            if stale is None:
                raise
            logger.warning("Document store read failed, serving stale cache entry", exc_info=True)
            return stale["value"]
        if value is not None:
            self._entries[key] = {"value": value, "created_at": self._clock()}
        return value

    async def get_profile(self, uid: str) -> UserProfile | None:
        return await self._read_through(
            _make_key("profile", {"uid": uid}),
            self._profile_ttl,
            lambda: self.inner.get_profile(uid),
        )

    async def list_profiles(self) -> list[UserProfile]:
        return await self.inner.list_profiles()

    async def list_projects(self, query: ProjectQuery | None = None) -> list[Project]:
        if query is not None:
            return await self.inner.list_projects(query)
        projects = await self._read_through(
            _make_key("projects", {}),
            self._projects_ttl,
            lambda: self.inner.list_projects(),
        )
        return list(projects)

    def get_cache_stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0
