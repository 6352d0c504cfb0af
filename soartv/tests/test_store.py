from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from soartv.recommendations.models import Project, UserProfile
from soartv.store.base import ProjectQuery, StoreUnavailableError
from soartv.store.bounded import bounded_call
from soartv.store.cache import CachedDocumentStore
from soartv.store.memory import InMemoryDocumentStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _project(pid: str, days_old: int, **overrides) -> Project:
    fields = {"id": pid, "uploaded_by": "owner", "created_at": NOW - timedelta(days=days_old)}
    fields.update(overrides)
    return Project(**fields)


class CountingStore(InMemoryDocumentStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0
        self.down = False

    async def get_profile(self, uid):
        self.calls += 1
        if self.down:
            raise StoreUnavailableError("down")
        return await super().get_profile(uid)

    async def list_projects(self, query=None):
        self.calls += 1
        if self.down:
            raise StoreUnavailableError("down")
        return await super().list_projects(query)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


# ── In-memory store ──────────────────────────────────────────────────────


def test_general_listing_is_newest_first_and_limited():
    store = InMemoryDocumentStore(
        projects=[_project("old", 9), _project("undated", 0, created_at=None), _project("new", 1), _project("mid", 4)],
        project_list_limit=3,
    )

    projects = asyncio.run(store.list_projects())

    assert [p.id for p in projects] == ["new", "mid", "old"]


def test_filtered_listing():
    store = InMemoryDocumentStore(
        projects=[
            _project("a", 1, tags=["Horror"]),
            _project("b", 2, tags=["Drama", "Horror"], uploaded_by="other"),
            _project("c", 3, tags=["Horror"], visibility="private"),
            _project("d", 4, tags=["Comedy"]),
        ],
    )

    tagged = asyncio.run(store.list_projects(ProjectQuery(tags_any=("Horror",), public_only=True)))
    owned = asyncio.run(store.list_projects(ProjectQuery(uploaded_by="other")))
    capped = asyncio.run(store.list_projects(ProjectQuery(tags_any=("Horror", "Comedy"), limit=2)))

    assert [p.id for p in tagged] == ["a", "b"]
    assert [p.id for p in owned] == ["b"]
    assert [p.id for p in capped] == ["a", "b"]


def test_seed_file_roundtrip(tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps({
        "users": [{"uid": "u1", "name": "One", "favoriteGenres": ["Drama"], "profileImageURL": "/u1.jpg"}],
        "projects": [{"id": "p1", "uploadedBy": "u1", "posterURL": "/p1.jpg", "createdAt": "2026-10-01T00:00:00Z", "public": False}],
    }))

    store = InMemoryDocumentStore.from_seed_file(seed)
    profile = asyncio.run(store.get_profile("u1"))
    projects = asyncio.run(store.list_projects())

    assert profile == UserProfile(uid="u1", name="One", genres=["Drama"], profile_image_url="/u1.jpg")
    assert projects[0].uploaded_by == "u1"
    assert projects[0].poster_url == "/p1.jpg"
    assert projects[0].is_public is False


def test_set_visibility():
    store = InMemoryDocumentStore(projects=[_project("p", 1)])

    updated = store.set_visibility("p", "private")

    assert updated is not None and not updated.is_public
    assert store.set_visibility("missing", "private") is None


# ── Cache ────────────────────────────────────────────────────────────────


def test_profile_lookups_are_cached_until_ttl():
    clock = FakeClock()
    inner = CountingStore(profiles=[UserProfile(uid="u1")])
    store = CachedDocumentStore(inner, profile_ttl=300, clock=clock)

    asyncio.run(store.get_profile("u1"))
    asyncio.run(store.get_profile("u1"))
    assert inner.calls == 1

    clock.now += 301
    asyncio.run(store.get_profile("u1"))
    assert inner.calls == 2

    stats = store.get_cache_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 2
    assert stats["hit_rate"] == 33.3


def test_missing_profiles_are_not_cached():
    inner = CountingStore()
    store = CachedDocumentStore(inner)

    assert asyncio.run(store.get_profile("ghost")) is None
    assert asyncio.run(store.get_profile("ghost")) is None
    assert inner.calls == 2


def test_only_general_project_listing_is_cached():
    inner = CountingStore(projects=[_project("p", 1, tags=["Drama"])])
    store = CachedDocumentStore(inner)

    asyncio.run(store.list_projects())
    asyncio.run(store.list_projects())
    asyncio.run(store.list_projects(ProjectQuery(tags_any=("Drama",))))
    asyncio.run(store.list_projects(ProjectQuery(tags_any=("Drama",))))

    assert inner.calls == 3


def test_stale_entry_served_when_store_fails():
    clock = FakeClock()
    inner = CountingStore(projects=[_project("p", 1)])
    store = CachedDocumentStore(inner, projects_ttl=120, clock=clock)

    asyncio.run(store.list_projects())
    clock.now += 500
    inner.down = True

    projects = asyncio.run(store.list_projects())

    assert [p.id for p in projects] == ["p"]


def test_failure_without_cached_entry_propagates():
    inner = CountingStore(profiles=[UserProfile(uid="u1")])
    inner.down = True
    store = CachedDocumentStore(inner)

    with pytest.raises(StoreUnavailableError):
        asyncio.run(store.get_profile("u1"))


def test_clear_resets_entries_and_stats():
    store = CachedDocumentStore(CountingStore(profiles=[UserProfile(uid="u1")]))
    asyncio.run(store.get_profile("u1"))

    store.clear()

    assert store.get_cache_stats() == {"size": 0, "hits": 0, "misses": 0, "hit_rate": 0.0}


# ── Bounded calls ────────────────────────────────────────────────────────


async def _value():
    return "value"


async def _boom():
    raise StoreUnavailableError("boom")


async def _slow():
    await asyncio.sleep(5)
    return "late"


def test_bounded_call_passes_result_through():
    assert asyncio.run(bounded_call(_value(), "fallback")) == "value"


def test_bounded_call_falls_back_on_error():
    assert asyncio.run(bounded_call(_boom(), "fallback")) == "fallback"


def test_bounded_call_falls_back_on_timeout():
    assert asyncio.run(bounded_call(_slow(), "fallback", timeout=0.05)) == "fallback"
