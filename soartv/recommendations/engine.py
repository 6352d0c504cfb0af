from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable

from ..config import DEFAULT_CONFIG
from ..store.base import DocumentStore, ProjectQuery
from ..store.bounded import bounded_call
from .models import (
    UNKNOWN_UPLOADER,
    Project,
    RecommendationResponse,
    ScoredProject,
    ScoredUser,
    UploaderSummary,
    UserProfile,
)
from .scoring import score_project_compatibility, score_user_compatibility

logger = logging.getLogger(__name__)

# Matches at or below this score are noise.
MATCH_THRESHOLD = 30
MAX_RECOMMENDATIONS = 12
RECOMMENDED_ROW_LIMIT = 6


def _rank_users(
    requester: UserProfile,
    profiles: Iterable[UserProfile],
    public_projects: list[Project],
) -> list[ScoredUser]:
    owned_by: dict[str, list[Project]] = defaultdict(list)
    for project in public_projects:
        owned_by[project.uploaded_by].append(project)

    seen: set[str] = set()
    ranked: list[ScoredUser] = []
    for candidate in profiles:
        if candidate.uid == requester.uid or candidate.uid in seen:
            continue
        seen.add(candidate.uid)

        owned = owned_by.get(candidate.uid, [])
        score, reasons = score_user_compatibility(requester, candidate, len(owned))
        if score <= MATCH_THRESHOLD:
            continue
        ranked.append(ScoredUser.model_validate({
            **candidate.model_dump(),
            "projects": owned,
            "project_count": len(owned),
            "match_score": score,
            "match_reasons": reasons,
        }))

    ranked.sort(key=lambda u: (-u.match_score, u.uid))
    return ranked[:MAX_RECOMMENDATIONS]


async def _project_candidates(
    store: DocumentStore,
    requester: UserProfile,
    public_projects: list[Project],
    timeout: float,
) -> list[Project]:
    """Other users' public projects plus a genre-tagged supplement, deduplicated by id."""
    candidates: dict[str, Project] = {
        p.id: p for p in public_projects if p.uploaded_by != requester.uid
    }

    genres = tuple(dict.fromkeys(g for g in requester.genres if g))
    if genres:
        tagged = await bounded_call(
            store.list_projects(ProjectQuery(tags_any=genres, public_only=True)),
            [],
            timeout=timeout,
            label="genre-tagged project listing",
        )
        for project in tagged:
            if project.is_public and project.uploaded_by != requester.uid:
                candidates.setdefault(project.id, project)

    return list(candidates.values())


def _rank_projects(
    requester: UserProfile,
    candidates: Iterable[Project],
    now: datetime,
) -> list[ScoredProject]:
    ranked: list[ScoredProject] = []
    for project in candidates:
        score, reasons = score_project_compatibility(requester, project, now)
        if score <= MATCH_THRESHOLD:
            continue
        ranked.append(ScoredProject.model_validate({
            **project.model_dump(),
            "match_score": score,
            "match_reasons": reasons,
        }))

    ranked.sort(key=lambda p: (-p.match_score, p.id))
    return ranked[:MAX_RECOMMENDATIONS]


def _uploader_summary(profile: UserProfile | None) -> UploaderSummary:
    if profile is None:
        return UNKNOWN_UPLOADER
    return UploaderSummary(
        uid=profile.uid,
        name=profile.name,
        role=profile.primary_role,
        profile_image_url=profile.profile_image_url,
    )


async def _enrich(
    store: DocumentStore,
    projects: list[ScoredProject],
    timeout: float,
) -> list[ScoredProject]:
    """Attach uploader summaries, one concurrent lookup per distinct owner."""
    owner_ids = list(dict.fromkeys(p.uploaded_by for p in projects))
    lookups = await asyncio.gather(*(
        bounded_call(
            store.get_profile(uid),
            None,
            timeout=timeout,
            label=f"uploader lookup for {uid!r}",
        )
        for uid in owner_ids
    ))
    uploaders = dict(zip(owner_ids, lookups))

    return [
        p.model_copy(update={"uploader_data": _uploader_summary(uploaders.get(p.uploaded_by))})
        for p in projects
    ]


async def _assemble(
    store: DocumentStore,
    requester_id: str,
    now: datetime,
    timeout: float,
) -> RecommendationResponse:
    requester = await bounded_call(
        store.get_profile(requester_id),
        None,
        timeout=timeout,
        label=f"profile lookup for {requester_id!r}",
    )
    if requester is None:
        logger.info("No profile for %s, returning empty recommendations", requester_id)
        return RecommendationResponse()
    if requester.uid != requester_id:
        requester = requester.model_copy(update={"uid": requester_id})

    # The two bulk listings together form the candidate snapshot.
    profiles, projects = await asyncio.gather(
        bounded_call(store.list_profiles(), None, timeout=timeout, label="profile listing"),
        bounded_call(store.list_projects(), None, timeout=timeout, label="project listing"),
    )
    if profiles is None or projects is None:
        return RecommendationResponse()

    public_projects = [p for p in projects if p.is_public]

    users = _rank_users(requester, profiles, public_projects)

    candidates = await _project_candidates(store, requester, public_projects, timeout)
    ranked_projects = _rank_projects(requester, candidates, now)
    enriched = await _enrich(store, ranked_projects, timeout)

    return RecommendationResponse(users=users, projects=enriched)


async def get_user_recommendations(
    store: DocumentStore,
    requester_id: str,
    *,
    now: datetime | None = None,
    timeout: float = DEFAULT_CONFIG.store_timeout,
) -> RecommendationResponse:
    """
    Build collaborator and project recommendations for ``requester_id``.

    Never raises: store failures degrade to empty lists or placeholder
    uploaders. Both lists are sorted by score descending (ties by id),
    hold only scores above ``MATCH_THRESHOLD`` and at most
    ``MAX_RECOMMENDATIONS`` entries.
    """
    now = now or datetime.now(timezone.utc)
    try:
        return await _assemble(store, requester_id, now, timeout)
    except Exception:
        logger.warning("Recommendation assembly failed for %s", requester_id, exc_info=True)
        return RecommendationResponse()


async def fetch_recommended(
    store: DocumentStore,
    genres: Iterable[str],
    *,
    limit: int = RECOMMENDED_ROW_LIMIT,
    timeout: float = DEFAULT_CONFIG.store_timeout,
) -> list[Project]:
    """
    Public projects tagged with any of ``genres``, or the newest public
    projects when no genres are given.
    """
    wanted = tuple(dict.fromkeys(g for g in genres if g))
    query = ProjectQuery(tags_any=wanted or None, public_only=True, limit=limit)
    projects = await bounded_call(
        store.list_projects(query),
        [],
        timeout=timeout,
        label="recommended row listing",
    )
    return [p for p in projects if p.is_public][:limit]
