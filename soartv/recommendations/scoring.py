"""
Compatibility scoring for collaborator and project recommendations.

Both scorers are additive, deterministic and clamped to [0, 100]:

* **User compatibility** (requester vs. another filmmaker)
  ``genre overlap (30) + role compatibility (40) + activity (15) + completeness (15)``

* **Project compatibility** (requester vs. a project)
  ``genre match (40) + tag overlap (30) + recency (20) + quality (10)``

Reasons are produced by a separate pass over the same inputs and are
returned in a fixed priority order, most salient first.  Callers usually
display only the first two.

Project tags are matched against the requester's *genre* vocabulary; there
is no separate tag taxonomy.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .models import Project, UserProfile

MAX_SCORE = 100
DEFAULT_ROLE_COMPATIBILITY = 10

_GENRE_OVERLAP_MAX = 30
_ACTIVITY_PER_PROJECT = 3
_ACTIVITY_MAX = 15
_COMPLETENESS_STEP = 5
_DETAILED_BIO_CHARS = 50

_GENRE_MATCH_POINTS = 40
_TAG_POINTS_PER_MATCH = 10
_TAG_OVERLAP_MAX = 30
_RECENT_DAYS = 7
_RECENT_POINTS = 20
_FRESH_DAYS = 30
_FRESH_POINTS = 10
_QUALITY_STEP = 5
_DETAILED_DESCRIPTION_CHARS = 100

_ROLE_REASON_MIN = 25
_ACTIVE_PROJECT_COUNT = 2


class Role(str, Enum):
    DIRECTOR = "Director"
    ACTOR = "Actor"
    CINEMATOGRAPHER = "Cinematographer"
    EDITOR = "Editor"
    PRODUCER = "Producer"
    WRITER = "Writer"


def _build_role_table() -> Mapping[tuple[Role, Role], int]:
    rows = {
        Role.DIRECTOR: {Role.ACTOR: 35, Role.CINEMATOGRAPHER: 30, Role.EDITOR: 25, Role.PRODUCER: 30, Role.WRITER: 25},
        Role.ACTOR: {Role.DIRECTOR: 35, Role.CINEMATOGRAPHER: 20, Role.EDITOR: 15, Role.PRODUCER: 20, Role.WRITER: 15},
        Role.CINEMATOGRAPHER: {Role.DIRECTOR: 30, Role.ACTOR: 20, Role.EDITOR: 25, Role.PRODUCER: 20, Role.WRITER: 15},
        Role.EDITOR: {Role.DIRECTOR: 25, Role.ACTOR: 15, Role.CINEMATOGRAPHER: 25, Role.PRODUCER: 20, Role.WRITER: 20},
        Role.PRODUCER: {Role.DIRECTOR: 30, Role.ACTOR: 20, Role.CINEMATOGRAPHER: 20, Role.EDITOR: 20, Role.WRITER: 25},
        Role.WRITER: {Role.DIRECTOR: 25, Role.ACTOR: 15, Role.CINEMATOGRAPHER: 15, Role.EDITOR: 20, Role.PRODUCER: 25},
    }
    table = {
        (requester, candidate): points
        for requester, row in rows.items()
        for candidate, points in row.items()
    }
    return MappingProxyType(table)


# Directional: keyed by (requester role, candidate role).
ROLE_COMPATIBILITY: Mapping[tuple[Role, Role], int] = _build_role_table()


def _parse_role(value: str) -> Role | None:
    try:
        return Role(value)
    except ValueError:
        return None


def role_compatibility(requester_role: str, candidate_role: str) -> int:
    """Points for a role pairing; unknown, unset or same-role pairs get the default."""
    requester = _parse_role(requester_role)
    candidate = _parse_role(candidate_role)
    if requester is None or candidate is None:
        return DEFAULT_ROLE_COMPATIBILITY
    return ROLE_COMPATIBILITY.get((requester, candidate), DEFAULT_ROLE_COMPATIBILITY)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int) -> int:
    return max(0, min(MAX_SCORE, value))


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _shared_genres(requester: UserProfile, candidate_values: list[str]) -> list[str]:
    """Requester genres (in the requester's order) that appear in ``candidate_values``."""
    lookup = set(candidate_values)
    return [g for g in _unique(requester.genres) if g in lookup]


def _age_days(project: Project, now: datetime | None) -> float | None:
    if project.created_at is None:
        return None
    now = now or datetime.now(timezone.utc)
    created = project.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (now - created).total_seconds() / 86400.0


# ── User ↔ user ─────────────────────────────────────────────────────────


def user_compatibility_score(
    requester: UserProfile,
    candidate: UserProfile,
    candidate_project_count: int,
) -> int:
    requester_genres = _unique(requester.genres)
    shared = _shared_genres(requester, candidate.genres)
    genre_score = min(len(shared) / max(len(requester_genres), 1) * _GENRE_OVERLAP_MAX, _GENRE_OVERLAP_MAX)

    role_score = role_compatibility(requester.primary_role, candidate.primary_role)

    activity_score = min(max(candidate_project_count, 0) * _ACTIVITY_PER_PROJECT, _ACTIVITY_MAX)

    completeness_score = 0
    if len(candidate.bio) > _DETAILED_BIO_CHARS:
        completeness_score += _COMPLETENESS_STEP
    if candidate.profile_image_url:
        completeness_score += _COMPLETENESS_STEP
    if candidate.portfolio_links:
        completeness_score += _COMPLETENESS_STEP

    total = genre_score + role_score + activity_score + completeness_score
    return _clamp(_round_half_up(total))


def user_match_reasons(
    requester: UserProfile,
    candidate: UserProfile,
    candidate_project_count: int,
) -> list[str]:
    reasons: list[str] = []

    shared = _shared_genres(requester, candidate.genres)
    if shared:
        reasons.append(f"Both interested in {shared[0]}")

    requester_role = requester.primary_role
    candidate_role = candidate.primary_role
    if role_compatibility(requester_role, candidate_role) > _ROLE_REASON_MIN:
        reasons.append(f"{requester_role} + {candidate_role} collaboration")

    if candidate_project_count > _ACTIVE_PROJECT_COUNT:
        reasons.append("Active filmmaker with multiple projects")

    if len(candidate.bio) > _DETAILED_BIO_CHARS:
        reasons.append("Detailed profile and experience")

    return reasons


def score_user_compatibility(
    requester: UserProfile,
    candidate: UserProfile,
    candidate_project_count: int,
) -> tuple[int, list[str]]:
    """Return ``(score, reasons)`` for a potential collaborator."""
    return (
        user_compatibility_score(requester, candidate, candidate_project_count),
        user_match_reasons(requester, candidate, candidate_project_count),
    )


# ── User ↔ project ──────────────────────────────────────────────────────


def project_compatibility_score(
    requester: UserProfile,
    project: Project,
    now: datetime | None = None,
) -> int:
    score = 0

    if project.genre and project.genre in requester.genres:
        score += _GENRE_MATCH_POINTS

    tag_overlap = _shared_genres(requester, project.tags)
    score += min(len(tag_overlap) * _TAG_POINTS_PER_MATCH, _TAG_OVERLAP_MAX)

    age = _age_days(project, now)
    if age is not None:
        if age < _RECENT_DAYS:
            score += _RECENT_POINTS
        elif age < _FRESH_DAYS:
            score += _FRESH_POINTS

    if len(project.description) > _DETAILED_DESCRIPTION_CHARS:
        score += _QUALITY_STEP
    if project.poster_url:
        score += _QUALITY_STEP

    return _clamp(score)


def project_match_reasons(
    requester: UserProfile,
    project: Project,
    now: datetime | None = None,
) -> list[str]:
    reasons: list[str] = []

    if project.genre and project.genre in requester.genres:
        reasons.append(f"Matches your {project.genre} interest")

    tag_overlap = _shared_genres(requester, project.tags)
    if tag_overlap:
        reasons.append(f"Tagged with {tag_overlap[0]}")

    age = _age_days(project, now)
    if age is not None and age < _RECENT_DAYS:
        reasons.append("Recently uploaded")

    if len(project.description) > _DETAILED_DESCRIPTION_CHARS:
        reasons.append("Detailed project description")

    return reasons


def score_project_compatibility(
    requester: UserProfile,
    project: Project,
    now: datetime | None = None,
) -> tuple[int, list[str]]:
    """Return ``(score, reasons)`` for a candidate project."""
    return (
        project_compatibility_score(requester, project, now),
        project_match_reasons(requester, project, now),
    )
