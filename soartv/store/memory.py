from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from ..config import DEFAULT_CONFIG
from ..recommendations.models import Project, UserProfile
from .base import ProjectQuery

logger = logging.getLogger(__name__)


def _newest_first(project: Project) -> float:
    created = project.created_at
    if created is None:
        return float("-inf")
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


class InMemoryDocumentStore:
    """
    Document store backed by in-process dictionaries.

    The general project listing is ordered newest first and capped at
    ``project_list_limit``; filtered listings honour ``ProjectQuery.limit``.
    """

    def __init__(
        self,
        profiles: Iterable[UserProfile] = (),
        projects: Iterable[Project] = (),
        project_list_limit: int = DEFAULT_CONFIG.project_list_limit,
    ) -> None:
        self._profiles: dict[str, UserProfile] = {p.uid: p for p in profiles}
        self._projects: dict[str, Project] = {p.id: p for p in projects}
        self._project_list_limit = project_list_limit

    @classmethod
    def from_seed_file(cls, path: Path, **kwargs) -> InMemoryDocumentStore:
        """Load a ``{"users": [...], "projects": [...]}`` snapshot."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        profiles = [UserProfile.model_validate(doc) for doc in raw.get("users", [])]
        projects = [Project.model_validate(doc) for doc in raw.get("projects", [])]
        logger.info("Loaded %d profiles and %d projects from %s", len(profiles), len(projects), path)
        return cls(profiles, projects, **kwargs)

    async def get_profile(self, uid: str) -> UserProfile | None:
        return self._profiles.get(uid)

    async def list_profiles(self) -> list[UserProfile]:
        return list(self._profiles.values())

    async def list_projects(self, query: ProjectQuery | None = None) -> list[Project]:
        projects = sorted(self._projects.values(), key=_newest_first, reverse=True)

        if query is None:
            return projects[: self._project_list_limit]

        if query.public_only:
            projects = [p for p in projects if p.is_public]
        if query.uploaded_by is not None:
            projects = [p for p in projects if p.uploaded_by == query.uploaded_by]
        if query.tags_any is not None:
            wanted = set(query.tags_any)
            projects = [p for p in projects if wanted.intersection(p.tags)]

        limit = query.limit if query.limit is not None else self._project_list_limit
        return projects[:limit]

    def set_visibility(self, project_id: str, visibility: str) -> Project | None:
        project = self._projects.get(project_id)
        if project is None:
            return None
        updated = project.model_copy(update={"visibility": visibility, "public": visibility != "private"})
        self._projects[project_id] = updated
        return updated
