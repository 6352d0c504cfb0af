from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..recommendations.models import Project, UserProfile


class StoreUnavailableError(Exception):
    """The document store could not be reached or refused the request."""


@dataclass(frozen=True)
class ProjectQuery:
    """Filter for ``list_projects``. ``None`` fields do not constrain."""

    tags_any: tuple[str, ...] | None = None
    uploaded_by: str | None = None
    public_only: bool = False
    limit: int | None = None


class DocumentStore(Protocol):
    async def get_profile(self, uid: str) -> UserProfile | None: ...

    async def list_profiles(self) -> list[UserProfile]: ...

    async def list_projects(self, query: ProjectQuery | None = None) -> list[Project]: ...
