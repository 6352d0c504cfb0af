from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .models import UploadedProject

logger = logging.getLogger(__name__)


class ProjectFileStore:
    """
    Fallback project store persisted as one JSON file.

    The file maps user id to that user's list of uploaded projects. An
    unreadable file starts an empty store; failed writes are logged and the
    in-memory copy stays authoritative for the process.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._projects: dict[str, list[UploadedProject]] = self._load()

    def _load(self) -> dict[str, list[UploadedProject]]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            loaded = {
                str(user_id): [UploadedProject.model_validate(p) for p in projects]
                for user_id, projects in raw.items()
            }
        except (OSError, ValueError, AttributeError, ValidationError):
            logger.warning("Could not load projects file %s, starting fresh", self.path, exc_info=True)
            return {}
        logger.info("Loaded %d users with projects from %s", len(loaded), self.path)
        return loaded

    def _save(self) -> None:
        payload = {
            user_id: [p.model_dump(mode="json", by_alias=True) for p in projects]
            for user_id, projects in self._projects.items()
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            logger.warning("Could not save projects file %s", self.path, exc_info=True)
            return
        logger.info("Projects saved to %s", self.path)

    def add_project(
        self,
        user_id: str,
        title: str,
        video_url: str,
        description: str = "",
    ) -> UploadedProject:
        project = UploadedProject(
            id=f"upload_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}",
            title=title,
            description=description,
            uploaded_by=user_id,
            video_url=video_url,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._projects.setdefault(user_id, []).append(project)
            self._save()
        return project

    def get_user_projects(self, user_id: str) -> list[UploadedProject]:
        with self._lock:
            return list(self._projects.get(user_id, []))
