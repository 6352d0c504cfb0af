from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_PACKAGE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class AppConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "soartv-secret-change-in-production")
    seed_path: Path = Path(os.getenv("SOARTV_SEED_PATH", str(_PACKAGE_DIR / "data" / "seed.json")))
    videos_csv: Path = _PACKAGE_DIR / "data" / "videos.csv"
    static_dir: Path = _PACKAGE_DIR / "static"
    projects_file: Path = Path(os.getenv("SOARTV_PROJECTS_FILE", "/tmp/soartv_projects.json"))
    objects_dir: Path = Path(os.getenv("SOARTV_OBJECTS_DIR", "/tmp/soartv_objects"))
    store_timeout: float = float(os.getenv("SOARTV_STORE_TIMEOUT", "8.0"))
    upload_url_ttl: int = 900
    profile_cache_ttl: float = 300.0
    projects_cache_ttl: float = 120.0
    project_list_limit: int = 50


DEFAULT_CONFIG = AppConfig()
