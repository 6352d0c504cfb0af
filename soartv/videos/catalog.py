from __future__ import annotations

from pathlib import Path

import pandas as pd
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..config import DEFAULT_CONFIG

_df: pd.DataFrame | None = None


class Video(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    description: str
    thumbnail_url: str
    video_url: str
    duration: str
    views: str
    category: str
    rating: float
    year: int
    type: str


def _load(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path)
    df.insert(0, "id", range(1, len(df) + 1))
    df["category_lower"] = df["category"].fillna("").str.lower()
    return df


def get_dataframe(path: Path = DEFAULT_CONFIG.videos_csv) -> pd.DataFrame:
    """Return the in-memory sample catalog, loading it on first call."""
    global _df
    if _df is None:
        _df = _load(path)
    return _df


def _to_videos(df: pd.DataFrame) -> list[Video]:
    return [Video.model_validate(row) for row in df.drop(columns=["category_lower"]).to_dict("records")]


def get_all_videos() -> list[Video]:
    return _to_videos(get_dataframe())


def get_videos_by_category(category: str) -> list[Video]:
    df = get_dataframe()
    return _to_videos(df[df["category_lower"] == category.strip().lower()])


def get_video(video_id: int) -> Video | None:
    df = get_dataframe()
    matches = df[df["id"] == video_id]
    if matches.empty:
        return None
    return _to_videos(matches)[0]
