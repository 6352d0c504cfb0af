from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProjectUploadRequest(BaseModel):
    """Fields are optional here so missing ones can be reported as a 400."""

    model_config = ConfigDict(populate_by_name=True)

    video_url: str | None = Field(default=None, alias="videoURL")
    title: str | None = None
    description: str | None = None
    user_id: str | None = Field(default=None, alias="userId")


class UploadedProject(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: str = ""
    uploaded_by: str
    video_url: str = Field(alias="videoURL")
    created_at: datetime
    visibility: str = "public"
    tags: list[str] = Field(default_factory=list)
    cast: list[str] = Field(default_factory=list)
    crew: list[str] = Field(default_factory=list)
    source: str = "file_storage"


class ProjectUploadResponse(BaseModel):
    success: bool
    project: UploadedProject


class VisibilityUpdate(BaseModel):
    visibility: Literal["public", "private"]
