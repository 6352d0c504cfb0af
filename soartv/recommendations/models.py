from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Document(BaseModel):
    """Store documents use camelCase keys; accept either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class UserProfile(_Document):
    uid: str
    name: str = ""
    role: str = ""
    roles: list[str] = Field(default_factory=list)
    genres: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("genres", "favoriteGenres", "favorite_genres"),
    )
    bio: str = ""
    profile_image_url: str | None = Field(default=None, alias="profileImageURL")
    portfolio_links: list[str] = Field(default_factory=list)
    location: str | None = None

    @field_validator("name", "role", "bio", mode="before")
    @classmethod
    def _none_to_empty_str(cls, value):
        return "" if value is None else value

    @field_validator("roles", "genres", "portfolio_links", mode="before")
    @classmethod
    def _none_to_empty_list(cls, value):
        return [] if value is None else value

    @property
    def primary_role(self) -> str:
        if self.role:
            return self.role
        return self.roles[0] if self.roles else ""


class Project(_Document):
    id: str
    title: str = ""
    genre: str = ""
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    poster_url: str | None = Field(default=None, alias="posterURL")
    video_url: str | None = Field(default=None, alias="videoURL")
    uploaded_by: str = ""
    created_at: datetime | None = None
    visibility: str = "public"
    public: bool | None = None

    @field_validator("title", "genre", "description", "uploaded_by", mode="before")
    @classmethod
    def _none_to_empty_str(cls, value):
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _none_to_empty_list(cls, value):
        return [] if value is None else value

    @property
    def is_public(self) -> bool:
        return self.visibility != "private" and self.public is not False


class UploaderSummary(_Document):
    uid: str = ""
    name: str
    role: str
    profile_image_url: str | None = Field(default=None, alias="profileImageURL")


UNKNOWN_UPLOADER = UploaderSummary(name="Unknown User", role="Filmmaker")


class ScoredUser(UserProfile):
    projects: list[Project] = Field(default_factory=list)
    project_count: int = 0
    match_score: int = Field(..., ge=0, le=100)
    match_reasons: list[str] = Field(default_factory=list)


class ScoredProject(Project):
    match_score: int = Field(..., ge=0, le=100)
    match_reasons: list[str] = Field(default_factory=list)
    uploader_data: UploaderSummary = UNKNOWN_UPLOADER


class RecommendationResponse(_Document):
    users: list[ScoredUser] = Field(default_factory=list)
    projects: list[ScoredProject] = Field(default_factory=list)


class RecommendedRow(_Document):
    genres: list[str] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
