"""Project Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - ProjectCreate.title: 1-200 chars, stripped, non-empty
    - images: at most 5 http(s) URLs
    - thumbnail defaults to the first image; one of the two is required
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_IMAGES = 5
_URL_PATTERN = r"^https?://\S+$"


class ProjectCreate(BaseModel):
    """Project upload metadata: images are already hosted, only URLs arrive here."""
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5_000)
    category: str | None = Field(None, max_length=100)
    thumbnail: str | None = Field(None, max_length=2048, pattern=_URL_PATTERN)
    images: list[str] = Field(default_factory=list, max_length=MAX_IMAGES)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v

    @field_validator("images")
    @classmethod
    def check_image_urls(cls, v: list[str]) -> list[str]:
        for url in v:
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"image must be an http(s) URL: {url!r}")
        return v

    @model_validator(mode="after")
    def default_thumbnail(self) -> "ProjectCreate":
        if self.thumbnail is None:
            if not self.images:
                raise ValueError("a thumbnail or at least one image is required")
            self.thumbnail = self.images[0]
        return self


class ProjectResponse(BaseModel):
    """Project as shown in the gallery, with its like and view counts."""
    id: UUID
    owner_id: str
    title: str
    description: str | None = None
    category: str | None = None
    thumbnail: str
    images: list[str]
    likes: int = 0
    views: int = 0
    created_at: datetime
