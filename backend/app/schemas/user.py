"""User Schemas — public profile and its editable fields.

Invariants:
    - display_name: 1-100 chars, stripped, non-empty
    - followers is never negative
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class UserProfileUpdate(BaseModel):
    display_name: str = Field(min_length=1, max_length=100)
    bio: str | None = Field(None, max_length=1_000)

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("display_name cannot be empty or whitespace")
        return v


class UserProfileResponse(BaseModel):
    """Profile card with the follower count."""
    id: str
    display_name: str
    bio: str | None = None
    followers: int = Field(0, ge=0)
    created_at: datetime
