"""Engagement Schemas — wire shape of engagement status responses.

Invariants:
    - Serialized as {"count": int, "isEngaged": bool}
    - count is never negative
"""

from pydantic import BaseModel, ConfigDict, Field

from app.core.domain_types import EngagementStatus


class EngagementStatusResponse(BaseModel):
    """Count plus the caller's own engagement state."""
    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(ge=0)
    is_engaged: bool = Field(alias="isEngaged")

    @classmethod
    def from_status(cls, status: EngagementStatus) -> "EngagementStatusResponse":
        return cls(count=status.count, is_engaged=status.is_engaged)
