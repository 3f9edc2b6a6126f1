"""Engagement Query Service — read-only status and count lookups.

Invariants:
    - Never mutates the store
    - Anonymous callers (actor_id None) always get is_engaged=False, whatever the count
    - Unknown subjects -> SubjectNotFoundError
"""

from app.core.domain_types import ActorId, EngagementStatus, SubjectId
from app.core.engagement_rules import status_for_actor
from app.core.errors import SubjectNotFoundError
from app.core.repository_protocols import EngagementStore, SubjectRepository


class EngagementQueryService:

    def __init__(self, store: EngagementStore, subjects: SubjectRepository):
        self.store = store
        self.subjects = subjects

    async def status_for(
        self, subject_id: SubjectId, actor_id: ActorId | None = None,
    ) -> EngagementStatus:
        """Current count plus whether actor_id is in the engaged set."""
        if not await self.subjects.exists(subject_id):
            raise SubjectNotFoundError(subject_id)
        record = await self.store.get(subject_id)
        return status_for_actor(record, actor_id)

    async def count_for(self, subject_id: SubjectId) -> int:
        """Raw count for anonymous display."""
        return (await self.status_for(subject_id)).count
