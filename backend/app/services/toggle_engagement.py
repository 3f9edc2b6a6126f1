"""Toggle Engagement Service — the business-level like/unlike (and follow/unfollow) operation.

Invariants:
    - An actor is required: None -> UnauthenticatedError (checked before any IO)
    - The subject must exist per the subject repository -> SubjectNotFoundError
    - The mutation is a single store.apply_toggle call; no read-then-write here
    - Returns the store's post-mutation outcome, never a cached count
    - No side effects beyond the store mutation (observers run and log elsewhere)
"""

from app.core.domain_types import ActorId, SubjectId, ToggleOutcome
from app.core.errors import ErrorContext, SubjectNotFoundError, UnauthenticatedError
from app.core.repository_protocols import EngagementStore, SubjectRepository


class ToggleEngagementService:

    def __init__(self, store: EngagementStore, subjects: SubjectRepository):
        self.store = store
        self.subjects = subjects

    async def toggle(
        self, subject_id: SubjectId, actor_id: ActorId | None,
    ) -> ToggleOutcome:
        if actor_id is None:
            raise UnauthenticatedError(ErrorContext(subject_id=subject_id))
        if not await self.subjects.exists(subject_id):
            raise SubjectNotFoundError(subject_id)
        return await self.store.apply_toggle(subject_id, actor_id)
