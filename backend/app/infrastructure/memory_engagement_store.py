"""In-Memory Engagement Store — per-subject serialization with asyncio locks.

Invariants:
    - Every mutation of a subject's record runs under that subject's asyncio.Lock
    - Records are immutable snapshots; a toggle swaps the whole record at once,
      so readers never observe a counter without its matching actor set
    - Locks are per subject: toggles on different subjects never wait on each other
    - A subject's lock outlives discard(): a toggle queued behind the discard
      still serializes with it and re-checks the subject before lazy creation

Design Decisions:
    - For tests and single-process deployments only; state is lost on restart
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from app.core.domain_types import ActorId, EngagementRecord, SubjectId, ToggleOutcome
from app.core.engagement_rules import check_invariant, flip
from app.core.errors import EngagementRecordNotFoundError, SubjectNotFoundError

logger = logging.getLogger(__name__)


class InMemoryEngagementStore:
    """EngagementStore holding records in a dict guarded by per-subject locks."""

    def __init__(
        self,
        lazy_create: bool = True,
        subject_guard: Callable[[SubjectId], Awaitable[bool]] | None = None,
    ):
        self.lazy_create = lazy_create
        self._subject_guard = subject_guard
        self._records: dict[SubjectId, EngagementRecord] = {}
        self._locks: dict[SubjectId, asyncio.Lock] = {}

    def _lock_for(self, subject_id: SubjectId) -> asyncio.Lock:
        return self._locks.setdefault(subject_id, asyncio.Lock())

    def _load(self, subject_id: SubjectId) -> EngagementRecord:
        record = self._records.get(subject_id)
        if record is None:
            if not self.lazy_create:
                raise EngagementRecordNotFoundError(subject_id)
            return EngagementRecord(subject_id=subject_id)
        check_invariant(subject_id, record.count, len(record.actor_ids))
        return record

    async def get(self, subject_id: SubjectId) -> EngagementRecord:
        return self._load(subject_id)

    async def apply_toggle(
        self, subject_id: SubjectId, actor_id: ActorId,
    ) -> ToggleOutcome:
        async with self._lock_for(subject_id):
            record = self._load(subject_id)
            if subject_id not in self._records and self._subject_guard:
                if not await self._subject_guard(subject_id):
                    raise SubjectNotFoundError(subject_id)
            # Suspension point: a real backend awaits its round trip here.
            await asyncio.sleep(0)
            updated, outcome = flip(record, actor_id)
            self._records[subject_id] = updated
        return outcome

    async def create(self, subject_id: SubjectId) -> None:
        async with self._lock_for(subject_id):
            self._records.setdefault(subject_id, EngagementRecord(subject_id=subject_id))

    async def discard(self, subject_id: SubjectId) -> None:
        async with self._lock_for(subject_id):
            self._records.pop(subject_id, None)
        logger.info("Engagement record discarded", extra={"subject_id": subject_id})
