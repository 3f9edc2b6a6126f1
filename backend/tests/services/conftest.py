"""Service test fixtures — in-memory store and a fake subject repository.

Invariants:
    - No database: services are exercised purely through their Protocols
"""

import pytest

from app.core.domain_types import SubjectId
from app.infrastructure.memory_engagement_store import InMemoryEngagementStore


class FakeSubjectRepository:
    """SubjectRepository backed by a set of known ids."""

    def __init__(self, *subject_ids: str):
        self.subject_ids = set(subject_ids)
        self.lookups: list[str] = []

    async def exists(self, subject_id: SubjectId) -> bool:
        self.lookups.append(subject_id)
        return subject_id in self.subject_ids


class RecordingStore(InMemoryEngagementStore):
    """In-memory store that records which operations were called."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls: list[str] = []

    async def get(self, subject_id):
        self.calls.append("get")
        return await super().get(subject_id)

    async def apply_toggle(self, subject_id, actor_id):
        self.calls.append("apply_toggle")
        return await super().apply_toggle(subject_id, actor_id)


@pytest.fixture
def subjects():
    return FakeSubjectRepository("S")


@pytest.fixture
def store():
    return RecordingStore()
