"""Boundary Protocols — contracts between the engagement core and its collaborators.

Invariants:
    - Core NEVER imports from infrastructure: dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - Async methods: every implementation does IO (database, token verification)
"""

from typing import Protocol

from app.core.domain_types import ActorId, EngagementRecord, SubjectId, ToggleOutcome


class EngagementStore(Protocol):
    """Durable, concurrency-safe storage of engagement records.

    apply_toggle is linearizable per subject and all-or-nothing.
    """
    lazy_create: bool

    async def get(self, subject_id: SubjectId) -> EngagementRecord: ...
    async def apply_toggle(
        self, subject_id: SubjectId, actor_id: ActorId,
    ) -> ToggleOutcome: ...
    async def create(self, subject_id: SubjectId) -> None: ...
    async def discard(self, subject_id: SubjectId) -> None: ...


class SubjectRepository(Protocol):
    """Owns subject existence. The core never mutates subjects."""
    async def exists(self, subject_id: SubjectId) -> bool: ...


class IdentityProvider(Protocol):
    """Resolves a request credential into a verified actor id, or None."""
    async def resolve_actor(self, credential: str | None) -> ActorId | None: ...


class EngagementObserver(Protocol):
    """Reacts to a committed state transition. Runs after the response."""
    async def on_transition(self, outcome: ToggleOutcome) -> None: ...
