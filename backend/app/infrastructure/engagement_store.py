"""SQL Engagement Store — durable, per-subject linearizable toggles over SQLAlchemy.

Invariants:
    - apply_toggle runs in ONE transaction: claim row -> read membership -> write set
      and counter -> commit. Any failure or cancellation rolls the whole thing back
    - The claim is the first statement of the transaction (UPDATE ... version + 1):
      PostgreSQL holds the row lock, SQLite the database write lock, until commit
    - Toggles on different subjects touch different rows and never wait on each other
    - get() reads counter and actor set in a single statement (one snapshot) and
      verifies count == |actor_ids| before returning

Design Decisions:
    - Lock-by-write claim over SELECT ... FOR UPDATE: same semantics on every
      dialect we run (SQLite ignores FOR UPDATE)
    - Lazy creation inside the toggle transaction; a concurrent creator surfaces as
      IntegrityError and the toggle restarts from scratch (bounded by max_attempts)
    - Lazy creation re-checks the subject through subject_guard inside the same
      transaction, so a toggle racing a subject deletion cannot resurrect its record
    - remove_engagement_rows is shared with subject deletion, which runs it in the
      transaction that deletes the subject row
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import ActorId, EngagementRecord, SubjectId, ToggleOutcome
from app.core.engagement_rules import check_invariant, next_count
from app.core.errors import (
    ConcurrencyError, EngagementRecordNotFoundError, ErrorContext, SubjectNotFoundError,
)
from app.infrastructure.database import DatabaseSessionManager
from app.models.engagement import EngagementActor, EngagementCounter

logger = logging.getLogger(__name__)

# Answers "does the subject still exist?" on the caller's transaction
SubjectGuard = Callable[[AsyncSession, SubjectId], Awaitable[bool]]


class _RecordCreatedConcurrently(Exception):
    """Another transaction inserted the same engagement record first."""


async def remove_engagement_rows(db: AsyncSession, subject_id: SubjectId) -> None:
    """Claim, then delete the counter and its actor set, on the caller's transaction."""
    await _claim(db, subject_id)
    await db.execute(
        delete(EngagementActor).where(EngagementActor.subject_id == subject_id),
    )
    await db.execute(
        delete(EngagementCounter).where(EngagementCounter.subject_id == subject_id),
    )


async def _claim(db: AsyncSession, subject_id: SubjectId) -> bool:
    """Bump version to take the write lock. False if no record exists."""
    result = await db.execute(
        update(EngagementCounter)
        .where(EngagementCounter.subject_id == subject_id)
        .values(
            version=EngagementCounter.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False),
    )
    return result.rowcount == 1


class SqlEngagementStore:
    """EngagementStore backed by the engagement_records / engagement_actors tables."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        lazy_create: bool = True,
        max_attempts: int = 3,
        subject_guard: SubjectGuard | None = None,
    ):
        self._db = db
        self.lazy_create = lazy_create
        self._max_attempts = max(1, max_attempts)
        self._subject_guard = subject_guard

    async def get(self, subject_id: SubjectId) -> EngagementRecord:
        """Return the record for subject_id (empty if missing and lazy)."""
        async with self._db.session() as db:
            result = await db.execute(
                select(EngagementCounter.count, EngagementActor.actor_id)
                .outerjoin(
                    EngagementActor,
                    EngagementActor.subject_id == EngagementCounter.subject_id,
                )
                .where(EngagementCounter.subject_id == subject_id),
            )
            rows = result.all()

        if not rows:
            if self.lazy_create:
                return EngagementRecord(subject_id=subject_id)
            raise EngagementRecordNotFoundError(subject_id)

        count = rows[0][0]
        actors = frozenset(ActorId(r[1]) for r in rows if r[1] is not None)
        check_invariant(subject_id, count, len(actors))
        return EngagementRecord(subject_id=subject_id, actor_ids=actors, count=count)

    async def apply_toggle(
        self, subject_id: SubjectId, actor_id: ActorId,
    ) -> ToggleOutcome:
        """Atomically flip actor_id's membership. Restarts on creation races."""
        for attempt in range(1, self._max_attempts + 1):
            try:
                async with self._db.transaction() as db:
                    outcome = await self._toggle_in_transaction(db, subject_id, actor_id)
            except _RecordCreatedConcurrently:
                logger.info(
                    "Engagement record created concurrently, restarting toggle",
                    extra={"subject_id": subject_id, "attempt": attempt},
                )
                continue
            logger.debug(
                f"Toggle applied: {outcome.transition.value}",
                extra={
                    "subject_id": subject_id, "actor_id": actor_id,
                    "count": outcome.count,
                },
            )
            return outcome

        raise ConcurrencyError(
            f"Toggle on '{subject_id}' did not settle after "
            f"{self._max_attempts} attempts",
            ErrorContext(subject_id=subject_id, actor_id=actor_id),
        )

    async def create(self, subject_id: SubjectId) -> None:
        """Eagerly create an empty record. No-op if it already exists."""
        try:
            async with self._db.transaction() as db:
                if await db.get(EngagementCounter, subject_id) is not None:
                    return
                await self._insert_counter(db, subject_id, version=0)
        except _RecordCreatedConcurrently:
            logger.debug(
                "Engagement record already created", extra={"subject_id": subject_id},
            )

    async def discard(self, subject_id: SubjectId) -> None:
        """Delete the record and its actor set (subject is being destroyed)."""
        async with self._db.transaction() as db:
            await remove_engagement_rows(db, subject_id)
        logger.info("Engagement record discarded", extra={"subject_id": subject_id})

    # ─── Transaction body ───────────────────────────────────────

    async def _toggle_in_transaction(
        self, db: AsyncSession, subject_id: SubjectId, actor_id: ActorId,
    ) -> ToggleOutcome:
        if await _claim(db, subject_id):
            count = (await db.execute(
                select(EngagementCounter.count)
                .where(EngagementCounter.subject_id == subject_id),
            )).scalar_one()
        elif self.lazy_create:
            if self._subject_guard and not await self._subject_guard(db, subject_id):
                raise SubjectNotFoundError(subject_id)
            await self._insert_counter(db, subject_id, version=1)
            count = 0
        else:
            raise EngagementRecordNotFoundError(subject_id)

        was_engaged = (await db.execute(
            select(EngagementActor.actor_id)
            .where(EngagementActor.subject_id == subject_id)
            .where(EngagementActor.actor_id == actor_id),
        )).scalar_one_or_none() is not None

        if was_engaged:
            await db.execute(
                delete(EngagementActor)
                .where(EngagementActor.subject_id == subject_id)
                .where(EngagementActor.actor_id == actor_id),
            )
        else:
            await db.execute(
                insert(EngagementActor).values(
                    subject_id=subject_id, actor_id=actor_id,
                    created_at=datetime.now(timezone.utc),
                ),
            )

        new_count = next_count(count, was_engaged)
        await db.execute(
            update(EngagementCounter)
            .where(EngagementCounter.subject_id == subject_id)
            .values(count=new_count)
            .execution_options(synchronize_session=False),
        )
        return ToggleOutcome(
            subject_id=subject_id, actor_id=actor_id,
            count=new_count, is_engaged=not was_engaged,
        )

    async def _insert_counter(
        self, db: AsyncSession, subject_id: SubjectId, version: int,
    ) -> None:
        now = datetime.now(timezone.utc)
        try:
            await db.execute(
                insert(EngagementCounter).values(
                    subject_id=subject_id, count=0, version=version,
                    created_at=now, updated_at=now,
                ),
            )
        except IntegrityError as e:
            raise _RecordCreatedConcurrently() from e
