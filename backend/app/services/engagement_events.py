"""Engagement Events — observers of committed toggle transitions.

Invariants:
    - Observers run after the toggle has committed (FastAPI background task)
    - One failing observer never prevents the others from running
    - Observer failures are logged, never re-raised: the toggle already succeeded
    - NotificationObserver writes only on ENGAGED, and never to the actor themself
    - Likes notify the project owner; follows notify the followed user

Design Decisions:
    - Own DB sessions per observer call: the request is finished by the time
      background tasks run
"""

import logging
from collections.abc import Sequence

from app.core.domain_types import NotificationKind, ToggleOutcome, Transition, followed_user
from app.core.repository_protocols import EngagementObserver
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.subject_repository import SqlProjectRepository, SqlUserRepository
from app.models.notification import Notification

logger = logging.getLogger(__name__)


class LoggingEngagementObserver:
    """Emits one structured log line per transition."""

    async def on_transition(self, outcome: ToggleOutcome) -> None:
        logger.info(
            f"engagement.{outcome.transition.value}",
            extra={
                "subject_id": outcome.subject_id,
                "actor_id": outcome.actor_id,
                "count": outcome.count,
                "transition": outcome.transition.value,
            },
        )


class NotificationObserver:
    """Writes a 'like' notification to the project owner, 'follow' to the followed user."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def on_transition(self, outcome: ToggleOutcome) -> None:
        if outcome.transition is not Transition.ENGAGED:
            return
        if followed_user(outcome.subject_id) is not None:
            kind = NotificationKind.FOLLOW
            recipient = await SqlUserRepository(self._db).owner_of(outcome.subject_id)
        else:
            kind = NotificationKind.LIKE
            recipient = await SqlProjectRepository(self._db).owner_of(outcome.subject_id)

        if recipient is None:
            logger.warning(
                f"Subject vanished before {kind.value} notification",
                extra={"subject_id": outcome.subject_id},
            )
            return
        if recipient == outcome.actor_id:
            return
        async with self._db.transaction() as db:
            db.add(Notification(
                recipient_id=recipient,
                actor_id=outcome.actor_id,
                kind=kind.value,
                subject_id=outcome.subject_id,
            ))


async def dispatch_engagement_event(
    observers: Sequence[EngagementObserver], outcome: ToggleOutcome,
) -> None:
    """Run every observer in order; log and continue on failure."""
    for observer in observers:
        try:
            await observer.on_transition(outcome)
        except Exception as e:
            logger.error(
                f"Engagement observer {type(observer).__name__} failed: {e}",
                exc_info=True,
                extra={"subject_id": outcome.subject_id},
            )
