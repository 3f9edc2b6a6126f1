"""Engagement Rules — pure toggle arithmetic and invariant checks, no IO.

Invariants:
    - A toggle flips exactly one actor's membership and moves count by exactly one
    - count never drops below 0
    - An anonymous viewer (actor_id None) is never reported as engaged

Design Decisions:
    - Pure functions shared by every EngagementStore implementation, so the
      SQL and in-memory stores cannot drift apart on the arithmetic
"""

import logging

from app.core.domain_types import (
    ActorId, EngagementRecord, EngagementStatus, SubjectId, ToggleOutcome,
)
from app.core.errors import InvariantViolationError

logger = logging.getLogger(__name__)


def next_count(count: int, was_engaged: bool) -> int:
    """Counter value after one flip."""
    if was_engaged:
        return max(count - 1, 0)
    return count + 1


def flip(
    record: EngagementRecord, actor_id: ActorId,
) -> tuple[EngagementRecord, ToggleOutcome]:
    """Apply one toggle to a record snapshot. Returns (new_record, outcome)."""
    was_engaged = record.has_actor(actor_id)
    if was_engaged:
        actors = record.actor_ids - {actor_id}
    else:
        actors = record.actor_ids | {actor_id}
    count = next_count(record.count, was_engaged)
    updated = EngagementRecord(
        subject_id=record.subject_id, actor_ids=frozenset(actors), count=count,
    )
    outcome = ToggleOutcome(
        subject_id=record.subject_id, actor_id=actor_id,
        count=count, is_engaged=not was_engaged,
    )
    return updated, outcome


def check_invariant(subject_id: SubjectId, count: int, actors: int) -> None:
    """Raise InvariantViolationError if the stored counter disagrees with the set.

    Logged at CRITICAL before raising. The record is left untouched.
    """
    if count == actors:
        return
    logger.critical(
        f"Engagement invariant violated: count={count} actors={actors}",
        extra={"subject_id": subject_id, "count": count},
    )
    raise InvariantViolationError(subject_id, count, actors)


def status_for_actor(
    record: EngagementRecord, actor_id: ActorId | None,
) -> EngagementStatus:
    """Status as seen by actor_id; anonymous viewers are never engaged."""
    engaged = actor_id is not None and record.has_actor(actor_id)
    return EngagementStatus(count=record.count, is_engaged=engaged)
