"""Domain Types — identity and value types shared by the engagement core.

Invariants:
    - SubjectId and ActorId are opaque strings; the only structure the core knows
      is the "user:" namespace that marks a user as the subject (follows)
    - EngagementRecord.count always equals len(actor_ids) when produced by a store
    - ToggleOutcome carries the authoritative post-mutation state, never a cached one

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, full type-checker support
    - frozen dataclasses: records handed out by a store cannot be mutated by callers
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SubjectId = NewType("SubjectId", str)
ActorId = NewType("ActorId", str)


USER_SUBJECT_PREFIX = "user:"

# Longest actor id accepted; "user:" + id must still fit a 255-char subject_id
MAX_ACTOR_ID_LENGTH = 250


def user_subject(user_id: str) -> SubjectId:
    """Subject id under which a user's followers are recorded."""
    return SubjectId(f"{USER_SUBJECT_PREFIX}{user_id}")


def followed_user(subject_id: SubjectId) -> str | None:
    """User id behind a follow subject, or None for any other subject."""
    if subject_id.startswith(USER_SUBJECT_PREFIX):
        return subject_id[len(USER_SUBJECT_PREFIX):]
    return None


# ─── Enums ───────────────────────────────────────────────────────

class Transition(str, Enum):
    """Direction of a state flip produced by a toggle."""
    ENGAGED = "engaged"
    DISENGAGED = "disengaged"


class NotificationKind(str, Enum):
    """Notification types written by observers."""
    LIKE = "like"
    FOLLOW = "follow"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class EngagementRecord:
    """Snapshot of one subject's engagement state."""
    subject_id: SubjectId
    actor_ids: frozenset[ActorId] = field(default_factory=frozenset)
    count: int = 0

    def has_actor(self, actor_id: ActorId) -> bool:
        return actor_id in self.actor_ids


@dataclass(frozen=True)
class EngagementStatus:
    """What a caller sees: the count and whether *they* are engaged."""
    count: int
    is_engaged: bool


@dataclass(frozen=True)
class ToggleOutcome:
    """Result of one applied toggle."""
    subject_id: SubjectId
    actor_id: ActorId
    count: int
    is_engaged: bool

    @property
    def transition(self) -> Transition:
        return Transition.ENGAGED if self.is_engaged else Transition.DISENGAGED

    def to_status(self) -> EngagementStatus:
        return EngagementStatus(count=self.count, is_engaged=self.is_engaged)
