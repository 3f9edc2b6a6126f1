"""Engagement ORM — the per-subject counter row and its actor set.

Invariants:
    - One engagement_records row per subject (subject_id primary key)
    - (subject_id, actor_id) is the primary key of engagement_actors: membership
      is an indexed lookup and an actor can never be counted twice
    - count == number of engagement_actors rows for the subject after every commit
    - version increases by one on every toggle; writers claim the row by bumping it

Design Decisions:
    - subject_id is an opaque string, no FK to projects or users: the store serves
      any subject type. Subject deletion removes these rows in its own transaction
    - ON DELETE CASCADE on actors for databases that enforce FKs; discard()
      still deletes actors explicitly so SQLite without PRAGMA foreign_keys works
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EngagementCounter(Base):
    """Denormalized like counter for one subject."""
    __tablename__ = "engagement_records"
    __table_args__ = (
        CheckConstraint("count >= 0", name="ck_engagement_records_count_non_negative"),
    )

    subject_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )


class EngagementActor(Base):
    """Membership of one actor in one subject's engaged set."""
    __tablename__ = "engagement_actors"

    subject_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("engagement_records.subject_id", ondelete="CASCADE"),
        primary_key=True,
    )
    actor_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
