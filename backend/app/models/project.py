"""Project ORM — the Subject users like.

Invariants:
    - id is UUID primary key
    - title and thumbnail are non-nullable
    - images holds image URLs only (files live with the media host)
    - The like counter is NOT a column here: it is owned by engagement_records
    - views only grows, one per detail fetch, incremented in SQL (never read-modify-write)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Project(Base):
    """Portfolio project uploaded by a student."""
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    thumbnail: Mapped[str] = mapped_column(String(2048), nullable=False)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
