"""Subject Repositories — answer "does this subject exist?" for projects and users.

Invariants:
    - Every method opens and closes its own short session from the manager: a
      request never holds one pooled connection while waiting for another
    - Project subjects are UUID strings, user subjects are "user:<id>"; a subject
      id of the wrong shape simply does not exist (no 500 on bad ids)
    - Project deletion and engagement cleanup commit or roll back together
    - subject_row_exists holds a share lock on the subject row until the caller's
      transaction ends (PostgreSQL FOR SHARE; SQLite already serializes writers)

Design Decisions:
    - Project deletion locks the project row before touching engagement rows: a
      toggle lazily creating the record holds FOR SHARE on that row, so the
      delete waits for it and then removes what it created
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import SubjectId, followed_user
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.engagement_store import remove_engagement_rows
from app.models.project import Project
from app.models.user import UserProfile

logger = logging.getLogger(__name__)


def _project_uuid(subject_id: SubjectId) -> UUID | None:
    try:
        return UUID(subject_id)
    except ValueError:
        return None


async def subject_row_exists(db: AsyncSession, subject_id: SubjectId) -> bool:
    """Existence check on the caller's transaction, share-locking the row."""
    user_id = followed_user(subject_id)
    if user_id is not None:
        query = select(UserProfile.id).where(UserProfile.id == user_id)
    else:
        project_id = _project_uuid(subject_id)
        if project_id is None:
            return False
        query = select(Project.id).where(Project.id == project_id)
    result = await db.execute(query.with_for_update(read=True))
    return result.scalar_one_or_none() is not None


class SqlProjectRepository:
    """SubjectRepository over the projects table."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def exists(self, subject_id: SubjectId) -> bool:
        return await self.owner_of(subject_id) is not None

    async def owner_of(self, subject_id: SubjectId) -> str | None:
        """Owner actor id of the project, or None if it does not exist."""
        project_id = _project_uuid(subject_id)
        if project_id is None:
            return None
        async with self._db.session() as db:
            result = await db.execute(
                select(Project.owner_id).where(Project.id == project_id),
            )
            return result.scalar_one_or_none()

    async def delete(self, subject_id: SubjectId) -> bool:
        """Delete the project and its engagement record in one transaction."""
        project_id = _project_uuid(subject_id)
        if project_id is None:
            return False
        async with self._db.transaction() as db:
            result = await db.execute(
                delete(Project).where(Project.id == project_id),
            )
            if result.rowcount == 0:
                return False
            await remove_engagement_rows(db, subject_id)
        logger.info("Project deleted with its engagement record", extra={"subject_id": subject_id})
        return True


class SqlUserRepository:
    """SubjectRepository over user_profiles, for "user:<id>" subjects."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def exists(self, subject_id: SubjectId) -> bool:
        return await self.owner_of(subject_id) is not None

    async def owner_of(self, subject_id: SubjectId) -> str | None:
        """The followed user's id if their profile exists."""
        user_id = followed_user(subject_id)
        if user_id is None:
            return None
        async with self._db.session() as db:
            result = await db.execute(
                select(UserProfile.id).where(UserProfile.id == user_id),
            )
            return result.scalar_one_or_none()
