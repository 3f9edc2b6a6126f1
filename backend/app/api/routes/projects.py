"""Project Routes — create, browse, and delete the subjects users like.

Invariants:
    - Creating a project eagerly creates its empty engagement record
    - Deleting a project removes its engagement record in the same transaction
      (owner only); a failed delete leaves both in place
    - Each detail fetch counts one view (atomic SQL increment); listings do not
    - Like counts come from engagement_records; projects have no counter column

Design Decisions:
    - Counts fetched with one IN query per page instead of a join: the engagement
      subject_id is an opaque string, the project id a UUID column
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import (
    get_engagement_store, get_project_repository, require_actor,
)
from app.core.domain_types import ActorId, SubjectId
from app.core.errors import ForbiddenError, ResourceNotFoundError
from app.core.repository_protocols import EngagementStore
from app.infrastructure.database import get_db
from app.infrastructure.subject_repository import SqlProjectRepository
from app.models.engagement import EngagementCounter
from app.models.project import Project
from app.schemas.project import ProjectCreate, ProjectResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


async def get_project_or_404(project_id: UUID, db: AsyncSession) -> Project:
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if not project:
        raise ResourceNotFoundError("Project", str(project_id))
    return project


async def _like_counts(db: AsyncSession, projects: list[Project]) -> dict[str, int]:
    if not projects:
        return {}
    result = await db.execute(
        select(EngagementCounter.subject_id, EngagementCounter.count)
        .where(EngagementCounter.subject_id.in_([str(p.id) for p in projects])),
    )
    return {subject_id: count for subject_id, count in result.all()}


def _to_response(project: Project, likes: int) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        owner_id=project.owner_id,
        title=project.title,
        description=project.description,
        category=project.category,
        thumbnail=project.thumbnail,
        images=project.images or [],
        likes=likes,
        views=project.views or 0,
        created_at=project.created_at,
    )


@router.post(
    "", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
)
async def create_project(
    body: ProjectCreate,
    actor: ActorId = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
    store: EngagementStore = Depends(get_engagement_store),
):
    """Publish a project whose images are already hosted."""
    project = Project(
        owner_id=actor,
        title=body.title,
        description=body.description,
        category=body.category,
        thumbnail=body.thumbnail,
        images=body.images or [body.thumbnail],
    )
    db.add(project)
    await db.commit()
    await store.create(SubjectId(str(project.id)))
    logger.info(
        f"Project {project.id} created",
        extra={"subject_id": str(project.id), "actor_id": actor},
    )
    return _to_response(project, likes=0)


@router.get("")
async def list_projects(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    owner_id: str | None = Query(None),
    category: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Gallery listing, newest first."""
    query = select(Project).order_by(Project.created_at.desc())
    if owner_id:
        query = query.where(Project.owner_id == owner_id)
    if category:
        query = query.where(Project.category == category)
    query = query.limit(limit).offset(offset)

    projects = list((await db.execute(query)).scalars().all())
    counts = await _like_counts(db, projects)
    return {
        "projects": [
            _to_response(p, counts.get(str(p.id), 0)).model_dump(mode="json")
            for p in projects
        ],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: UUID, db: AsyncSession = Depends(get_db)):
    """Project detail. Every fetch counts one view."""
    result = await db.execute(
        update(Project)
        .where(Project.id == project_id)
        .values(views=Project.views + 1)
        .execution_options(synchronize_session=False),
    )
    if result.rowcount == 0:
        raise ResourceNotFoundError("Project", str(project_id))
    await db.commit()
    project = await get_project_or_404(project_id, db)
    counts = await _like_counts(db, [project])
    return _to_response(project, counts.get(str(project.id), 0))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID,
    actor: ActorId = Depends(require_actor),
    projects: SqlProjectRepository = Depends(get_project_repository),
    store: EngagementStore = Depends(get_engagement_store),
):
    """Delete a project and the engagement record it owns."""
    subject_id = SubjectId(str(project_id))
    owner_id = await projects.owner_of(subject_id)
    if owner_id is None:
        raise ResourceNotFoundError("Project", str(project_id))
    if owner_id != actor:
        raise ForbiddenError("Only the owner can delete this project")
    if not await projects.delete(subject_id):
        raise ResourceNotFoundError("Project", str(project_id))
    # SQL engagement rows went with the project; this clears the in-memory backend
    await store.discard(subject_id)
    logger.info(
        f"Project {project_id} deleted",
        extra={"subject_id": str(project_id), "actor_id": actor},
    )
