"""Engagement Routes — like toggle and like status for projects.

Invariants:
    - POST .../toggle requires an authenticated actor (401 otherwise)
    - GET .../status is open to anonymous callers (isEngaged always false for them)
    - Unknown project -> 404
    - Observers are scheduled as background tasks with the committed outcome
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from app.api.dependencies import (
    get_current_actor, get_engagement_observers, get_query_service, get_toggle_service,
)
from app.core.domain_types import ActorId, EngagementStatus, SubjectId
from app.core.repository_protocols import EngagementObserver
from app.schemas.engagement import EngagementStatusResponse
from app.services.engagement_events import dispatch_engagement_event
from app.services.query_engagement import EngagementQueryService
from app.services.toggle_engagement import ToggleEngagementService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["engagement"])


@router.post(
    "/{project_id}/engagement/toggle", response_model=EngagementStatusResponse,
)
async def toggle_engagement(
    project_id: str,
    background_tasks: BackgroundTasks,
    actor: ActorId | None = Depends(get_current_actor),
    service: ToggleEngagementService = Depends(get_toggle_service),
    observers: list[EngagementObserver] = Depends(get_engagement_observers),
):
    """Like the project if the caller hasn't, unlike it if they have."""
    outcome = await service.toggle(SubjectId(project_id), actor)
    background_tasks.add_task(dispatch_engagement_event, observers, outcome)
    return EngagementStatusResponse.from_status(outcome.to_status())


@router.get(
    "/{project_id}/engagement/status", response_model=EngagementStatusResponse,
)
async def engagement_status(
    project_id: str,
    actor: ActorId | None = Depends(get_current_actor),
    service: EngagementQueryService = Depends(get_query_service),
):
    """Like count plus whether the caller likes the project."""
    status: EngagementStatus = await service.status_for(SubjectId(project_id), actor)
    return EngagementStatusResponse.from_status(status)
