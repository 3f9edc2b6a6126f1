"""User Routes — profiles, and following users through the engagement store.

Invariants:
    - A user's followers are the engaged set of subject "user:<id>"
    - PUT /me creates or updates the caller's own profile; only then can others follow
    - Following yourself -> 403; following an unknown user -> 404
    - Follow toggle and status share the wire shape of project likes
      ({"count", "isEngaged"}), with observers scheduled as background tasks
"""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Path
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import (
    get_current_actor, get_engagement_observers, get_engagement_store,
    get_follow_query_service, get_follow_toggle_service, require_actor,
)
from app.core.domain_types import MAX_ACTOR_ID_LENGTH, ActorId, user_subject
from app.core.errors import ErrorContext, ForbiddenError, ResourceNotFoundError
from app.core.repository_protocols import EngagementObserver, EngagementStore
from app.infrastructure.database import get_db
from app.models.engagement import EngagementCounter
from app.models.user import UserProfile
from app.schemas.engagement import EngagementStatusResponse
from app.schemas.user import UserProfileResponse, UserProfileUpdate
from app.services.engagement_events import dispatch_engagement_event
from app.services.query_engagement import EngagementQueryService
from app.services.toggle_engagement import ToggleEngagementService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])

UserIdPath = Annotated[str, Path(min_length=1, max_length=MAX_ACTOR_ID_LENGTH)]


async def _follower_count(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(EngagementCounter.count)
        .where(EngagementCounter.subject_id == user_subject(user_id)),
    )
    return result.scalar_one_or_none() or 0


def _to_response(profile: UserProfile, followers: int) -> UserProfileResponse:
    return UserProfileResponse(
        id=profile.id,
        display_name=profile.display_name,
        bio=profile.bio,
        followers=followers,
        created_at=profile.created_at,
    )


@router.put("/me", response_model=UserProfileResponse)
async def save_my_profile(
    body: UserProfileUpdate,
    actor: ActorId = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
    store: EngagementStore = Depends(get_engagement_store),
):
    """Create or update the caller's profile."""
    profile = await db.get(UserProfile, actor)
    created = profile is None
    if created:
        profile = UserProfile(id=actor, display_name=body.display_name, bio=body.bio)
        db.add(profile)
    else:
        profile.display_name = body.display_name
        profile.bio = body.bio
        profile.updated_at = datetime.now(timezone.utc)
    await db.commit()

    if created:
        await store.create(user_subject(actor))
        logger.info("Profile created", extra={"actor_id": actor})
    return _to_response(profile, await _follower_count(db, actor))


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_profile(
    user_id: UserIdPath, db: AsyncSession = Depends(get_db),
):
    profile = await db.get(UserProfile, user_id)
    if profile is None:
        raise ResourceNotFoundError("User", user_id)
    return _to_response(profile, await _follower_count(db, user_id))


@router.post("/{user_id}/follow/toggle", response_model=EngagementStatusResponse)
async def toggle_follow(
    background_tasks: BackgroundTasks,
    user_id: UserIdPath,
    actor: ActorId | None = Depends(get_current_actor),
    service: ToggleEngagementService = Depends(get_follow_toggle_service),
    observers: list[EngagementObserver] = Depends(get_engagement_observers),
):
    """Follow the user if the caller doesn't, unfollow if they do."""
    subject_id = user_subject(user_id)
    if actor is not None and actor == user_id:
        raise ForbiddenError(
            "You cannot follow yourself", ErrorContext(subject_id=subject_id),
        )
    outcome = await service.toggle(subject_id, actor)
    background_tasks.add_task(dispatch_engagement_event, observers, outcome)
    return EngagementStatusResponse.from_status(outcome.to_status())


@router.get("/{user_id}/follow/status", response_model=EngagementStatusResponse)
async def follow_status(
    user_id: UserIdPath,
    actor: ActorId | None = Depends(get_current_actor),
    service: EngagementQueryService = Depends(get_follow_query_service),
):
    """Follower count plus whether the caller follows the user."""
    status = await service.status_for(user_subject(user_id), actor)
    return EngagementStatusResponse.from_status(status)
