"""Notification Routes — the caller's inbox of likes and follows.

Invariants:
    - Every route requires an authenticated actor
    - An actor only ever sees or updates their own notifications
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import require_actor
from app.core.domain_types import ActorId
from app.core.errors import ResourceNotFoundError
from app.infrastructure.database import get_db
from app.models.notification import Notification
from app.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    actor: ActorId = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    query = (
        select(Notification)
        .where(Notification.recipient_id == actor)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    notifications = (await db.execute(query)).scalars().all()
    return {
        "notifications": [
            NotificationResponse.model_validate(n).model_dump(mode="json")
            for n in notifications
        ],
    }


@router.put("/read-all")
async def mark_all_read(
    actor: ActorId = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        update(Notification)
        .where(Notification.recipient_id == actor)
        .where(Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False),
    )
    await db.commit()
    return {"updated": result.rowcount}


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    actor: ActorId = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Notification)
        .where(Notification.id == notification_id)
        .where(Notification.recipient_id == actor),
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise ResourceNotFoundError("Notification", str(notification_id))
    notification.is_read = True
    await db.commit()
    return NotificationResponse.model_validate(notification)
