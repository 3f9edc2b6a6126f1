"""API Dependencies — wires Protocol implementations into FastAPI routes.

Invariants:
    - Routes receive services and collaborators only through these providers
    - Tests swap any provider via app.dependency_overrides
    - The database manager is looked up at call time (initialized by lifespan)
    - Toggle and status routes take no request-scoped session: repositories and
      the store each open short sessions, one pooled connection at a time

Design Decisions:
    - HTTPBearer(auto_error=False): a missing token is an anonymous caller, not a 403
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import get_settings
from app.core.domain_types import ActorId, SubjectId
from app.core.errors import UnauthenticatedError
from app.core.repository_protocols import (
    EngagementObserver, EngagementStore, IdentityProvider, SubjectRepository,
)
from app.infrastructure.database import get_db_manager
from app.infrastructure.engagement_store import SqlEngagementStore
from app.infrastructure.identity import JwtIdentityProvider
from app.infrastructure.memory_engagement_store import InMemoryEngagementStore
from app.infrastructure.subject_repository import (
    SqlProjectRepository, SqlUserRepository, subject_row_exists,
)
from app.services.engagement_events import LoggingEngagementObserver, NotificationObserver
from app.services.query_engagement import EngagementQueryService
from app.services.toggle_engagement import ToggleEngagementService

security = HTTPBearer(auto_error=False)

# Process-wide store for the "memory" backend (single uvicorn worker only)
_memory_store: InMemoryEngagementStore | None = None


# ─── Identity ───────────────────────────────────────────────────

def get_identity_provider() -> IdentityProvider:
    settings = get_settings()
    return JwtIdentityProvider(settings.jwt_secret, settings.jwt_algorithm)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> ActorId | None:
    """Verified actor id, or None for anonymous callers."""
    token = credentials.credentials if credentials else None
    return await identity.resolve_actor(token)


async def require_actor(
    actor: ActorId | None = Depends(get_current_actor),
) -> ActorId:
    if actor is None:
        raise UnauthenticatedError()
    return actor


# ─── Engagement ─────────────────────────────────────────────────

async def _subject_exists(subject_id: SubjectId) -> bool:
    async with get_db_manager().session() as db:
        return await subject_row_exists(db, subject_id)


def get_engagement_store() -> EngagementStore:
    global _memory_store
    settings = get_settings()
    if settings.engagement_store_backend == "memory":
        if _memory_store is None:
            _memory_store = InMemoryEngagementStore(
                lazy_create=settings.engagement_lazy_create,
                subject_guard=_subject_exists,
            )
        return _memory_store
    return SqlEngagementStore(
        get_db_manager(),
        lazy_create=settings.engagement_lazy_create,
        max_attempts=settings.engagement_max_attempts,
        subject_guard=subject_row_exists,
    )


def get_project_repository() -> SqlProjectRepository:
    return SqlProjectRepository(get_db_manager())


def get_user_repository() -> SqlUserRepository:
    return SqlUserRepository(get_db_manager())


def get_toggle_service(
    store: EngagementStore = Depends(get_engagement_store),
    subjects: SubjectRepository = Depends(get_project_repository),
) -> ToggleEngagementService:
    return ToggleEngagementService(store, subjects)


def get_query_service(
    store: EngagementStore = Depends(get_engagement_store),
    subjects: SubjectRepository = Depends(get_project_repository),
) -> EngagementQueryService:
    return EngagementQueryService(store, subjects)


def get_follow_toggle_service(
    store: EngagementStore = Depends(get_engagement_store),
    users: SubjectRepository = Depends(get_user_repository),
) -> ToggleEngagementService:
    return ToggleEngagementService(store, users)


def get_follow_query_service(
    store: EngagementStore = Depends(get_engagement_store),
    users: SubjectRepository = Depends(get_user_repository),
) -> EngagementQueryService:
    return EngagementQueryService(store, users)


def get_engagement_observers() -> list[EngagementObserver]:
    return [LoggingEngagementObserver(), NotificationObserver(get_db_manager())]
