"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Engagement tables are subject-agnostic; projects (likes) and users (follows) are the subject types

Design Decisions:
    - All models imported here so Base.metadata is complete for create_all/alembic
"""

from app.models.engagement import EngagementActor, EngagementCounter  # noqa: F401
from app.models.notification import Notification  # noqa: F401
from app.models.project import Project  # noqa: F401
from app.models.user import UserProfile  # noqa: F401
