"""DatabaseSessionManager — error mapping and transaction scope."""

import pytest
from sqlalchemy import func, insert, select, text

from app.core.errors import IntegrityConflictError, StorageUnavailableError
from app.models.engagement import EngagementCounter


async def test_constraint_violation_maps_to_integrity_conflict(test_db_manager):
    async with test_db_manager.transaction() as db:
        await db.execute(insert(EngagementCounter).values(subject_id="s1", count=0))

    with pytest.raises(IntegrityConflictError) as exc_info:
        async with test_db_manager.transaction() as db:
            await db.execute(insert(EngagementCounter).values(subject_id="s1", count=0))
    assert exc_info.value.context.retryable is False


async def test_check_constraint_is_not_reported_as_unavailable(test_db_manager):
    with pytest.raises(IntegrityConflictError):
        async with test_db_manager.transaction() as db:
            await db.execute(insert(EngagementCounter).values(subject_id="s2", count=-1))


async def test_transaction_rolls_back_on_error(test_db_manager):
    with pytest.raises(RuntimeError):
        async with test_db_manager.transaction() as db:
            await db.execute(insert(EngagementCounter).values(subject_id="s3", count=0))
            raise RuntimeError("abort")

    async with test_db_manager.session() as db:
        total = (await db.execute(select(func.count()).select_from(EngagementCounter))).scalar_one()
    assert total == 0


async def test_operational_errors_stay_retryable(test_db_manager):
    with pytest.raises(StorageUnavailableError) as exc_info:
        async with test_db_manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))
    assert exc_info.value.context.retryable is True
