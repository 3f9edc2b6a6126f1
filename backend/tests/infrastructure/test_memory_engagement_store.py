"""InMemoryEngagementStore — per-subject locking, cancellation, invariant checks, discard."""

import asyncio

import pytest

from app.core.domain_types import ActorId, EngagementRecord, SubjectId
from app.core.errors import InvariantViolationError, SubjectNotFoundError
from app.infrastructure.memory_engagement_store import InMemoryEngagementStore

S = SubjectId("project-1")


async def test_concurrent_distinct_actors_all_counted():
    store = InMemoryEngagementStore()
    n = 50
    outcomes = await asyncio.gather(*(
        store.apply_toggle(S, ActorId(f"user-{i}")) for i in range(n)
    ))
    assert all(o.is_engaged for o in outcomes)
    assert sorted(o.count for o in outcomes) == list(range(1, n + 1))
    record = await store.get(S)
    assert record.count == n
    assert len(record.actor_ids) == n


async def test_concurrent_same_actor_double_click_is_serialized():
    store = InMemoryEngagementStore()
    outcomes = await asyncio.gather(
        store.apply_toggle(S, ActorId("u1")),
        store.apply_toggle(S, ActorId("u1")),
    )
    assert sorted(o.is_engaged for o in outcomes) == [False, True]
    record = await store.get(S)
    assert record.count == 0
    assert record.actor_ids == frozenset()


async def test_odd_number_of_concurrent_same_actor_toggles_leaves_one_like():
    store = InMemoryEngagementStore()
    await asyncio.gather(*(store.apply_toggle(S, ActorId("u1")) for _ in range(5)))
    record = await store.get(S)
    assert record.count == 1
    assert record.actor_ids == {"u1"}


async def test_cancelled_toggle_leaves_record_untouched():
    store = InMemoryEngagementStore()
    await store.apply_toggle(S, ActorId("u1"))

    task = asyncio.create_task(store.apply_toggle(S, ActorId("u2")))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    record = await store.get(S)
    assert record.actor_ids == {"u1"}
    assert record.count == 1


async def test_different_subjects_do_not_share_a_lock():
    store = InMemoryEngagementStore()
    lock = store._lock_for(S)
    await lock.acquire()
    try:
        outcome = await asyncio.wait_for(
            store.apply_toggle(SubjectId("project-2"), ActorId("u1")), timeout=1,
        )
        assert outcome.count == 1
    finally:
        lock.release()


async def test_corrupted_record_is_reported_not_repaired():
    store = InMemoryEngagementStore()
    store._records[S] = EngagementRecord(
        subject_id=S, actor_ids=frozenset({ActorId("u1")}), count=3,
    )
    with pytest.raises(InvariantViolationError):
        await store.get(S)
    assert store._records[S].count == 3


async def test_toggle_queued_behind_discard_does_not_resurrect_record():
    alive = {S}

    async def subject_exists(subject_id):
        return subject_id in alive

    store = InMemoryEngagementStore(subject_guard=subject_exists)
    await store.apply_toggle(S, ActorId("u1"))

    lock = store._lock_for(S)
    await lock.acquire()
    discard_task = asyncio.create_task(store.discard(S))
    toggle_task = asyncio.create_task(store.apply_toggle(S, ActorId("u2")))
    await asyncio.sleep(0)
    alive.discard(S)
    lock.release()

    await discard_task
    with pytest.raises(SubjectNotFoundError):
        await toggle_task
    assert S not in store._records
    assert store._lock_for(S) is lock


async def test_guard_only_consulted_for_missing_records():
    checked = []

    async def subject_exists(subject_id):
        checked.append(subject_id)
        return True

    store = InMemoryEngagementStore(subject_guard=subject_exists)
    await store.apply_toggle(S, ActorId("u1"))
    await store.apply_toggle(S, ActorId("u2"))
    assert checked == [S]
