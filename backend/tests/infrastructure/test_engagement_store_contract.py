"""EngagementStore contract — every implementation must satisfy these.

Runs each test against InMemoryEngagementStore and SqlEngagementStore
(in-memory SQLite). Concurrency against a real durable file lives in
test_sql_engagement_store.py.
"""

import pytest

from app.core.domain_types import ActorId, SubjectId
from app.core.errors import EngagementRecordNotFoundError
from app.infrastructure.engagement_store import SqlEngagementStore
from app.infrastructure.memory_engagement_store import InMemoryEngagementStore

S = SubjectId("project-1")


@pytest.fixture(params=["memory", "sql"])
def make_store(request, test_db_manager):
    def _make(lazy_create: bool = True):
        if request.param == "memory":
            return InMemoryEngagementStore(lazy_create=lazy_create)
        return SqlEngagementStore(test_db_manager, lazy_create=lazy_create)
    return _make


@pytest.fixture
def store(make_store):
    return make_store()


async def _assert_consistent(store, subject_id=S):
    record = await store.get(subject_id)
    assert record.count == len(record.actor_ids)
    return record


async def test_missing_record_reads_empty_when_lazy(store):
    record = await store.get(S)
    assert record.count == 0
    assert record.actor_ids == frozenset()


async def test_missing_record_raises_when_not_lazy(make_store):
    store = make_store(lazy_create=False)
    with pytest.raises(EngagementRecordNotFoundError):
        await store.get(S)
    with pytest.raises(EngagementRecordNotFoundError):
        await store.apply_toggle(S, ActorId("u1"))


async def test_eager_create_then_toggle_without_lazy(make_store):
    store = make_store(lazy_create=False)
    await store.create(S)
    outcome = await store.apply_toggle(S, ActorId("u1"))
    assert outcome.count == 1
    assert outcome.is_engaged is True


async def test_create_is_idempotent(store):
    await store.create(S)
    await store.apply_toggle(S, ActorId("u1"))
    await store.create(S)
    record = await _assert_consistent(store)
    assert record.count == 1


async def test_scenario_a_like_then_unlike(store):
    await store.create(S)
    first = await store.apply_toggle(S, ActorId("U1"))
    assert (first.count, first.is_engaged) == (1, True)
    second = await store.apply_toggle(S, ActorId("U1"))
    assert (second.count, second.is_engaged) == (0, False)
    record = await _assert_consistent(store)
    assert record.actor_ids == frozenset()


async def test_scenario_b_fourth_actor(store):
    for actor in ("A", "B", "C"):
        await store.apply_toggle(S, ActorId(actor))
    outcome = await store.apply_toggle(S, ActorId("D"))
    assert (outcome.count, outcome.is_engaged) == (4, True)
    record = await _assert_consistent(store)
    assert record.actor_ids == {"A", "B", "C", "D"}


async def test_two_toggles_are_a_net_no_op(store):
    await store.apply_toggle(S, ActorId("other"))
    await store.apply_toggle(S, ActorId("u1"))
    await store.apply_toggle(S, ActorId("u1"))
    record = await _assert_consistent(store)
    assert record.actor_ids == {"other"}


async def test_three_toggles_flip_once(store):
    for _ in range(3):
        outcome = await store.apply_toggle(S, ActorId("u1"))
    assert outcome.is_engaged is True
    record = await _assert_consistent(store)
    assert record.count == 1


async def test_invariant_holds_after_every_toggle(store):
    sequence = ["a", "b", "a", "c", "d", "b", "d", "a", "e", "e", "c"]
    members: set[str] = set()
    for actor in sequence:
        outcome = await store.apply_toggle(S, ActorId(actor))
        members ^= {actor}
        assert outcome.count == len(members)
        assert outcome.is_engaged is (actor in members)
        record = await _assert_consistent(store)
        assert record.actor_ids == members


async def test_subjects_are_independent(store):
    other = SubjectId("project-2")
    await store.apply_toggle(S, ActorId("u1"))
    await store.apply_toggle(other, ActorId("u1"))
    await store.apply_toggle(other, ActorId("u2"))
    assert (await store.get(S)).count == 1
    assert (await store.get(other)).count == 2


async def test_discard_removes_record(store):
    await store.apply_toggle(S, ActorId("u1"))
    await store.discard(S)
    record = await store.get(S)
    assert record.count == 0
    assert record.actor_ids == frozenset()


async def test_discard_without_lazy_makes_record_missing(make_store):
    store = make_store(lazy_create=False)
    await store.create(S)
    await store.discard(S)
    with pytest.raises(EngagementRecordNotFoundError):
        await store.get(S)
