"""Tests for engagement_rules — pure toggle arithmetic, no IO."""

import pytest

from app.core.domain_types import (
    ActorId, EngagementRecord, SubjectId, Transition,
)
from app.core.engagement_rules import (
    check_invariant, flip, next_count, status_for_actor,
)
from app.core.errors import InvariantViolationError

S = SubjectId("project-1")
U1 = ActorId("u1")


def _record(*actors: str) -> EngagementRecord:
    ids = frozenset(ActorId(a) for a in actors)
    return EngagementRecord(subject_id=S, actor_ids=ids, count=len(ids))


def test_next_count_increments_when_not_engaged():
    assert next_count(0, was_engaged=False) == 1
    assert next_count(4, was_engaged=False) == 5


def test_next_count_decrements_when_engaged():
    assert next_count(3, was_engaged=True) == 2


def test_next_count_floors_at_zero():
    assert next_count(0, was_engaged=True) == 0


def test_flip_adds_absent_actor():
    updated, outcome = flip(_record(), U1)
    assert updated.actor_ids == {U1}
    assert updated.count == 1
    assert outcome.is_engaged is True
    assert outcome.transition is Transition.ENGAGED


def test_flip_removes_present_actor():
    updated, outcome = flip(_record("u1", "u2"), U1)
    assert updated.actor_ids == {"u2"}
    assert updated.count == 1
    assert outcome.is_engaged is False
    assert outcome.transition is Transition.DISENGAGED


def test_flip_does_not_mutate_input_record():
    original = _record("a")
    flip(original, U1)
    assert original.actor_ids == {"a"}
    assert original.count == 1


def test_scenario_b_fourth_actor_joins():
    updated, outcome = flip(_record("A", "B", "C"), ActorId("D"))
    assert outcome.count == 4 and outcome.is_engaged
    assert updated.actor_ids == {"A", "B", "C", "D"}


@pytest.mark.parametrize("flips, engaged", [(1, True), (2, False), (3, True), (4, False)])
def test_repeated_flips_alternate_state(flips, engaged):
    record = _record()
    for _ in range(flips):
        record, outcome = flip(record, U1)
        assert record.count == len(record.actor_ids)
    assert outcome.is_engaged is engaged


def test_check_invariant_passes_when_consistent():
    check_invariant(S, 3, 3)


def test_check_invariant_raises_on_mismatch(caplog):
    with pytest.raises(InvariantViolationError) as exc_info:
        check_invariant(S, 5, 4)
    assert exc_info.value.count == 5
    assert exc_info.value.actors == 4
    assert exc_info.value.http_status == 500
    assert any(r.levelname == "CRITICAL" for r in caplog.records)


def test_anonymous_viewer_never_engaged():
    status = status_for_actor(_record("u1", "u2", "u3", "u4", "u5"), None)
    assert status.count == 5
    assert status.is_engaged is False


def test_status_for_member_and_non_member():
    record = _record("u1")
    assert status_for_actor(record, U1).is_engaged is True
    assert status_for_actor(record, ActorId("u9")).is_engaged is False
