"""Domain Types — value objects and enum serialization."""

import dataclasses

import pytest

from app.core.domain_types import (
    ActorId, EngagementRecord, EngagementStatus, SubjectId, ToggleOutcome, Transition,
    followed_user, user_subject,
)


def test_identity_types_wrap_str():
    assert SubjectId("p1") == "p1"
    assert ActorId("u1") == "u1"


def test_empty_record_defaults():
    record = EngagementRecord(subject_id=SubjectId("p1"))
    assert record.count == 0
    assert record.actor_ids == frozenset()
    assert not record.has_actor(ActorId("u1"))


def test_record_is_frozen():
    record = EngagementRecord(subject_id=SubjectId("p1"))
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.count = 3


def test_outcome_transition_and_status():
    outcome = ToggleOutcome(
        subject_id=SubjectId("p1"), actor_id=ActorId("u1"), count=2, is_engaged=True,
    )
    assert outcome.transition is Transition.ENGAGED
    assert outcome.to_status() == EngagementStatus(count=2, is_engaged=True)


def test_transition_values():
    assert Transition.ENGAGED.value == "engaged"
    assert Transition.DISENGAGED.value == "disengaged"


def test_user_subjects_round_trip_to_the_user():
    assert user_subject("maker") == "user:maker"
    assert followed_user(user_subject("maker")) == "maker"
    assert followed_user(SubjectId("3f2b0c1e-0000-0000-0000-000000000000")) is None
