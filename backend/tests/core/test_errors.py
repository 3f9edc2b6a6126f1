"""Error hierarchy — status codes, envelopes, and retryability."""

from app.core.errors import (
    ConcurrencyError, ErrorCategory, ErrorSeverity, ForbiddenError, IntegrityConflictError,
    InvariantViolationError, PortfolioError, ResourceNotFoundError,
    StorageUnavailableError, SubjectNotFoundError, UnauthenticatedError,
)


def test_all_errors_share_the_base_class():
    for exc in (
        UnauthenticatedError(),
        ForbiddenError("no"),
        SubjectNotFoundError("s1"),
        ResourceNotFoundError("Project", "p1"),
        ConcurrencyError("busy"),
        StorageUnavailableError("down", "execute"),
        InvariantViolationError("s1", 2, 1),
    ):
        assert isinstance(exc, PortfolioError)


def test_http_statuses():
    assert UnauthenticatedError().http_status == 401
    assert ForbiddenError("no").http_status == 403
    assert SubjectNotFoundError("s1").http_status == 404
    assert ConcurrencyError("busy").http_status == 409
    assert StorageUnavailableError("down", "execute").http_status == 503
    assert InvariantViolationError("s1", 2, 1).http_status == 500


def test_unauthenticated_has_user_facing_message():
    body = UnauthenticatedError().to_response()
    assert body["error"]["code"] == "UNAUTHENTICATED"
    assert body["error"]["message"] == "Log in to continue."
    assert body["error"]["category"] == ErrorCategory.AUTHENTICATION.value


def test_subject_not_found_carries_subject_id():
    body = SubjectNotFoundError("p-42").to_response()
    assert body["error"]["code"] == "SUBJECT_NOT_FOUND"
    assert body["error"]["context"]["subject_id"] == "p-42"
    assert body["error"]["context"]["retryable"] is False


def test_storage_unavailable_is_retryable_and_critical():
    exc = StorageUnavailableError("connection reset", "execute")
    assert exc.severity is ErrorSeverity.CRITICAL
    assert exc.to_response()["error"]["context"]["retryable"] is True


def test_invariant_violation_hides_details_from_clients():
    exc = InvariantViolationError("s1", 7, 6)
    body = exc.to_response()
    assert "7" not in body["error"]["message"]
    assert exc.context.debug_info == {"count": 7, "actors": 6}


def test_integrity_conflict_is_not_retryable():
    exc = IntegrityConflictError("duplicate key")
    assert exc.http_status == 409
    assert exc.category is ErrorCategory.CONFLICT
    assert exc.to_response()["error"]["context"]["retryable"] is False
