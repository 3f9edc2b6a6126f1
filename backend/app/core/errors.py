"""Error Hierarchy — typed, categorized exceptions for every engagement failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PortfolioError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    subject_id: str | None = None
    actor_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retryable: bool = False


class PortfolioError(Exception):
    """Base exception for all portfolio service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "subject_id": self.context.subject_id,
                    "retryable": self.context.retryable,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class UnauthenticatedError(PortfolioError):
    """No actor could be resolved for an operation that requires one."""
    def __init__(self, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Log in to continue."
        super().__init__(
            "Authentication required", "UNAUTHENTICATED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, ctx, 401,
        )


class ForbiddenError(PortfolioError):
    """Actor is authenticated but not allowed to perform the operation."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(PortfolioError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class SubjectNotFoundError(PortfolioError):
    """Engagement target does not exist in the subject repository."""
    def __init__(self, subject_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.subject_id = subject_id
        super().__init__(
            f"Subject '{subject_id}' not found",
            "SUBJECT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.subject_id = subject_id


class EngagementRecordNotFoundError(PortfolioError):
    """Store has no record for the subject and lazy creation is disabled."""
    def __init__(self, subject_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.subject_id = subject_id
        super().__init__(
            f"No engagement record for subject '{subject_id}'",
            "ENGAGEMENT_RECORD_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.subject_id = subject_id


class ConcurrencyError(PortfolioError):
    """Concurrent modification could not be resolved within the attempt budget."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retryable = True
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


class IntegrityConflictError(PortfolioError):
    """A write broke a database constraint. Retrying the same write fails again."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INTEGRITY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StorageUnavailableError(PortfolioError):
    """Durable storage failed. The operation was rolled back and may be retried."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retryable = True
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation


class InvariantViolationError(PortfolioError):
    """A read observed count != |actor_ids|. Internal only, never auto-corrected."""
    def __init__(
        self, subject_id: str, count: int, actors: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.subject_id = subject_id
        ctx.user_message = "An unexpected error occurred"
        ctx.debug_info = {"count": count, "actors": actors}
        super().__init__(
            f"Engagement invariant violated for '{subject_id}': "
            f"count={count}, actors={actors}",
            "INVARIANT_VIOLATION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.subject_id = subject_id
        self.count = count
        self.actors = actors
