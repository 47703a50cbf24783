"""Error Hierarchy — typed, categorized exceptions for every replay-API failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable; infrastructure errors (5xx) are critical
    - to_response() produces the REST envelope; 5xx envelopes never carry internal detail
    - MissingCredentialHash is NOT a ReplayApiError: it is a programming defect

Design Decisions:
    - Single hierarchy with ReplayApiError base: FastAPI global handler catches all
    - The exception class is the error kind: stores raise, routes never inspect strings
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

OPAQUE_MESSAGE = "the server encountered a problem and could not process your request"


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
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource: str | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class ReplayApiError(Exception):
    """Base exception for all replay-API errors."""

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

    @property
    def public_message(self) -> str:
        """Message safe to show a client."""
        if self.http_status >= 500:
            return OPAQUE_MESSAGE
        return self.message

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.public_message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Domain Errors (4xx) ────────────────────────────────────────

class FailedValidationError(ReplayApiError):
    """User-correctable input defects, as field → message pairs."""
    def __init__(self, errors: dict[str, str], context: ErrorContext | None = None):
        super().__init__(
            "request failed validation",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 422,
        )
        self.errors = dict(errors)

    def to_response(self) -> dict:
        body = super().to_response()
        body["error"]["details"] = self.errors
        return body


class DuplicateEmailError(FailedValidationError):
    """Email uniqueness violated on insert or update."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            {"email": "a user with this email address already exists"}, context,
        )
        self.code = "DUPLICATE_EMAIL"


class RecordNotFoundError(ReplayApiError):
    """No such record, user, or valid token."""
    def __init__(self, resource: str = "record", context: ErrorContext | None = None):
        super().__init__(
            "the requested resource could not be found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, context, 404,
        )
        self.resource = resource


class EditConflictError(ReplayApiError):
    """Conditional write lost the race: stored version moved on."""
    def __init__(self, resource: str = "record", context: ErrorContext | None = None):
        super().__init__(
            "unable to update the record due to an edit conflict, please try again",
            "EDIT_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.resource = resource


class InvalidCredentialsError(ReplayApiError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "invalid authentication credentials",
            "INVALID_CREDENTIALS", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidAuthenticationTokenError(ReplayApiError):
    """Malformed bearer header, or token unknown / expired / wrong scope."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "invalid or missing authentication token",
            "INVALID_AUTHENTICATION_TOKEN", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AuthenticationRequiredError(ReplayApiError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "you must be authenticated to access this resource",
            "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.INFO, context, 401,
        )


class InactiveAccountError(ReplayApiError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "your user account must be activated to access this resource",
            "INACTIVE_ACCOUNT", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.INFO, context, 403,
        )


class NotPermittedError(ReplayApiError):
    def __init__(self, code: str, context: ErrorContext | None = None):
        super().__init__(
            "your user account doesn't have the necessary permissions to access this resource",
            "NOT_PERMITTED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.INFO, context, 403,
        )
        self.permission = code


class RateLimitExceededError(ReplayApiError):
    """Caller's request bucket is empty."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "rate limit exceeded",
            "RATE_LIMIT_EXCEEDED", ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, context, 429,
        )


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class PersistenceError(ReplayApiError):
    """Storage fault or store-call timeout."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation


class HashingError(ReplayApiError):
    """Credential hash computation or comparison fault."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Credential hashing failed: {message}",
            "HASHING_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Programming Defects ────────────────────────────────────────

class MissingCredentialHash(AssertionError):
    """A user headed for persistence carries no credential hash.

    Derives from AssertionError so it bypasses every ReplayApiError handler
    and surfaces through the catch-all as an opaque 500 with a traceback.
    """


class UnsafeSortParameter(AssertionError):
    """A sort key reached the store without passing the allow-list check."""
