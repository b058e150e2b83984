"""Error Hierarchy — typed, categorized exceptions for all SPEX failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are terminal for the call; nothing is retried internally
    - to_response() produces the REST envelope
    - InvalidCredentialError never says which credential check failed

Design Decisions:
    - Single hierarchy with SpexError base: FastAPI global handler catches all (ADR: uniform error shape)
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
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    uid: str | None = None
    debug_info: dict[str, Any] | None = None


class SpexError(Exception):
    """Base exception for all SPEX errors."""

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
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class MissingParamsError(SpexError):
    """Required request fields are absent."""
    def __init__(self, missing: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Missing required parameters: {', '.join(missing)}",
            "MISSING_PARAMS", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.missing = missing


class UnauthenticatedError(SpexError):
    """No bearer credential, or the Authorization header is malformed."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A bearer token is required",
            "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidCredentialError(SpexError):
    """Token failed verification. Deliberately undifferentiated."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Token expired or invalid",
            "INVALID_CREDENTIAL", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(SpexError):
    """Credential is valid but scoped to another card."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Token does not grant access to this card",
            "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class AdminOnlyError(SpexError):
    """Admin key missing, wrong, or admin surface disabled."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Admin key required",
            "ADMIN_ONLY", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class CardNotFoundError(SpexError):
    """Requested card does not exist."""
    def __init__(self, uid: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.uid = uid
        super().__init__(
            f"Card '{uid}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.uid = uid


class AlreadyClaimedError(SpexError):
    """The conditional claim write lost: the card already has an owner.

    Terminal. Retrying cannot change the outcome; the caller re-fetches state
    via lookup. The owner may be the caller itself (replayed request).
    """
    def __init__(self, uid: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.uid = uid
        super().__init__(
            f"Card '{uid}' has already been claimed",
            "ALREADY_CLAIMED", ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, ctx, 409,
        )
        self.uid = uid


class UploadRejectedError(SpexError):
    """Uploaded file missing, of the wrong type, or too large."""
    def __init__(
        self, message: str, code: str, http_status: int = 400,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, http_status,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(SpexError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
