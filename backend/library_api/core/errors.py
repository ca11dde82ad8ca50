"""Error Hierarchy — typed, categorized exceptions for every Library API failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error carries the HTTP status the request layer uses by default
    - Kinds are never translated on the way up: core raises, API layer maps to status
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with LibraryError base: one FastAPI global handler catches all
      (ADR: uniform error shape)
    - Conflict and dangling references answer 500, not 409/422: clients of the
      service already depend on that status for failed creates
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    INTEGRITY = "integrity"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_kind: str | None = None
    entity_id: int | None = None
    debug_info: dict[str, Any] | None = None


class LibraryError(Exception):
    """Base exception for all Library API errors."""

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
                "context": {
                    "entity_kind": self.context.entity_kind,
                    "entity_id": self.context.entity_id,
                },
            }
        }


# ─── Caller Errors ──────────────────────────────────────────────

class MalformedRequestError(LibraryError):
    """Identifier or body could not be interpreted."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "MALFORMED_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class RecordNotFoundError(LibraryError):
    """Target row is absent or soft-deleted."""
    def __init__(self, entity_kind: str, entity_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.entity_kind = entity_kind
        ctx.entity_id = entity_id
        super().__init__(
            f"{entity_kind.capitalize()} not found (by id: {entity_id})",
            "RECORD_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class IdentifierConflictError(LibraryError):
    """Create was given an identifier that is already occupied."""
    def __init__(self, entity_kind: str, entity_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.entity_kind = entity_kind
        ctx.entity_id = entity_id
        super().__init__(
            f"{entity_kind.capitalize()} id {entity_id} is already taken",
            "IDENTIFIER_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 500,
        )


class DanglingReferenceError(LibraryError):
    """Association target does not exist (or is soft-deleted) at commit."""
    def __init__(
        self, target_kind: str, missing_ids: list[int], context: ErrorContext | None = None,
    ):
        ids = ", ".join(str(i) for i in sorted(missing_ids))
        super().__init__(
            f"Association targets missing: {target_kind} {ids}",
            "DANGLING_REFERENCE", ErrorCategory.INTEGRITY,
            ErrorSeverity.ERROR, context, 500,
        )
        self.target_kind = target_kind
        self.missing_ids = sorted(missing_ids)


# ─── Infrastructure Errors ──────────────────────────────────────

class StoreFailureError(LibraryError):
    """Persistence failed for a reason not otherwise classified."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "STORE_FAILURE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
