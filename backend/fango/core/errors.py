"""Error Hierarchy — typed, categorized exceptions for all Fango failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) leave no state mutated; infrastructure errors are 500-level
    - OracleUnavailableError is raised by oracle clients and always caught by callers
      in services/ (ranking chain, profile builder, ingestion) — never reaches a route
    - ExternalSearchError surfaces to the client: 503 when unconfigured, 502 otherwise
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with FangoError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging
    - RoundNotActiveError subclasses IncompleteRatingError: a re-submission against an
      already-advanced round is rejected the same way as an incomplete one
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
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    project_id: str | None = None
    round_number: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class FangoError(Exception):
    """Base exception for all Fango errors."""

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
                    "project_id": self.context.project_id,
                    "round_number": self.context.round_number,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(FangoError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ProjectNotFoundError(ResourceNotFoundError):
    """Project id unknown — no mutation performed."""
    def __init__(self, project_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.project_id = project_id
        super().__init__("Project", project_id, ctx)
        self.project_id = project_id


class IncompleteRatingError(FangoError):
    """Rating submission leaves at least one entry of the round unrated."""
    def __init__(
        self,
        round_number: int,
        unrated: list[str],
        context: ErrorContext | None = None,
        *,
        message: str | None = None,
        code: str = "INCOMPLETE_RATINGS",
        category: ErrorCategory = ErrorCategory.BUSINESS_RULE,
        http_status: int = 400,
    ):
        ctx = context or ErrorContext()
        ctx.round_number = round_number
        super().__init__(
            message or f"Round {round_number} has {len(unrated)} unrated house(s).",
            code, category, ErrorSeverity.ERROR, ctx, http_status,
        )
        self.round_number = round_number
        self.unrated = unrated


class RoundNotActiveError(IncompleteRatingError):
    """Ratings submitted for a round that is not the active one."""
    def __init__(
        self, round_number: int, current_round: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            round_number, [], context,
            message=(
                f"Round {round_number} is not active "
                f"(current round: {current_round})."
            ),
            code="ROUND_NOT_ACTIVE",
            category=ErrorCategory.CONFLICT,
            http_status=409,
        )
        self.current_round = current_round


class UnknownEntryError(FangoError):
    """A (project, house, round) triple has no ledger entry."""
    def __init__(
        self, house_id: str, round_number: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.round_number = round_number
        super().__init__(
            f"House '{house_id}' was not offered in round {round_number}.",
            "UNKNOWN_ENTRY", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.house_id = house_id
        self.round_number = round_number


class HouseConflictError(FangoError):
    """Ingested house ids collide with houses already stored."""
    def __init__(self, house_ids: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"House id(s) already exist: {', '.join(house_ids)}",
            "HOUSE_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.house_ids = house_ids


# ─── Contract Violations ────────────────────────────────────────

class DuplicatePlacementError(FangoError):
    """A house already placed in some round was placed again — caller defect."""
    def __init__(self, house_ids: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"House(s) already placed in this project: {', '.join(house_ids)}",
            "DUPLICATE_PLACEMENT", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.house_ids = house_ids


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(FangoError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class OracleUnavailableError(FangoError):
    """Similarity or language oracle down, timed out, or returned garbage."""
    def __init__(
        self,
        oracle: str,
        reason: str,
        message: str = "",
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        text = f"{oracle} oracle unavailable ({reason})"
        if message:
            text = f"{text}: {message}"
        super().__init__(
            text,
            "ORACLE_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, ctx, 503,
        )
        self.oracle = oracle
        self.reason = reason


class ExternalSearchError(FangoError):
    """Listing search API not configured, failed, or returned an unreadable PDF."""
    def __init__(
        self, reason: str, message: str = "", context: ErrorContext | None = None,
    ):
        text = f"Listing search failed ({reason})"
        if message:
            text = f"{text}: {message}"
        super().__init__(
            text,
            "EXTERNAL_SEARCH_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503 if reason == "not_configured" else 502,
        )
        self.reason = reason
