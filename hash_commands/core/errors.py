"""Error Hierarchy — typed, categorized exceptions for the hash command pipeline.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Unknown method and unsafe command share one class and one code;
      callers tell them apart only by message text
    - to_response() produces the REST envelope used by the API layer

Design Decisions:
    - Single hierarchy with HashCommandError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    SAFETY = "safety"
    EXECUTION = "execution"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where in a command sequence the error happened."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    method: str | None = None
    command: str | None = None
    position: int | None = None
    debug_info: dict[str, Any] | None = None


class HashCommandError(Exception):
    """Base exception for all hash command errors."""

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
                    "method": self.context.method,
                    "command": self.context.command,
                    "position": self.context.position,
                },
            }
        }


# ─── Dispatch Errors ─────────────────────────────────────────────

class CommandRejectedError(HashCommandError):
    """Validation refused the sequence: unknown method or unsafe command."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "COMMAND_REJECTED", ErrorCategory.SAFETY,
            ErrorSeverity.ERROR, context, 400,
        )


class CommandExecutionError(HashCommandError):
    """A runner failed while the sequence was executing."""
    def __init__(
        self, command: str, reason: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Command `{command}` failed: {reason}",
            "COMMAND_EXECUTION_FAILED", ErrorCategory.EXECUTION,
            ErrorSeverity.ERROR, context, 502,
        )
        self.command = command


# ─── Collaborator Errors ─────────────────────────────────────────

class ResourceNotFoundError(HashCommandError):
    """Requested command or route is not registered."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConcurrencyError(HashCommandError):
    """A dispatch was requested while another one is still running."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
