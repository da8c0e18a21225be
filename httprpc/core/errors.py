"""Error Hierarchy — typed, categorized exceptions for every dispatch failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Request-level errors never mutate the shared OperationRegistry
    - InternalOperationError keeps the original fault as __cause__ but never
      copies its text into the caller-facing message
    - to_response() produces the REST envelope used by the transport adapter

Design Decisions:
    - Single hierarchy with RpcError base: FastAPI global handler catches all (ADR: uniform error shape)
    - UnsupportedOperationError also subclasses NotImplementedError so callers
      that probe with `except NotImplementedError` keep working
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
    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"
    INTERNAL = "internal"
    ENCODING = "encoding"
    UNSUPPORTED = "unsupported"
    TEMPLATE = "template"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    path: str | None = None
    debug_info: dict[str, Any] | None = None


class RpcError(Exception):
    """Base exception for all dispatch errors."""

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
                    "operation": self.context.operation,
                    "path": self.context.path,
                },
            }
        }


# ─── Startup Errors ─────────────────────────────────────────────

class ConfigurationError(RpcError):
    """Service contract missing, unresolvable, or invalid. Fatal at startup."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Request Errors (400-level) ─────────────────────────────────

class OperationNotFoundError(RpcError):
    """No operation matches the requested name."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            "Method not found.",
            "OPERATION_NOT_FOUND", ErrorCategory.NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.operation = operation


class InvalidArgumentError(RpcError):
    """A request value cannot be coerced to its declared parameter type."""
    def __init__(
        self, message: str, parameter: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.INVALID_ARGUMENT,
            ErrorSeverity.WARNING, context, 400,
        )
        self.parameter = parameter


# ─── Server Errors (500-level) ──────────────────────────────────

class InternalOperationError(RpcError):
    """The invoked operation body raised. Cause retained as __cause__."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            "Operation failed.",
            "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.operation = operation


class EncodingError(RpcError):
    """Result graph could not be serialized, or a resource failed to release."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "ENCODING_ERROR", ErrorCategory.ENCODING,
            ErrorSeverity.ERROR, context, 500,
        )


class UnsupportedOperationError(RpcError, NotImplementedError):
    """Capability exists only as a predicate (e.g. role enumeration)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UNSUPPORTED_OPERATION", ErrorCategory.UNSUPPORTED,
            ErrorSeverity.ERROR, context, 500,
        )


# ─── Template Errors ────────────────────────────────────────────

class TemplateError(RpcError):
    """Template text is malformed or an included template cannot be loaded."""
    def __init__(
        self, message: str, template: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "TEMPLATE_ERROR", ErrorCategory.TEMPLATE,
            ErrorSeverity.ERROR, context, 500,
        )
        self.template = template


class MissingResourceError(RpcError):
    """A {{@key}} marker names a key the template's bundle does not define."""
    def __init__(self, key: str, context: ErrorContext | None = None):
        super().__init__(
            f"Missing resource '{key}'.", "MISSING_RESOURCE", ErrorCategory.TEMPLATE,
            ErrorSeverity.ERROR, context, 500,
        )
        self.key = key
