"""Error Hierarchy — typed, categorized exceptions for field injection failures.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Only custom hooks can fail a dispatch; configuration mismatches never raise
    - FieldHookError subclasses raised by user hook code propagate unchanged

Design Decisions:
    - Single hierarchy with FieldHookError base: persistence layers catch one type
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

_CONTEXT_KEYS = ("record_type", "record_index", "phase", "role", "field_name")


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    HOOK = "hook"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where in a dispatch the failure happened."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    record_type: str | None = None
    record_index: int | None = None
    phase: str | None = None
    role: str | None = None
    field_name: str | None = None
    debug_info: dict[str, Any] | None = None


class FieldHookError(Exception):
    """Base exception for all fieldhooks errors."""

    def __init__(
        self,
        message: str,
        code: str = "FIELD_HOOK_ERROR",
        category: ErrorCategory = ErrorCategory.HOOK,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Convert to a flat dict for structured logs and driver error envelopes."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    key: getattr(self.context, key) for key in _CONTEXT_KEYS
                },
            }
        }


class CustomHookError(FieldHookError):
    """A custom-field hook signalled failure; the dispatch batch stopped here."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CUSTOM_HOOK_FAILED", ErrorCategory.HOOK,
            ErrorSeverity.ERROR, context,
        )
