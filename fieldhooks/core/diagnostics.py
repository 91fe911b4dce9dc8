"""Diagnostics — structured, opt-in reporting of skipped field writes.

Invariants:
    - Reporting never changes dispatch behavior (skips stay silent no-ops)
    - Every skip is logged; collection only happens inside capture_diagnostics()
    - Captured lists are context-local (contextvars): threads and tasks never mix

Design Decisions:
    - contextvar-backed recorder: callers opt in around a single save without
      threading a collector through every setter signature
"""

import contextvars
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from fieldhooks.config import get_settings
from fieldhooks.core.domain_types import SkipReason

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDiagnostic:
    """One skipped write — who, which field, and why."""
    record_type: str
    field_name: str | None
    reason: SkipReason
    role: str | None = None
    detail: str | None = None


_captured: contextvars.ContextVar[list[FieldDiagnostic] | None] = contextvars.ContextVar(
    "fieldhooks_diagnostics", default=None,
)


def report_skip(
    record: object,
    field_name: str | None,
    reason: SkipReason,
    role: str | None = None,
    detail: str | None = None,
) -> None:
    """Log a skipped write and append it to the active capture, if any."""
    diag = FieldDiagnostic(
        record_type=type(record).__name__,
        field_name=field_name,
        reason=reason,
        role=role,
        detail=detail,
    )
    level = getattr(logging, get_settings().diagnostic_log_level, logging.DEBUG)
    logger.log(
        level,
        "Skipped field %s on %s: %s",
        field_name, diag.record_type, reason.value,
        extra={
            "record_type": diag.record_type,
            "field_name": field_name,
            "role": role,
            "reason": reason.value,
        },
    )
    captured = _captured.get()
    if captured is not None:
        captured.append(diag)


@contextmanager
def capture_diagnostics() -> Iterator[list[FieldDiagnostic]]:
    """Collect every skip reported inside the block.

    Usage:
        with capture_diagnostics() as skipped:
            dispatch(ctx, doc, OperationPhase.BEFORE_INSERT)
        assert not skipped
    """
    captured: list[FieldDiagnostic] = []
    token = _captured.set(captured)
    try:
        yield captured
    finally:
        _captured.reset(token)
