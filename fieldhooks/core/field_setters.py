"""Typed Field Setters — write ids, timestamps and actor identities by declared field kind.

Invariants:
    - Branching is on the field's DECLARED kind (FieldKind), never on the value written
    - Unsupported kinds are a reported no-op, never an error
    - set_time / set_id only write over zero values unless overwrite is requested
    - set_updated_time always writes
    - Every setter returns True iff it wrote the field

Design Decisions:
    - Integer timestamps are epoch millis at whole-second precision
      (seconds * 1000), the representation existing collections store
    - set_updated_time writes epoch millis (full ms precision) into datetime fields
      unless update_time_as_epoch_millis is disabled, or overridden for a block
      with update_time_representation (the SQL binding writes datetimes)
    - current_time() is the single clock; tests monkeypatch it
"""

from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator
from uuid import uuid4

from bson import ObjectId

from fieldhooks.config import get_settings
from fieldhooks.core.actor_context import ActorContext
from fieldhooks.core.diagnostics import report_skip
from fieldhooks.core.domain_types import (
    ContextKey,
    EpochMillis,
    FieldKind,
    FieldName,
    SkipReason,
    UInt64,
)
from fieldhooks.core.field_locator import FieldAccessor, locate_field


TIME_KINDS = frozenset({FieldKind.TIMESTAMP, FieldKind.INT64, FieldKind.UINT64})
ID_KINDS = frozenset({FieldKind.OBJECT_ID, FieldKind.STRING})
BY_KINDS = frozenset({FieldKind.STRING})

_ZERO_OBJECT_ID = bytes(12)

# None: follow Settings.update_time_as_epoch_millis
_epoch_millis_updates: ContextVar[bool | None] = ContextVar(
    "fieldhooks_epoch_millis_updates", default=None,
)


def current_time() -> datetime:
    if get_settings().use_utc:
        return datetime.now(timezone.utc)
    return datetime.now().astimezone()


def epoch_millis(now: datetime) -> EpochMillis:
    """Whole-second epoch time expressed in milliseconds."""
    return EpochMillis(int(now.timestamp()) * 1000)


def is_zero(kind: FieldKind, value: Any) -> bool:
    """Whether a field of the given kind currently holds its zero value."""
    if value is None:
        return True
    if kind is FieldKind.TIMESTAMP:
        if isinstance(value, datetime):
            return value.replace(tzinfo=None) == datetime.min
        # a previous update may have stored epoch millis here
        return value == 0
    if kind in (FieldKind.INT64, FieldKind.UINT64):
        return value == 0
    if kind is FieldKind.STRING:
        return value == ""
    if kind is FieldKind.OBJECT_ID:
        return isinstance(value, ObjectId) and value.binary == _ZERO_OBJECT_ID
    return False


def set_time(
    record: object, name: str, overwrite: bool = False, *, role: str | None = None,
) -> bool:
    """Write "now" when the field is zero, or always when overwrite is set."""
    accessor = _writable(record, name, TIME_KINDS, role)
    if accessor is None:
        return False
    if not overwrite and not is_zero(accessor.kind, accessor.get(record)):
        return False

    now = current_time()
    if accessor.kind is FieldKind.TIMESTAMP:
        accessor.set(record, now)
    elif accessor.kind is FieldKind.UINT64:
        accessor.set(record, UInt64(max(epoch_millis(now), 0)))
    else:
        accessor.set(record, epoch_millis(now))
    return True


def set_updated_time(record: object, name: str, *, role: str | None = None) -> bool:
    """Always refresh the field, regardless of its current value."""
    accessor = _writable(record, name, TIME_KINDS, role)
    if accessor is None:
        return False

    now = current_time()
    if accessor.kind is FieldKind.TIMESTAMP:
        if _updates_as_epoch_millis():
            accessor.set(record, EpochMillis(int(now.timestamp() * 1000)))
        else:
            accessor.set(record, now)
    elif accessor.kind is FieldKind.UINT64:
        accessor.set(record, UInt64(max(epoch_millis(now), 0)))
    else:
        accessor.set(record, epoch_millis(now))
    return True


@contextmanager
def update_time_representation(as_epoch_millis: bool | None) -> Iterator[None]:
    """Override how set_updated_time fills datetime fields inside the block.

    None keeps the configured behavior. SQL bindings pass False: a DateTime
    column cannot store epoch millis.
    """
    token = _epoch_millis_updates.set(as_epoch_millis)
    try:
        yield
    finally:
        _epoch_millis_updates.reset(token)


def _updates_as_epoch_millis() -> bool:
    override = _epoch_millis_updates.get()
    if override is None:
        return get_settings().update_time_as_epoch_millis
    return override


def set_by(
    record: object,
    name: FieldName,
    context_key: ContextKey,
    actor_context: ActorContext | None,
    *,
    role: str | None = None,
) -> bool:
    """Copy the actor identity stored under context_key into a string field."""
    accessor = _writable(record, name, BY_KINDS, role)
    if accessor is None:
        return False

    value = actor_context.get(context_key) if actor_context is not None else None
    if value is None:
        report_skip(
            record, name, SkipReason.CONTEXT_KEY_MISSING, role, detail=context_key,
        )
        return False
    if not isinstance(value, str):
        report_skip(
            record, name, SkipReason.CONTEXT_VALUE_NOT_STRING, role,
            detail=f"{context_key}: {type(value).__name__}",
        )
        return False
    if not value:
        report_skip(
            record, name, SkipReason.CONTEXT_VALUE_EMPTY, role, detail=context_key,
        )
        return False

    accessor.set(record, value)
    return True


def set_id(record: object, name: str, *, role: str | None = None) -> bool:
    """Generate an identifier when the field is still empty."""
    accessor = _writable(record, name, ID_KINDS, role)
    if accessor is None:
        return False
    if not is_zero(accessor.kind, accessor.get(record)):
        return False

    if accessor.kind is FieldKind.OBJECT_ID:
        accessor.set(record, ObjectId())
    else:
        accessor.set(record, str(uuid4()))
    return True


def _writable(
    record: object, name: str, kinds: frozenset[FieldKind], role: str | None,
) -> FieldAccessor | None:
    accessor = locate_field(record, name, role)
    if accessor is None:
        return None
    if accessor.kind not in kinds:
        report_skip(
            record, name, SkipReason.UNSUPPORTED_TYPE, role, detail=accessor.kind.value,
        )
        return None
    return accessor
