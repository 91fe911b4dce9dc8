"""Lifecycle Dispatcher — entry point the persistence layer calls before each write.

Invariants:
    - Default hooks always run before custom hooks on the same record
    - Records are processed in input order, each fully, before the next one
    - Fail-fast: the first custom-hook failure stops the batch and propagates;
      records already processed keep their mutations (the write has not happened)
    - Phases without handlers, unknown phases and non-records are reported no-ops
    - _PHASE_PLANS is read-only after import

Design Decisions:
    - Explicit phase → plan table: every phase/handler pairing visible in one place
    - Custom-hook failures normalized to CustomHookError (chained with `from`) so the
      caller catches one type; FieldHookError raised by hook code passes unchanged
"""

import logging
from collections.abc import Iterator, Mapping, MappingView, Sequence, Set
from dataclasses import dataclass
from operator import methodcaller
from types import MappingProxyType
from typing import Any, Callable

from fieldhooks.core.actor_context import ActorContext, resolve_actor_context
from fieldhooks.core.capabilities import CUSTOM_HOOK_METHOD, resolve_capability
from fieldhooks.core.custom_fields import CustomFields
from fieldhooks.core.diagnostics import report_skip
from fieldhooks.core.domain_types import FieldRole, OperationPhase, SkipReason
from fieldhooks.core.errors import CustomHookError, ErrorContext, FieldHookError
from fieldhooks.core.field_locator import is_addressable

logger = logging.getLogger(__name__)

CustomStep = Callable[[CustomFields, ActorContext, object], bool]


@dataclass(frozen=True)
class PhasePlan:
    """Handler sequence for one lifecycle phase."""
    default_steps: tuple[Callable[[object], Any], ...]
    custom_steps: tuple[tuple[FieldRole, CustomStep], ...]


_CREATE_PLAN = PhasePlan(
    default_steps=(
        methodcaller("default_id"),
        methodcaller("default_create_at"),
        methodcaller("default_update_at"),
    ),
    custom_steps=(
        (FieldRole.ID, CustomFields.custom_id),
        (FieldRole.CREATE_AT, CustomFields.custom_create_time),
        (FieldRole.CREATE_BY, CustomFields.custom_create_by),
        (FieldRole.UPDATE_AT, CustomFields.custom_update_time),
        (FieldRole.UPDATE_BY, CustomFields.custom_update_by),
    ),
)

_MODIFY_PLAN = PhasePlan(
    default_steps=(methodcaller("default_update_at"),),
    custom_steps=(
        (FieldRole.UPDATE_AT, CustomFields.custom_update_time),
        (FieldRole.UPDATE_BY, CustomFields.custom_update_by),
    ),
)

# Upsert may create the document: same plan as insert, create fields stay
# untouched when already set.
_PHASE_PLANS: Mapping[OperationPhase, PhasePlan] = MappingProxyType({
    OperationPhase.BEFORE_INSERT: _CREATE_PLAN,
    OperationPhase.BEFORE_UPDATE: _MODIFY_PLAN,
    OperationPhase.BEFORE_REPLACE: _MODIFY_PLAN,
    OperationPhase.BEFORE_UPSERT: _CREATE_PLAN,
})


def plan_for(phase: OperationPhase | str) -> PhasePlan | None:
    """Handler plan for a phase, or None when the phase has no field handlers."""
    try:
        return _PHASE_PLANS.get(OperationPhase(phase))
    except ValueError:
        return None


def dispatch(
    actor_context: ActorContext | None,
    docs: Any,
    phase: OperationPhase | str,
) -> None:
    """Populate bookkeeping fields on one record or a collection of records.

    Args:
        actor_context: lookup for create-by / update-by keys; None uses the
            context bound with bind_actor_context (or an empty one).
        docs: a record, or a sequence, set, mapping view or iterator of records.
        phase: lifecycle phase reported by the persistence layer.

    Raises:
        FieldHookError: a custom hook failed; later records were not touched.
    """
    plan = plan_for(phase)
    if plan is None:
        report_skip(docs, None, SkipReason.UNSUPPORTED_PHASE, detail=str(phase))
        return

    phase_value = OperationPhase(phase).value
    ctx = resolve_actor_context(actor_context)
    count = 0
    for index, record in enumerate(iter_records(docs)):
        _apply(plan, ctx, record, index, phase_value)
        count += 1
    logger.debug(
        "Applied %s field hooks to %d record(s)", phase_value, count,
        extra={"phase": phase_value},
    )


def iter_records(docs: Any) -> Iterator[object]:
    """Normalize a single record or a collection into a record sequence."""
    if docs is None:
        return
    if isinstance(docs, (str, bytes, bytearray, Mapping)):
        yield docs
    elif isinstance(docs, (Sequence, Set, MappingView, Iterator)):
        yield from docs
    else:
        yield docs


def _apply(
    plan: PhasePlan, ctx: ActorContext, record: object, index: int, phase: str,
) -> None:
    if not is_addressable(record):
        report_skip(record, None, SkipReason.NOT_A_RECORD, detail=f"index {index}")
        return

    capability = resolve_capability(type(record))
    if capability.has_default:
        for step in plan.default_steps:
            step(record)
    if capability.has_custom:
        fields = _load_custom_fields(record, index, phase)
        for role, step in plan.custom_steps:
            try:
                step(fields, ctx, record)
            except FieldHookError:
                raise
            except Exception as e:
                raise _hook_failure(
                    f"Custom {role.value} hook failed on {type(record).__name__}: {e}",
                    record, index, phase, role, fields.field_for(role),
                ) from e


def _load_custom_fields(record: object, index: int, phase: str) -> CustomFields:
    try:
        fields = getattr(record, CUSTOM_HOOK_METHOD)()
    except FieldHookError:
        raise
    except Exception as e:
        raise _hook_failure(
            f"{type(record).__name__}.custom_fields() failed: {e}",
            record, index, phase,
        ) from e
    if not isinstance(fields, CustomFields):
        raise _hook_failure(
            f"{type(record).__name__}.custom_fields() returned "
            f"{type(fields).__name__}, expected CustomFields",
            record, index, phase,
        )
    return fields


def _hook_failure(
    message: str,
    record: object,
    index: int,
    phase: str,
    role: FieldRole | None = None,
    field_name: str | None = None,
) -> CustomHookError:
    error = CustomHookError(message, ErrorContext(
        record_type=type(record).__name__,
        record_index=index,
        phase=phase,
        role=role.value if role else None,
        field_name=field_name or None,
    ))
    logger.error(
        message,
        extra={
            "record_type": type(record).__name__,
            "record_index": index,
            "phase": phase,
            "role": role.value if role else None,
            "field_name": field_name or None,
            "error_code": error.code,
        },
    )
    return error
