"""Domain Types — verifies enum members and NewType wrappers.

Tests:
    - OperationPhase covers the full driver operator set and parses from strings
    - HookCapability variant flags
    - UInt64 / EpochMillis wrap int
"""

from fieldhooks.core.domain_types import (
    EpochMillis, UInt64, FieldName, ContextKey,
    OperationPhase, FieldRole, FieldKind, HookCapability, SkipReason,
)


def test_value_types_wrap_primitives():
    assert UInt64(5) == 5
    assert EpochMillis(1_700_000_000_000) == 1_700_000_000_000
    assert FieldName("created_at") == "created_at"
    assert ContextKey("user_id") == "user_id"


def test_operation_phase_has_before_and_after_for_every_operator():
    values = {p.value for p in OperationPhase}
    for op in ("insert", "update", "replace", "upsert", "remove", "query"):
        assert f"before_{op}" in values
        assert f"after_{op}" in values
    assert len(OperationPhase) == 12


def test_operation_phase_parses_from_string():
    assert OperationPhase("before_insert") is OperationPhase.BEFORE_INSERT
    assert OperationPhase.BEFORE_UPSERT == "before_upsert"


def test_field_role_has_five_roles():
    assert {r.value for r in FieldRole} == {
        "id", "create_at", "create_by", "update_at", "update_by",
    }


def test_field_kind_is_closed_set():
    assert len(FieldKind) == 6
    assert FieldKind.UNSUPPORTED in FieldKind


def test_hook_capability_flags():
    assert not HookCapability.NONE.has_default
    assert not HookCapability.NONE.has_custom
    assert HookCapability.DEFAULT_ONLY.has_default
    assert not HookCapability.DEFAULT_ONLY.has_custom
    assert HookCapability.CUSTOM_ONLY.has_custom
    assert not HookCapability.CUSTOM_ONLY.has_default
    assert HookCapability.BOTH.has_default and HookCapability.BOTH.has_custom


def test_skip_reasons_serialize_to_snake_case():
    assert SkipReason.NOT_A_RECORD.value == "not_a_record"
    assert SkipReason.CONTEXT_VALUE_NOT_STRING.value == "context_value_not_string"
