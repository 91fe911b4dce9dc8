"""Field Locator — tests for declared-type resolution and skip reporting.

Tests cover:
    - Kinds resolved from dataclass, pydantic and plain annotated classes
    - Optional / Annotated / Mapped unwrapping
    - Missing, private and read-only fields return None with a diagnostic
    - Non-records (classes, None, dicts, tuples) are never written
    - Accessors are cached per (type, name)
    - Unresolved forward references are retried, not cached
"""

import gc
import sys
import weakref
from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, ClassVar, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Mapped

from fieldhooks.core.diagnostics import capture_diagnostics
from fieldhooks.core.domain_types import EpochMillis, FieldKind, SkipReason, UInt64
from fieldhooks.core.field_locator import (
    FieldAccessor,
    classify,
    declared_fields,
    is_addressable,
    locate_field,
    resolve_accessor,
)


@dataclass
class Invoice:
    id: str = ""
    created_at: datetime | None = None
    updated_at: int = 0
    sequence: UInt64 = UInt64(0)
    oid: ObjectId | None = None
    flagged: bool = False
    tags: list[str] = field(default_factory=list)
    _secret: str = ""
    table: ClassVar[str] = "invoices"


@dataclass(frozen=True)
class FrozenInvoice:
    id: str = ""


class InvoiceModel(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: ObjectId | None = None
    created_at: Optional[datetime] = None
    created_by: str = ""


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""


class Ticket:
    code: str
    label: str

    @property
    def label(self) -> str:
        return "ticket"


# ─── kinds ───────────────────────────────────────────────────────

def test_dataclass_fields_resolve_to_kinds():
    record = Invoice()
    kinds = {
        name: locate_field(record, name).kind
        for name in ("id", "created_at", "updated_at", "sequence", "oid")
    }
    assert kinds == {
        "id": FieldKind.STRING,
        "created_at": FieldKind.TIMESTAMP,
        "updated_at": FieldKind.INT64,
        "sequence": FieldKind.UINT64,
        "oid": FieldKind.OBJECT_ID,
    }


def test_bool_and_list_fields_are_unsupported_kinds():
    record = Invoice()
    assert locate_field(record, "flagged").kind is FieldKind.UNSUPPORTED
    assert locate_field(record, "tags").kind is FieldKind.UNSUPPORTED


def test_pydantic_fields_resolve_through_model_fields():
    record = InvoiceModel()
    assert locate_field(record, "id").kind is FieldKind.OBJECT_ID
    assert locate_field(record, "created_at").kind is FieldKind.TIMESTAMP
    assert locate_field(record, "created_by").kind is FieldKind.STRING


def test_classify_unwraps_wrappers():
    assert classify(Optional[int]) is FieldKind.INT64
    assert classify(Annotated[str, "meta"]) is FieldKind.STRING
    assert classify(Mapped[datetime]) is FieldKind.TIMESTAMP
    assert classify(Mapped[int | None]) is FieldKind.INT64
    assert classify(EpochMillis) is FieldKind.INT64
    assert classify(UInt64 | None) is FieldKind.UINT64


def test_classify_rejects_ambiguous_unions():
    assert classify(int | str) is FieldKind.UNSUPPORTED
    assert classify(None) is FieldKind.UNSUPPORTED
    assert classify(bool) is FieldKind.UNSUPPORTED


def test_class_vars_are_not_fields():
    assert "table" not in declared_fields(Invoice)


# ─── skips ───────────────────────────────────────────────────────

def test_missing_field_returns_none_and_reports():
    with capture_diagnostics() as skipped:
        assert locate_field(Invoice(), "deleted_at") is None
    assert skipped[0].reason is SkipReason.FIELD_MISSING
    assert skipped[0].field_name == "deleted_at"
    assert skipped[0].record_type == "Invoice"


def test_private_field_is_never_located():
    with capture_diagnostics() as skipped:
        assert locate_field(Invoice(), "_secret") is None
    assert skipped[0].reason is SkipReason.FIELD_PRIVATE


def test_empty_field_name_is_missing():
    with capture_diagnostics() as skipped:
        assert locate_field(Invoice(), "") is None
    assert skipped[0].reason is SkipReason.FIELD_MISSING


def test_frozen_dataclass_field_is_read_only():
    with capture_diagnostics() as skipped:
        assert locate_field(FrozenInvoice(), "id") is None
    assert skipped[0].reason is SkipReason.FIELD_READ_ONLY


def test_frozen_pydantic_field_is_read_only():
    with capture_diagnostics() as skipped:
        assert locate_field(FrozenModel(), "id") is None
    assert skipped[0].reason is SkipReason.FIELD_READ_ONLY


def test_property_without_setter_is_read_only():
    with capture_diagnostics() as skipped:
        assert locate_field(Ticket(), "label") is None
    assert skipped[0].reason is SkipReason.FIELD_READ_ONLY


def test_non_records_are_not_addressable():
    assert not is_addressable(None)
    assert not is_addressable(Invoice)
    assert not is_addressable({"id": ""})
    assert not is_addressable(("id", ""))
    assert not is_addressable("doc")
    assert is_addressable(Invoice())


def test_locate_on_class_reports_not_a_record():
    with capture_diagnostics() as skipped:
        assert locate_field(Invoice, "id") is None
    assert skipped[0].reason is SkipReason.NOT_A_RECORD


# ─── accessor ────────────────────────────────────────────────────

def test_accessor_reads_and_writes_field():
    record = Invoice(id="a")
    accessor = locate_field(record, "id")
    assert isinstance(accessor, FieldAccessor)
    assert accessor.get(record) == "a"
    accessor.set(record, "b")
    assert record.id == "b"


def test_accessor_reads_unassigned_annotation_as_none():
    record = Ticket()
    assert locate_field(record, "code").get(record) is None


def test_accessor_resolution_is_cached_per_type():
    assert resolve_accessor(Invoice, "id") is resolve_accessor(Invoice, "id")


def test_unknown_field_resolution_is_a_skip_reason():
    assert resolve_accessor(Invoice, "nope") is SkipReason.FIELD_MISSING


def test_unresolved_forward_reference_is_retried(monkeypatch):
    class Draft:
        stamp: "LateStamp"

    assert resolve_accessor(Draft, "stamp").kind is FieldKind.UNSUPPORTED

    monkeypatch.setattr(sys.modules[__name__], "LateStamp", datetime, raising=False)
    assert resolve_accessor(Draft, "stamp").kind is FieldKind.TIMESTAMP
    assert resolve_accessor(Draft, "stamp") is resolve_accessor(Draft, "stamp")


def test_accessor_cache_does_not_keep_types_alive():
    @dataclass
    class Transient:
        id: str = ""

    assert resolve_accessor(Transient, "id").kind is FieldKind.STRING
    ref = weakref.ref(Transient)
    del Transient
    gc.collect()
    assert ref() is None
