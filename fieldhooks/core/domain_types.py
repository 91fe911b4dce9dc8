"""Domain Types — rich types that replace bare primitives across the engine.

Invariants:
    - UInt64 is the only way to declare an unsigned epoch-millis field
      (a plain int annotation is the signed branch)
    - Only the four BEFORE_* write phases have field handlers
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, and the NewType object stays
      visible in the annotation so the field locator can tell UInt64 from int
    - str Enums: phases can be passed as plain strings by drivers that do not import them
"""

from enum import Enum
from typing import NewType


# ─── Identity / Value Types ──────────────────────────────────────

FieldName = NewType("FieldName", str)
ContextKey = NewType("ContextKey", str)

EpochMillis = NewType("EpochMillis", int)
UInt64 = NewType("UInt64", int)           # 0 .. 2**64-1


# ─── Enums ───────────────────────────────────────────────────────

class OperationPhase(str, Enum):
    """Lifecycle points reported by the persistence layer."""
    BEFORE_INSERT = "before_insert"
    AFTER_INSERT = "after_insert"
    BEFORE_UPDATE = "before_update"
    AFTER_UPDATE = "after_update"
    BEFORE_REPLACE = "before_replace"
    AFTER_REPLACE = "after_replace"
    BEFORE_UPSERT = "before_upsert"
    AFTER_UPSERT = "after_upsert"
    BEFORE_REMOVE = "before_remove"
    AFTER_REMOVE = "after_remove"
    BEFORE_QUERY = "before_query"
    AFTER_QUERY = "after_query"


class FieldRole(str, Enum):
    """Bookkeeping roles a record field can play."""
    ID = "id"
    CREATE_AT = "create_at"
    CREATE_BY = "create_by"
    UPDATE_AT = "update_at"
    UPDATE_BY = "update_by"


class FieldKind(str, Enum):
    """Closed set of value representations the setters understand."""
    TIMESTAMP = "timestamp"
    INT64 = "int64"
    UINT64 = "uint64"
    STRING = "string"
    OBJECT_ID = "object_id"
    UNSUPPORTED = "unsupported"


class HookCapability(str, Enum):
    """Which hook contracts a record type implements — resolved once per type."""
    NONE = "none"
    DEFAULT_ONLY = "default_only"
    CUSTOM_ONLY = "custom_only"
    BOTH = "both"

    @property
    def has_default(self) -> bool:
        return self in (HookCapability.DEFAULT_ONLY, HookCapability.BOTH)

    @property
    def has_custom(self) -> bool:
        return self in (HookCapability.CUSTOM_ONLY, HookCapability.BOTH)


class SkipReason(str, Enum):
    """Why a field write was skipped. Reported through diagnostics, never raised."""
    NOT_A_RECORD = "not_a_record"
    FIELD_MISSING = "field_missing"
    FIELD_PRIVATE = "field_private"
    FIELD_READ_ONLY = "field_read_only"
    UNSUPPORTED_TYPE = "unsupported_type"
    CONTEXT_KEY_MISSING = "context_key_missing"
    CONTEXT_VALUE_EMPTY = "context_value_empty"
    CONTEXT_VALUE_NOT_STRING = "context_value_not_string"
    UNSUPPORTED_PHASE = "unsupported_phase"
