"""Field Locator — resolves a record's bookkeeping field to a typed, settable accessor.

Invariants:
    - Never raises for a missing, private, read-only or unresolvable field
    - Every None result is reported through diagnostics.report_skip
    - Accessors are resolved once per (record type, field name) and cached, except
      while the field's annotation is an unresolved forward reference
    - Kind is derived from the field's DECLARED type, never from its current value

Design Decisions:
    - Declared types read from pydantic model_fields first, then class annotations
      along the MRO: dataclasses, SQLAlchemy Mapped[...] classes and plain
      annotated classes all resolve the same way
    - Annotations resolved field by field: one unresolvable forward reference
      (common on ORM base classes) only hides that one field
    - Caches are WeakKeyDictionaries keyed on the class, not lru_cache
"""

import dataclasses
import inspect
import types
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin, get_type_hints
from weakref import WeakKeyDictionary

from bson import ObjectId
from sqlalchemy.orm import Mapped

from fieldhooks.core.diagnostics import report_skip
from fieldhooks.core.domain_types import EpochMillis, FieldKind, SkipReason, UInt64


# Values that cannot be mutated in place, or carry no declared fields
_NON_RECORD_TYPES = (
    str, bytes, bytearray, int, float, complex, bool, tuple, frozenset, Mapping,
)

# Keyed weakly on the class: dynamically created record types can be collected
_declared: WeakKeyDictionary = WeakKeyDictionary()
_accessors: WeakKeyDictionary = WeakKeyDictionary()

_UNRESOLVED = object()


@dataclass(frozen=True)
class FieldAccessor:
    """Typed handle on one field of one record type."""
    name: str
    kind: FieldKind
    annotation: Any = None

    def get(self, record: object) -> Any:
        # Plain annotated classes may declare a field without ever assigning it
        return getattr(record, self.name, None)

    def set(self, record: object, value: Any) -> None:
        setattr(record, self.name, value)


def is_addressable(record: object) -> bool:
    """True for a mutable record instance whose fields can be written in place."""
    if record is None or isinstance(record, type):
        return False
    return not isinstance(record, _NON_RECORD_TYPES)


def locate_field(
    record: object, name: str, role: str | None = None,
) -> FieldAccessor | None:
    """Accessor for record.<name>, or None (reported) when it cannot be written."""
    if not is_addressable(record):
        report_skip(record, name, SkipReason.NOT_A_RECORD, role)
        return None
    if not name or name.startswith("_"):
        reason = SkipReason.FIELD_PRIVATE if name else SkipReason.FIELD_MISSING
        report_skip(record, name, reason, role)
        return None

    resolved = resolve_accessor(type(record), name)
    if isinstance(resolved, SkipReason):
        report_skip(record, name, resolved, role)
        return None
    return resolved


def resolve_accessor(record_type: type, name: str) -> FieldAccessor | SkipReason:
    """Resolve (and cache) the accessor for one declared field of a record type."""
    cached = _accessors.get(record_type)
    if cached is not None and name in cached:
        return cached[name]

    declared, pending = _collect_fields(record_type)
    if name not in declared:
        resolved = SkipReason.FIELD_MISSING
    elif not _is_assignable(record_type, name):
        resolved = SkipReason.FIELD_READ_ONLY
    else:
        annotation = declared[name]
        resolved = FieldAccessor(name=name, kind=classify(annotation), annotation=annotation)

    # an unresolved forward reference may resolve once its module finishes loading
    if name not in pending:
        _accessors.setdefault(record_type, {})[name] = resolved
    return resolved


def declared_fields(record_type: type) -> types.MappingProxyType:
    """Public, non-ClassVar fields of a record type mapped to their declared types."""
    return _collect_fields(record_type)[0]


def _collect_fields(record_type: type) -> tuple[types.MappingProxyType, frozenset[str]]:
    """Declared fields plus the names whose annotation could not be resolved yet."""
    cached = _declared.get(record_type)
    if cached is not None:
        return cached, frozenset()

    pending: set[str] = set()
    model_fields = getattr(record_type, "model_fields", None)
    if isinstance(model_fields, dict):
        fields = {name: info.annotation for name, info in model_fields.items()}
    else:
        fields = {}
        for klass in reversed(record_type.__mro__):
            if klass is object:
                continue
            for name, annotation in inspect.get_annotations(klass).items():
                if name.startswith("_"):
                    continue
                resolved = _resolve_annotation(klass, name, annotation)
                if resolved is _UNRESOLVED:
                    pending.add(name)
                    fields[name] = None
                    continue
                pending.discard(name)
                if _is_class_var(resolved):
                    fields.pop(name, None)
                    continue
                fields[name] = resolved

    proxy = types.MappingProxyType(fields)
    if not pending:
        _declared[record_type] = proxy
    return proxy, frozenset(pending)


def classify(annotation: Any) -> FieldKind:
    """Map a declared type onto the closed set of supported representations."""
    annotation = _unwrap(annotation)
    if annotation is UInt64:
        return FieldKind.UINT64
    if annotation is EpochMillis:
        return FieldKind.INT64
    # parametrized generics (list[str], dict[...]) are never bookkeeping fields
    if get_origin(annotation) is not None or not isinstance(annotation, type):
        return FieldKind.UNSUPPORTED
    if issubclass(annotation, datetime):
        return FieldKind.TIMESTAMP
    if issubclass(annotation, bool):
        return FieldKind.UNSUPPORTED
    if issubclass(annotation, int):
        return FieldKind.INT64
    if issubclass(annotation, str):
        return FieldKind.STRING
    if issubclass(annotation, ObjectId):
        return FieldKind.OBJECT_ID
    return FieldKind.UNSUPPORTED


def _unwrap(annotation: Any) -> Any:
    """Strip Optional / Annotated / Mapped wrappers down to the value type."""
    while True:
        origin = get_origin(annotation)
        if origin is Annotated or origin is Mapped:
            annotation = get_args(annotation)[0]
        elif origin is Union or origin is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            if len(args) != 1:
                return annotation
            annotation = args[0]
        else:
            return annotation


def _resolve_annotation(klass: type, name: str, annotation: Any) -> Any:
    if not isinstance(annotation, str):
        return annotation
    probe = type(
        "_AnnotationProbe", (),
        {"__annotations__": {name: annotation}, "__module__": klass.__module__},
    )
    try:
        return get_type_hints(probe, localns=dict(vars(klass)), include_extras=True)[name]
    except (NameError, TypeError, SyntaxError, AttributeError):
        return _UNRESOLVED


def _is_class_var(annotation: Any) -> bool:
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _is_assignable(record_type: type, name: str) -> bool:
    if dataclasses.is_dataclass(record_type) and record_type.__dataclass_params__.frozen:
        return False

    model_config = getattr(record_type, "model_config", None)
    if isinstance(model_config, dict) and model_config.get("frozen"):
        return False
    model_fields = getattr(record_type, "model_fields", None)
    if isinstance(model_fields, dict) and name in model_fields:
        if getattr(model_fields[name], "frozen", None):
            return False

    attr = inspect.getattr_static(record_type, name, None)
    if isinstance(attr, property) and attr.fset is None:
        return False
    return True
