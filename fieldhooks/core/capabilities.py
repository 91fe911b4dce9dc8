"""Capability Detection — which hook contracts a record type opts into.

Invariants:
    - Detection is per record TYPE and cached: a type's capability never changes
    - The two contracts are independent; a type may implement neither, either or both
    - Detection is the Protocols' own structural check (issubclass on the
      runtime-checkable Protocol); hooks are never invoked

Design Decisions:
    - Protocol over ABC: record types opt in structurally, no required base class
      (dataclasses, pydantic models and ORM classes keep their own hierarchies)
    - Closed HookCapability variant instead of isinstance checks at every dispatch
    - Cached in a WeakKeyDictionary so dynamically created types can be collected
"""

from typing import Protocol, runtime_checkable
from weakref import WeakKeyDictionary

from fieldhooks.core.custom_fields import CustomFields
from fieldhooks.core.domain_types import HookCapability
from fieldhooks.core.field_locator import resolve_accessor


CUSTOM_HOOK_METHOD = "custom_fields"

_capabilities: WeakKeyDictionary = WeakKeyDictionary()


@runtime_checkable
class DefaultFieldHook(Protocol):
    """Convention-named defaults: id, created_at, updated_at."""
    def default_id(self) -> None: ...
    def default_create_at(self) -> None: ...
    def default_update_at(self) -> None: ...


@runtime_checkable
class CustomFieldsHook(Protocol):
    """Configuration-driven fields, including actor identities."""
    def custom_fields(self) -> CustomFields: ...


def resolve_capability(record_type: type) -> HookCapability:
    capability = _capabilities.get(record_type)
    if capability is None:
        capability = _detect(record_type)
        _capabilities[record_type] = capability
    return capability


def _detect(record_type: type) -> HookCapability:
    has_default = issubclass(record_type, DefaultFieldHook)
    has_custom = issubclass(record_type, CustomFieldsHook)
    if has_default and has_custom:
        return HookCapability.BOTH
    if has_default:
        return HookCapability.DEFAULT_ONLY
    if has_custom:
        return HookCapability.CUSTOM_ONLY
    return HookCapability.NONE


def register_record_type(record_type: type, *field_names: str) -> HookCapability:
    """Resolve capability and field accessors up front (e.g. at application start).

    Dispatch works without registration; registering only moves the resolution
    cost out of the first save of each type.
    """
    for name in field_names:
        resolve_accessor(record_type, name)
    return resolve_capability(record_type)
