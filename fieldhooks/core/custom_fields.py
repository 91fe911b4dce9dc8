"""Custom Fields — per-record-type mapping of bookkeeping roles to field names.

Invariants:
    - Builder methods store names and return the same instance (fluent chaining)
    - No validation at configuration time; unknown names simply never match
    - Each custom_* operation is a no-op when its own role is unconfigured
    - The configuration holds no per-record state and may be shared by a whole type

Design Decisions:
    - Dataclass value object: the record type builds it once, usually as a
      module-level constant returned from custom_fields()
    - Operations take (actor_context, record) so the dispatcher can run them from
      one explicit table
"""

from dataclasses import dataclass

from fieldhooks.core.actor_context import ActorContext
from fieldhooks.core.domain_types import ContextKey, FieldName, FieldRole
from fieldhooks.core.field_setters import set_by, set_id, set_time, set_updated_time


@dataclass
class CustomFields:
    """Names of the fields that play each bookkeeping role on a record type.

    Usage:
        _FIELDS = (
            new_custom()
            .set_id("doc_id")
            .set_create_at("created")
            .set_update_by("editor", "user_id")
        )

        class Article:
            ...
            def custom_fields(self) -> CustomFields:
                return _FIELDS
    """

    create_at: FieldName = FieldName("")
    create_by: FieldName = FieldName("")
    create_by_key: ContextKey = ContextKey("")
    update_at: FieldName = FieldName("")
    update_by: FieldName = FieldName("")
    update_by_key: ContextKey = ContextKey("")
    id: FieldName = FieldName("")

    # ─── Builder ─────────────────────────────────────────────────

    def set_create_at(self, field_name: str) -> "CustomFields":
        self.create_at = FieldName(field_name)
        return self

    def set_create_by(self, field_name: str, context_key: str) -> "CustomFields":
        self.create_by = FieldName(field_name)
        self.create_by_key = ContextKey(context_key)
        return self

    def set_update_at(self, field_name: str) -> "CustomFields":
        self.update_at = FieldName(field_name)
        return self

    def set_update_by(self, field_name: str, context_key: str) -> "CustomFields":
        self.update_by = FieldName(field_name)
        self.update_by_key = ContextKey(context_key)
        return self

    def set_id(self, field_name: str) -> "CustomFields":
        self.id = FieldName(field_name)
        return self

    # ─── Operations ──────────────────────────────────────────────

    def custom_id(self, actor_context: ActorContext, record: object) -> bool:
        if not self.id:
            return False
        return set_id(record, self.id, role=FieldRole.ID.value)

    def custom_create_time(self, actor_context: ActorContext, record: object) -> bool:
        """Creation time is only written over a zero value."""
        if not self.create_at:
            return False
        return set_time(record, self.create_at, False, role=FieldRole.CREATE_AT.value)

    def custom_create_by(self, actor_context: ActorContext, record: object) -> bool:
        if not self.create_by:
            return False
        return set_by(
            record, self.create_by, self.create_by_key, actor_context,
            role=FieldRole.CREATE_BY.value,
        )

    def custom_update_time(self, actor_context: ActorContext, record: object) -> bool:
        if not self.update_at:
            return False
        return set_updated_time(record, self.update_at, role=FieldRole.UPDATE_AT.value)

    def custom_update_by(self, actor_context: ActorContext, record: object) -> bool:
        if not self.update_by:
            return False
        return set_by(
            record, self.update_by, self.update_by_key, actor_context,
            role=FieldRole.UPDATE_BY.value,
        )

    def field_for(self, role: FieldRole) -> FieldName:
        """Configured field name for a role ("" when unset)."""
        return {
            FieldRole.ID: self.id,
            FieldRole.CREATE_AT: self.create_at,
            FieldRole.CREATE_BY: self.create_by,
            FieldRole.UPDATE_AT: self.update_at,
            FieldRole.UPDATE_BY: self.update_by,
        }[role]


def new_custom() -> CustomFields:
    """Empty builder used to declare a record type's custom fields."""
    return CustomFields()
