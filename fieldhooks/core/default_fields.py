"""Default Fields — convention-named id / created_at / updated_at hooks.

Invariants:
    - Field names are fixed: id, created_at, updated_at (not configurable)
    - default_id and default_create_at only fill zero values
    - default_update_at always refreshes
    - Hooks never fail: missing or unsupported fields are reported no-ops

Design Decisions:
    - Mixin with no fields of its own: any record declaring the three names with a
      supported type (datetime / int / UInt64 / str / ObjectId) gets defaults
    - DefaultFields / DefaultFieldsModel declare the document-store shape
      (ObjectId id, datetime stamps) for types that want it ready-made
"""

from dataclasses import dataclass
from datetime import datetime

from bson import ObjectId
from pydantic import BaseModel, ConfigDict

from fieldhooks.core.domain_types import FieldRole
from fieldhooks.core.field_setters import set_id, set_time


ID_FIELD = "id"
CREATED_AT_FIELD = "created_at"
UPDATED_AT_FIELD = "updated_at"


class DefaultFieldsMixin:
    """Implements the default-field hook contract on the convention names."""

    def default_id(self) -> None:
        set_id(self, ID_FIELD, role=FieldRole.ID.value)

    def default_create_at(self) -> None:
        set_time(self, CREATED_AT_FIELD, False, role=FieldRole.CREATE_AT.value)

    def default_update_at(self) -> None:
        set_time(self, UPDATED_AT_FIELD, True, role=FieldRole.UPDATE_AT.value)


@dataclass(kw_only=True)
class DefaultFields(DefaultFieldsMixin):
    """Dataclass base with ObjectId id and datetime stamps."""
    id: ObjectId | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DefaultFieldsModel(DefaultFieldsMixin, BaseModel):
    """Pydantic base with ObjectId id and datetime stamps."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: ObjectId | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
