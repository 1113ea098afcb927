from __future__ import annotations

import uuid
from datetime import date, datetime, time
from decimal import Decimal

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


def new_id() -> str:
    return str(uuid.uuid4())


def uuid_column(*args, nullable: bool = True, **kwargs):
    """String(36) column that validation treats as a UUID."""
    info = kwargs.pop("info", {})
    info["uuid"] = True
    return db.Column(db.String(36), *args, nullable=nullable, info=info, **kwargs)


def choice_column(choices, *, nullable: bool = True, **kwargs):
    """String column restricted to a closed value set."""
    info = kwargs.pop("info", {})
    info["choices"] = tuple(choices)
    length = max(len(c) for c in choices)
    return db.Column(db.String(length), nullable=nullable, info=info, **kwargs)


def serialize_value(value):
    """JSON-safe rendering of a column value."""
    if isinstance(value, datetime):
        return to_utc_z(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def column_values(row, exclude: frozenset[str] = frozenset()) -> dict:
    """Plain dict of every mapped column on a row."""
    return {
        col.key: getattr(row, col.key)
        for col in row.__mapper__.columns
        if col.key not in exclude
    }


class SerializeMixin:
    # Columns never rendered to clients
    __serialize_exclude__ = frozenset()

    def to_dict(self) -> dict:
        return {
            key: serialize_value(value)
            for key, value in column_values(self, self.__serialize_exclude__).items()
        }


class EntityMixin(SerializeMixin):
    """
    Primary key, timestamps and the soft-delete marker shared by every
    parish entity.

    deleted_at is terminal: a row with deleted_at set is never returned by
    live queries and is never physically removed.
    """
    id = db.Column(db.String(36), primary_key=True, default=new_id, info={"uuid": True})
    created_at = db.Column(db.DateTime, nullable=True, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=True, default=utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
