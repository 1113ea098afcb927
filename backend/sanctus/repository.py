# Overview: Soft-delete aware data access for parish entities.

"""
Live-row repository.

Every read path goes through LiveRepository, which adds the
deleted_at IS NULL predicate itself; include_deleted() is the only way to
see soft-deleted rows. Point lookups that carry a principal run the scope
resolver against the row's parish and report an out-of-scope row as 404,
so its existence is not revealed.
"""

from __future__ import annotations

from .errors import BadRequest, NotFound
from .extensions import db
from .services.scope_service import can_access_parish
from .time_utils import utcnow
from .validation import ValidationError, normalize_uuid


class LiveRepository:
    def __init__(self, model, label: str | None = None):
        self.model = model
        self.label = label or model.__name__

    def include_deleted(self):
        """Unfiltered query, soft-deleted rows included."""
        return db.session.query(self.model)

    def query(self):
        return self.include_deleted().filter(self.model.deleted_at.is_(None))

    def for_parish(self, parish_id: str):
        return self.query().filter(self.model.parish_id == parish_id)

    def get(self, record_id):
        try:
            record_id = normalize_uuid(record_id)
        except ValidationError:
            return None
        return self.query().filter(self.model.id == record_id).first()

    def get_or_404(self, record_id):
        row = self.get(record_id)
        if row is None:
            raise NotFound(f"{self.label} not found")
        return row

    def get_in_scope(self, record_id, principal, parish_attr: str = "parish_id"):
        """Live row the principal may access, else NotFound."""
        row = self.get_or_404(record_id)
        parish_id = row.id if parish_attr == "id" else getattr(row, parish_attr)
        if not can_access_parish(principal, parish_id):
            raise NotFound(f"{self.label} not found")
        return row

    def create(self, values: dict):
        now = utcnow()
        row = self.model(**values)
        if getattr(row, "created_at", None) is None:
            row.created_at = now
        row.updated_at = now
        db.session.add(row)
        return row

    def update(self, row, patch) -> dict:
        """Apply a tri-state patch; returns the previous values of changed fields."""
        old = {}
        for key, value in patch.items():
            current = getattr(row, key)
            if current != value:
                old[key] = current
                setattr(row, key, value)
        row.updated_at = utcnow()
        return old

    def soft_delete(self, row) -> None:
        if row.deleted_at is None:
            row.deleted_at = utcnow()
            row.updated_at = row.deleted_at

    def page(self, query, limit: int, offset: int, *order_by):
        if order_by:
            query = query.order_by(*order_by)
        return query.limit(limit).offset(offset).all()


def require_live(model, record_id, label: str):
    """Foreign-key guard for writes: the referenced row must exist and be live."""
    if record_id is None:
        return None
    row = LiveRepository(model, label).get(record_id)
    if row is None:
        raise BadRequest(f"{label} not found")
    return row
