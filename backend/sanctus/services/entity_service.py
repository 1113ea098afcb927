# Overview: Service-layer CRUD for parish-owned entities; scope, validation and audit in one place.

"""
Parish entity CRUD

Every handler for a parish-owned table goes through these functions so the
same rules hold everywhere:
- the parish id written or filtered on is the resolver's answer, never the
  raw request value
- reads see live rows only (LiveRepository)
- point lookups outside the caller's scope are 404
- references to other rows must point at live rows of the same parish
- updates are tri-state patches; parish_id and id never change
- deletes are soft
- creates, updates and deletes each write an audit row in the same commit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy.exc import IntegrityError

from ..errors import BadRequest, Conflict
from ..extensions import db
from ..logging_setup import get_logger
from ..patch import Patch
from ..repository import LiveRepository
from ..validation import ModelValidationPolicy, policy, validate_payload
from .audit_service import record_audit
from .scope_service import resolve_parish_id
from .token_service import Principal


logger = get_logger(__name__)

IMMUTABLE_FIELDS = frozenset({"id", "parish_id"})


@dataclass(frozen=True)
class EntityKind:
    """How one parish-owned table is validated, referenced and ordered."""
    model: Any
    label: str
    writable: frozenset[str]
    required: frozenset[str] = frozenset()
    # field -> (model, label) of a live row in the same parish
    references: dict = field(default_factory=dict)
    checks: tuple[Callable[[dict], None], ...] = ()
    order_by: tuple[str, ...] = ("created_at",)
    # Filled with the acting user id on create when the caller leaves it empty
    creator_field: str | None = None

    @property
    def table(self) -> str:
        return self.model.__tablename__

    @property
    def create_policy(self) -> ModelValidationPolicy:
        return policy(self.writable | {"id", "parish_id"}, self.required)

    @property
    def update_policy(self) -> ModelValidationPolicy:
        return policy(self.writable - IMMUTABLE_FIELDS)

    def repository(self) -> LiveRepository:
        return LiveRepository(self.model, self.label)

    def ordering(self):
        return [getattr(self.model, name) for name in self.order_by]


def _check_references(kind: EntityKind, values: dict, parish_id: str) -> None:
    for key, (ref_model, ref_label) in kind.references.items():
        ref_id = values.get(key)
        if ref_id is None:
            continue
        row = LiveRepository(ref_model, ref_label).get(ref_id)
        ref_parish = getattr(row, "parish_id", None) if row is not None else None
        if row is None or ref_parish != parish_id:
            raise BadRequest(f"{ref_label} not found")


def list_rows(
    kind: EntityKind,
    parish_id: str,
    *,
    limit: int,
    offset: int,
    filters: dict | None = None,
) -> list:
    query = kind.repository().for_parish(parish_id)
    for key, value in (filters or {}).items():
        if value is not None:
            query = query.filter(getattr(kind.model, key) == value)
    return kind.repository().page(query, limit, offset, *kind.ordering())


def get_row(kind: EntityKind, principal: Principal, record_id):
    return kind.repository().get_in_scope(record_id, principal)


def create_row(kind: EntityKind, principal: Principal, payload) -> Any:
    values = validate_payload(
        model=kind.model,
        payload=payload,
        policy=kind.create_policy,
        partial=False,
    )
    values["parish_id"] = resolve_parish_id(principal, values.get("parish_id"))
    if values.get("id") is None:
        values.pop("id", None)
    if kind.creator_field and values.get(kind.creator_field) is None:
        values[kind.creator_field] = principal.user_id

    for check in kind.checks:
        check(values)
    _check_references(kind, values, values["parish_id"])

    row = kind.repository().create(values)
    try:
        db.session.flush()
        record_audit(
            user_id=principal.user_id,
            action_type="CREATE",
            table_name=kind.table,
            record_id=row.id,
            parish_id=row.parish_id,
            new_values=values,
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f"{kind.label} already exists")

    logger.info("entity_created", table=kind.table, record_id=row.id, parish_id=row.parish_id)
    return row


def update_row(kind: EntityKind, principal: Principal, record_id, payload) -> Any:
    row = get_row(kind, principal, record_id)
    values = validate_payload(
        model=kind.model,
        payload=payload,
        policy=kind.update_policy,
        partial=True,
    )
    patch = Patch(values)

    for check in kind.checks:
        check(values)
    _check_references(kind, values, row.parish_id)

    old = kind.repository().update(row, patch)
    try:
        record_audit(
            user_id=principal.user_id,
            action_type="UPDATE",
            table_name=kind.table,
            record_id=row.id,
            parish_id=row.parish_id,
            old_values=old,
            new_values={k: patch[k] for k in old},
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f"{kind.label} conflicts with an existing record")

    logger.info("entity_updated", table=kind.table, record_id=row.id, fields=sorted(old))
    return row


def delete_row(kind: EntityKind, principal: Principal, record_id) -> None:
    row = get_row(kind, principal, record_id)
    kind.repository().soft_delete(row)
    record_audit(
        user_id=principal.user_id,
        action_type="DELETE",
        table_name=kind.table,
        record_id=row.id,
        parish_id=row.parish_id,
    )
    db.session.commit()
    logger.info("entity_deleted", table=kind.table, record_id=row.id)
