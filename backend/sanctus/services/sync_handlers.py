# Overview: Per-table apply logic for offline sync change records.

"""
Sync handlers, one per syncable table, looked up by table name.

Each handler owns one model and knows how to:
- deserialize a device payload into clean column values
- insert it idempotently (INSERT ... ON CONFLICT (id) DO NOTHING)
- update it last-writer-wins (full overwrite of mutable columns, no version check)
- soft delete it (deleted_at = now, never a physical delete)
- gate the caller by role (write_check), before anything is read

Adding a syncable table is a subclass plus register_handler(); the
reconciler never changes.

Handlers raise SyncRecordError with the per-record detail text; database
failures propagate as SQLAlchemyError and are reported by the reconciler.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import select, update

from ..dialects import dialect_insert
from ..extensions import db
from ..models import ExpenseVoucher, IncomeTransaction, Member, SacramentRecord
from ..validation import ValidationError, policy, require_positive_amount, validate_payload
from .scope_service import require_finance, require_write


class SyncRecordError(Exception):
    """A single change record could not be applied."""


# Columns a device never controls
SERVER_OWNED_COLUMNS = frozenset({"deleted_at", "is_synced", "synced_at"})

# Columns an update never rewrites
IMMUTABLE_ON_UPDATE = frozenset({"id", "created_at"})


class SyncHandler:
    """Base handler bound to one model."""

    table_name: str = ""
    model = None

    # Transactions and vouchers record the server-side merge
    tracks_sync = False

    # Role gate for every operation on this table; same allow-list as the CRUD routes
    write_check = staticmethod(require_write)

    def __init__(self):
        columns = list(self.model.__mapper__.columns)
        self.writable_fields = frozenset(c.key for c in columns) - SERVER_OWNED_COLUMNS
        # Every non-nullable column must be present in a full record
        self.required_fields = frozenset(
            c.key for c in columns if not c.nullable
        ) - SERVER_OWNED_COLUMNS
        self._policy = policy(self.writable_fields, self.required_fields)

    # -- deserialization --

    def prepare(self, data: dict) -> dict:
        """Hook for table-specific payload adjustments before validation."""
        return data

    def check(self, values: dict) -> None:
        """Hook for table-specific value checks after validation."""

    def deserialize(self, data) -> dict:
        if not isinstance(data, dict):
            raise SyncRecordError("Deserialization error: data must be an object")
        try:
            values = validate_payload(
                model=self.model,
                payload=self.prepare(dict(data)),
                policy=self._policy,
                partial=False,
                ignore_unknown=True,
            )
            self.check(values)
        except ValidationError as e:
            raise SyncRecordError(f"Deserialization error: {e}")
        return values

    @staticmethod
    def record_id(data) -> str:
        """Primary key of a delete payload."""
        raw = data.get("id") if isinstance(data, dict) else None
        if not isinstance(raw, str):
            raise SyncRecordError("Missing ID for delete")
        try:
            return str(uuid.UUID(raw))
        except ValueError as e:
            raise SyncRecordError(f"Invalid UUID: {e}")

    # -- reads --

    def stored_parish_id(self, record_id: str) -> str | None:
        """parish_id of the stored row, or None when there is no such row."""
        return db.session.execute(
            select(self.model.parish_id).where(self.model.id == record_id)
        ).scalar_one_or_none()

    # -- writes --

    def _insert_ignore(self, values: dict) -> bool:
        """Insert unless the id exists. Returns True when a row was written."""
        stmt = dialect_insert(self.model).values(**values).on_conflict_do_nothing(
            index_elements=[self.model.id]
        )
        result = db.session.execute(stmt)
        return bool(result.rowcount)

    def insert(self, values: dict, now: datetime) -> bool:
        row = dict(values)
        if row.get("created_at") is None:
            row["created_at"] = now
        if row.get("updated_at") is None:
            row["updated_at"] = now
        if self.tracks_sync:
            row["is_synced"] = True
            row["synced_at"] = now
        return self._insert_ignore(row)

    def update(self, values: dict, now: datetime) -> bool:
        """
        Overwrite every mutable column of the live row with the payload.

        Columns missing from the payload are cleared, the way a full record
        replace does. updated_at comes from the payload; the server clock is
        only a fallback. Returns True when a live row was changed.
        """
        record_id = values["id"]
        row = {
            key: values.get(key)
            for key in self.writable_fields - IMMUTABLE_ON_UPDATE
        }
        if row.get("updated_at") is None:
            row["updated_at"] = now
        if self.tracks_sync:
            row["is_synced"] = True
            row["synced_at"] = now

        result = db.session.execute(
            update(self.model)
            .where(self.model.id == record_id, self.model.deleted_at.is_(None))
            .values(**row)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    def delete(self, record_id: str, now: datetime) -> bool:
        """Soft delete; a row that is already deleted keeps its first deleted_at."""
        result = db.session.execute(
            update(self.model)
            .where(self.model.id == record_id, self.model.deleted_at.is_(None))
            .values(deleted_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)


class IncomeTransactionHandler(SyncHandler):
    table_name = "income_transaction"
    model = IncomeTransaction
    tracks_sync = True
    write_check = staticmethod(require_finance)

    def check(self, values: dict) -> None:
        require_positive_amount(values)


class ExpenseVoucherHandler(SyncHandler):
    table_name = "expense_voucher"
    model = ExpenseVoucher
    tracks_sync = True
    write_check = staticmethod(require_finance)

    def check(self, values: dict) -> None:
        require_positive_amount(values)


class MemberHandler(SyncHandler):
    table_name = "member"
    model = Member

    def prepare(self, data: dict) -> dict:
        # Older clients send a head-of-family flag instead of family_role
        if data.get("family_role") is None and data.get("is_head_of_family") is True:
            data["family_role"] = "HEAD"
        return data


class SacramentHandler(SyncHandler):
    table_name = "sacrament"
    model = SacramentRecord


_HANDLERS: dict[str, SyncHandler] = {}


def register_handler(handler: SyncHandler) -> SyncHandler:
    """Make a handler reachable by its table name; a later registration replaces an earlier one."""
    if not handler.table_name:
        raise ValueError("handler must define table_name")
    _HANDLERS[handler.table_name] = handler
    return handler


def get_handler(table_name: str) -> SyncHandler | None:
    return _HANDLERS.get(table_name)


def registered_tables() -> list[str]:
    return sorted(_HANDLERS)


for _handler_cls in (IncomeTransactionHandler, ExpenseVoucherHandler, MemberHandler, SacramentHandler):
    register_handler(_handler_cls())
