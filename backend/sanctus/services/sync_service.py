# Overview: Offline sync reconciliation; applies a device batch record by record.

"""
Sync Reconciler

A device replays its queued mutations as an ordered list of change records:
    {table, operation: insert | update | delete, data, timestamp}

Per record: Received -> Dispatched -> Applied | Failed

- Records run strictly in the order supplied; there is no reordering
- Each record is its own transaction: commit on success, rollback on failure,
  so one bad record never leaves partial state or touches its siblings
- The batch is NOT atomic and never aborts early
- Unknown table names are forward-compatible no-ops: counted as applied
- Unknown operations fail that record only

When a principal is supplied every record is gated by the handler's role
check first (finance tables need the finance capability), then scoped: the
payload's parish_id (insert/update) and the stored row's parish_id
(update/delete) must resolve for the principal. A denial fails only that
record.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ApiError
from ..extensions import db
from ..logging_setup import get_logger
from ..time_utils import utcnow
from .scope_service import resolve_parish_id
from .sync_handlers import SyncHandler, SyncRecordError, get_handler
from .token_service import Principal


logger = get_logger(__name__)

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial_success"


@dataclass
class ChangeRecord:
    table: str
    operation: str
    data: object = None
    timestamp: str | None = None

    @classmethod
    def from_dict(cls, raw: dict) -> "ChangeRecord":
        return cls(
            table=raw["table"],
            operation=raw["operation"],
            data=raw.get("data"),
            timestamp=raw.get("timestamp"),
        )


@dataclass
class SyncResult:
    synced_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        return STATUS_SUCCESS if not self.errors else STATUS_PARTIAL

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "synced_count": self.synced_count,
            "errors": list(self.errors),
        }


def _check_role(handler: SyncHandler, principal: Principal | None) -> None:
    if principal is None:
        return
    try:
        handler.write_check(principal)
    except ApiError as e:
        raise SyncRecordError(f"Forbidden: {e.message}")


def _check_scope(principal: Principal | None, parish_id) -> None:
    if principal is None or parish_id is None:
        return
    try:
        resolve_parish_id(principal, parish_id)
    except ApiError as e:
        raise SyncRecordError(f"Forbidden: {e.message}")


def _apply(handler: SyncHandler, change: ChangeRecord, principal: Principal | None) -> None:
    """Run one change through its handler. Raises SyncRecordError or SQLAlchemyError."""
    _check_role(handler, principal)
    now = utcnow()
    op = change.operation

    if op == "insert":
        values = handler.deserialize(change.data)
        _check_scope(principal, values["parish_id"])
        handler.insert(values, now)

    elif op == "update":
        values = handler.deserialize(change.data)
        _check_scope(principal, values["parish_id"])
        _check_scope(principal, handler.stored_parish_id(values["id"]))
        handler.update(values, now)

    elif op == "delete":
        record_id = handler.record_id(change.data)
        _check_scope(principal, handler.stored_parish_id(record_id))
        handler.delete(record_id, now)

    else:
        raise SyncRecordError(f"Unknown operation: {op}")


def apply_change(change: ChangeRecord, principal: Principal | None = None) -> str | None:
    """
    Apply one change record in its own transaction.

    Returns None when the record is applied (or skipped as an unknown table),
    otherwise the error string for the batch result.
    """
    handler = get_handler(change.table)
    if handler is None:
        logger.warning("sync_unknown_table", table=change.table)
        return None

    try:
        _apply(handler, change, principal)
        db.session.commit()
    except SyncRecordError as e:
        db.session.rollback()
        detail = str(e)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("sync_store_error", table=change.table, operation=change.operation)
        detail = f"Database error: {type(e).__name__}"
    else:
        return None

    message = f"Error processing change for {change.table}: {detail}"
    logger.error("sync_record_failed", table=change.table, operation=change.operation, error=detail)
    return message


def reconcile(changes, principal: Principal | None = None, device_id: str | None = None) -> SyncResult:
    """Apply a batch in order; never raises for per-record failures."""
    result = SyncResult()
    logger.info(
        "sync_batch_started",
        device_id=device_id,
        change_count=len(changes),
        user_id=principal.user_id if principal else None,
    )

    for change in changes:
        if isinstance(change, dict):
            change = ChangeRecord.from_dict(change)
        error = apply_change(change, principal)
        if error is None:
            result.synced_count += 1
        else:
            result.errors.append(error)

    logger.info(
        "sync_batch_finished",
        device_id=device_id,
        status=result.status,
        synced_count=result.synced_count,
        error_count=len(result.errors),
    )
    return result
