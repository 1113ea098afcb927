# Overview: Append-only audit trail writes and reads.

from __future__ import annotations

from flask import has_request_context, request

from ..extensions import db
from ..models import AuditLog
from ..models.mixins import serialize_value
from ..time_utils import utcnow


def _json_safe(values: dict | None) -> dict | None:
    if values is None:
        return None
    return {k: serialize_value(v) for k, v in values.items()}


def record_audit(
    *,
    user_id: str | None,
    action_type: str,
    table_name: str | None = None,
    record_id: str | None = None,
    parish_id: str | None = None,
    old_values: dict | None = None,
    new_values: dict | None = None,
) -> AuditLog:
    """
    Stage an audit row in the current session.

    The caller commits, so the audit row lands in the same transaction as the
    change it describes.
    """
    ip_address = None
    user_agent = None
    if has_request_context():
        ip_address = request.remote_addr
        user_agent = (request.headers.get("User-Agent") or "")[:512] or None

    entry = AuditLog(
        user_id=user_id,
        parish_id=parish_id,
        action_type=action_type,
        table_name=table_name,
        record_id=record_id,
        old_values=_json_safe(old_values),
        new_values=_json_safe(new_values),
        ip_address=ip_address,
        user_agent=user_agent,
        created_at=utcnow(),
    )
    db.session.add(entry)
    return entry


def list_audit_logs(
    *,
    parish_id: str | None = None,
    table_name: str | None = None,
    action_type: str | None = None,
    user_id: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[AuditLog]:
    query = db.session.query(AuditLog)
    if parish_id is not None:
        query = query.filter(AuditLog.parish_id == parish_id)
    if table_name:
        query = query.filter(AuditLog.table_name == table_name)
    if action_type:
        query = query.filter(AuditLog.action_type == action_type)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    return (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id)
        .limit(limit)
        .offset(offset)
        .all()
    )
