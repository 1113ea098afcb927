from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .mixins import new_id


class AuditLog(db.Model):
    """
    Attributable record of an administrative or destructive action.

    IMMUTABLE: append-only. Rows are never updated or deleted.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("ix_audit_logs_parish_created", "parish_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), nullable=True, index=True)
    parish_id = db.Column(db.String(36), nullable=True, index=True)
    action_type = db.Column(db.String(64), nullable=False, index=True)
    table_name = db.Column(db.String(64), nullable=True, index=True)
    record_id = db.Column(db.String(36), nullable=True)
    old_values = db.Column(db.JSON, nullable=True)
    new_values = db.Column(db.JSON, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "parish_id": self.parish_id,
            "action_type": self.action_type,
            "table_name": self.table_name,
            "record_id": self.record_id,
            "old_values": self.old_values,
            "new_values": self.new_values,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "created_at": to_utc_z(self.created_at),
        }
