from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow
from .mixins import SerializeMixin, new_id, uuid_column


class AppSetting(SerializeMixin, db.Model):
    """
    Key-value application setting.

    A row with parish_id NULL is a diocese-wide default. Keys are unique per
    parish, and unique among the diocese-wide rows (partial index, since
    NULLs never collide in a plain unique constraint).
    """
    __tablename__ = "app_settings"
    __table_args__ = (
        db.UniqueConstraint("parish_id", "setting_key", name="uq_app_settings_parish_key"),
        db.Index(
            "uq_app_settings_global_key",
            "setting_key",
            unique=True,
            sqlite_where=db.text("parish_id IS NULL"),
            postgresql_where=db.text("parish_id IS NULL"),
        ),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id, info={"uuid": True})
    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=True, index=True)
    setting_key = db.Column(db.String(100), nullable=False)
    setting_value = db.Column(db.Text, nullable=False)
    setting_group = db.Column(db.String(50), nullable=False, default="general", index=True)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
