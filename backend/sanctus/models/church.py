from __future__ import annotations

from ..extensions import db
from .mixins import EntityMixin, uuid_column


class Diocese(EntityMixin, db.Model):
    """Top of the church hierarchy; parishes belong to exactly one diocese."""
    __tablename__ = "dioceses"

    diocese_code = db.Column(db.String(32), nullable=False, unique=True)
    diocese_name = db.Column(db.String(255), nullable=False)
    bishop_name = db.Column(db.String(255), nullable=True)
    established_date = db.Column(db.Date, nullable=True)
    headquarters_address = db.Column(db.Text, nullable=True)
    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)
    country = db.Column(db.String(64), nullable=True)
    currency_code = db.Column(db.String(3), nullable=True)
    logo_url = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)


class Parish(EntityMixin, db.Model):
    """
    The tenant boundary.

    Every parish-owned row carries parish_id, and every parish-scoped query
    binds the id produced by scope resolution, never the raw request value.
    """
    __tablename__ = "parishes"

    diocese_id = uuid_column(db.ForeignKey("dioceses.id"), nullable=False, index=True)
    parish_code = db.Column(db.String(32), nullable=False, unique=True)
    parish_name = db.Column(db.String(255), nullable=False)
    patron_saint = db.Column(db.String(255), nullable=True)
    priest_name = db.Column(db.String(255), nullable=True)
    priest_id = uuid_column(nullable=True)
    established_date = db.Column(db.Date, nullable=True)
    physical_address = db.Column(db.Text, nullable=True)
    postal_address = db.Column(db.Text, nullable=True)
    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)
    bank_account_name = db.Column(db.String(255), nullable=True)
    bank_account_number = db.Column(db.String(64), nullable=True)
    bank_name = db.Column(db.String(255), nullable=True)
    bank_branch = db.Column(db.String(255), nullable=True)
    mobile_money_name = db.Column(db.String(64), nullable=True)
    mobile_money_number = db.Column(db.String(32), nullable=True)
    mobile_money_account_name = db.Column(db.String(255), nullable=True)
    timezone = db.Column(db.String(64), nullable=True)
    logo_url = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    diocese = db.relationship("Diocese", backref=db.backref("parishes", lazy=True))


class Cluster(EntityMixin, db.Model):
    """Geographic grouping of small Christian communities within a parish."""
    __tablename__ = "clusters"
    __table_args__ = (
        db.UniqueConstraint("parish_id", "cluster_code", name="uq_clusters_parish_code"),
    )

    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=False, index=True)
    cluster_code = db.Column(db.String(32), nullable=False)
    cluster_name = db.Column(db.String(255), nullable=False)
    location_description = db.Column(db.Text, nullable=True)
    leader_name = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)


class SmallChristianCommunity(EntityMixin, db.Model):
    __tablename__ = "sccs"
    __table_args__ = (
        db.UniqueConstraint("parish_id", "scc_code", name="uq_sccs_parish_code"),
    )

    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=False, index=True)
    cluster_id = uuid_column(db.ForeignKey("clusters.id"), nullable=True, index=True)
    scc_code = db.Column(db.String(32), nullable=False)
    scc_name = db.Column(db.String(255), nullable=False)
    patron_saint = db.Column(db.String(255), nullable=True)
    leader_name = db.Column(db.String(255), nullable=True)
    location_description = db.Column(db.Text, nullable=True)
    meeting_day = db.Column(db.String(16), nullable=True)
    meeting_time = db.Column(db.Time, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)


class Family(EntityMixin, db.Model):
    __tablename__ = "families"
    __table_args__ = (
        db.UniqueConstraint("parish_id", "family_code", name="uq_families_parish_code"),
    )

    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=False, index=True)
    scc_id = uuid_column(db.ForeignKey("sccs.id"), nullable=True, index=True)
    family_code = db.Column(db.String(32), nullable=False)
    family_name = db.Column(db.String(255), nullable=False)
    head_of_family_id = uuid_column(nullable=True)
    physical_address = db.Column(db.Text, nullable=True)
    postal_address = db.Column(db.Text, nullable=True)
    primary_phone = db.Column(db.String(32), nullable=True)
    secondary_phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
