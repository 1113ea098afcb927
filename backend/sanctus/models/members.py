from __future__ import annotations

from ..extensions import db
from .choices import FAMILY_ROLES, GENDERS, MARITAL_STATUSES, SACRAMENT_TYPES
from .mixins import EntityMixin, choice_column, uuid_column


class Member(EntityMixin, db.Model):
    """
    Parishioner record.

    Created by handlers or by the sync reconciler; ids may be generated on
    the device, so the primary key is never assumed to be server-assigned.
    """
    __tablename__ = "members"
    __table_args__ = (
        db.Index("ix_members_parish_name", "parish_id", "last_name", "first_name"),
    )

    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=False, index=True)
    family_id = uuid_column(db.ForeignKey("families.id"), nullable=True, index=True)
    scc_id = uuid_column(db.ForeignKey("sccs.id"), nullable=True, index=True)
    member_code = db.Column(db.String(32), nullable=False)
    first_name = db.Column(db.String(128), nullable=False)
    middle_name = db.Column(db.String(128), nullable=True)
    last_name = db.Column(db.String(128), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    gender = choice_column(GENDERS)
    marital_status = choice_column(MARITAL_STATUSES)
    national_id = db.Column(db.String(64), nullable=True)
    occupation = db.Column(db.String(128), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)
    physical_address = db.Column(db.Text, nullable=True)
    photo_url = db.Column(db.String(512), nullable=True)
    family_role = choice_column(FAMILY_ROLES)
    notes = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=True, default=True)


class SacramentRecord(EntityMixin, db.Model):
    __tablename__ = "sacrament_records"

    member_id = uuid_column(db.ForeignKey("members.id"), nullable=False, index=True)
    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=False, index=True)
    sacrament_type = choice_column(SACRAMENT_TYPES, nullable=False)
    sacrament_date = db.Column(db.Date, nullable=False)
    officiating_minister = db.Column(db.String(255), nullable=True)
    church_name = db.Column(db.String(255), nullable=True)
    certificate_number = db.Column(db.String(64), nullable=True)
    godparent_1_name = db.Column(db.String(255), nullable=True)
    godparent_2_name = db.Column(db.String(255), nullable=True)
    spouse_id = uuid_column(nullable=True)
    spouse_name = db.Column(db.String(255), nullable=True)
    witnesses = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    member = db.relationship("Member", backref=db.backref("sacraments", lazy=True))
