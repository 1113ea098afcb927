from __future__ import annotations

from ..extensions import db
from .choices import APPROVAL_STATUSES, PAYMENT_METHODS, TRANSACTION_CATEGORIES
from .mixins import EntityMixin, choice_column, uuid_column


class IncomeTransaction(EntityMixin, db.Model):
    """
    Money received by a parish (tithe, offertory, fees...).

    is_synced/synced_at reflect the last server-side merge from a device and
    are owned by the server: sync writes force them regardless of payload.
    """
    __tablename__ = "income_transactions"
    __table_args__ = (
        db.Index("ix_income_parish_date", "parish_id", "transaction_date"),
    )

    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=False, index=True)
    member_id = uuid_column(db.ForeignKey("members.id"), nullable=True, index=True)
    family_id = uuid_column(db.ForeignKey("families.id"), nullable=True)
    transaction_number = db.Column(db.String(64), nullable=False)
    category = choice_column(TRANSACTION_CATEGORIES, nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    payment_method = choice_column(PAYMENT_METHODS, nullable=False)
    transaction_date = db.Column(db.Date, nullable=False)
    transaction_time = db.Column(db.Time, nullable=True)
    description = db.Column(db.Text, nullable=True)
    reference_number = db.Column(db.String(128), nullable=True)
    received_by = uuid_column(nullable=True)
    receipt_printed = db.Column(db.Boolean, nullable=True, default=False)
    receipt_printed_at = db.Column(db.DateTime, nullable=True)
    is_synced = db.Column(db.Boolean, nullable=True, default=False)
    synced_at = db.Column(db.DateTime, nullable=True)


class ExpenseVoucher(EntityMixin, db.Model):
    __tablename__ = "expense_vouchers"
    __table_args__ = (
        db.Index("ix_expense_parish_date", "parish_id", "expense_date"),
    )

    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=False, index=True)
    voucher_number = db.Column(db.String(64), nullable=False)
    category = choice_column(TRANSACTION_CATEGORIES, nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    payment_method = choice_column(PAYMENT_METHODS, nullable=False)
    payee_name = db.Column(db.String(255), nullable=False)
    payee_phone = db.Column(db.String(32), nullable=True)
    expense_date = db.Column(db.Date, nullable=False)
    description = db.Column(db.Text, nullable=False)
    reference_number = db.Column(db.String(128), nullable=True)
    approval_status = choice_column(APPROVAL_STATUSES, nullable=True, default="PENDING")
    requested_by = uuid_column(nullable=False)
    approved_by = uuid_column(nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    paid = db.Column(db.Boolean, nullable=True, default=False)
    paid_at = db.Column(db.DateTime, nullable=True)
    is_synced = db.Column(db.Boolean, nullable=True, default=False)
    synced_at = db.Column(db.DateTime, nullable=True)


class Budget(EntityMixin, db.Model):
    __tablename__ = "budgets"
    __table_args__ = (
        db.Index("ix_budgets_parish_year", "parish_id", "fiscal_year"),
    )

    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=False, index=True)
    category = choice_column(TRANSACTION_CATEGORIES, nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    fiscal_year = db.Column(db.Integer, nullable=False)
    fiscal_month = db.Column(db.Integer, nullable=True)
    description = db.Column(db.Text, nullable=True)
    created_by = uuid_column(nullable=True)
