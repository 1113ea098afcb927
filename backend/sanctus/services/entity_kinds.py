# Overview: Field policies for every parish-owned table served by the CRUD handlers.

from ..models import (
    Budget,
    Cluster,
    ExpenseVoucher,
    Family,
    IncomeTransaction,
    Member,
    SacramentRecord,
    SmallChristianCommunity,
)
from ..validation import ValidationError, require_positive_amount
from .entity_service import EntityKind


def _check_fiscal_month(values: dict) -> None:
    month = values.get("fiscal_month")
    if month is not None and not 1 <= month <= 12:
        raise ValidationError("fiscal_month must be between 1 and 12")


CLUSTERS = EntityKind(
    model=Cluster,
    label="Cluster",
    writable=frozenset({
        "cluster_code", "cluster_name", "location_description", "leader_name", "is_active",
    }),
    required=frozenset({"cluster_code", "cluster_name"}),
    order_by=("cluster_name",),
)

SCCS = EntityKind(
    model=SmallChristianCommunity,
    label="SCC",
    writable=frozenset({
        "cluster_id", "scc_code", "scc_name", "patron_saint", "leader_name",
        "location_description", "meeting_day", "meeting_time", "is_active",
    }),
    required=frozenset({"scc_code", "scc_name"}),
    references={"cluster_id": (Cluster, "Cluster")},
    order_by=("scc_name",),
)

FAMILIES = EntityKind(
    model=Family,
    label="Family",
    writable=frozenset({
        "scc_id", "family_code", "family_name", "head_of_family_id", "physical_address",
        "postal_address", "primary_phone", "secondary_phone", "email", "notes", "is_active",
    }),
    required=frozenset({"family_code", "family_name"}),
    references={
        "scc_id": (SmallChristianCommunity, "SCC"),
        "head_of_family_id": (Member, "Member"),
    },
    order_by=("family_name",),
)

MEMBERS = EntityKind(
    model=Member,
    label="Member",
    writable=frozenset({
        "family_id", "scc_id", "member_code", "first_name", "middle_name", "last_name",
        "date_of_birth", "gender", "marital_status", "national_id", "occupation", "email",
        "phone_number", "physical_address", "photo_url", "family_role", "notes", "is_active",
    }),
    required=frozenset({"member_code", "first_name", "last_name"}),
    references={
        "family_id": (Family, "Family"),
        "scc_id": (SmallChristianCommunity, "SCC"),
    },
    order_by=("last_name", "first_name"),
)

SACRAMENTS = EntityKind(
    model=SacramentRecord,
    label="Sacrament record",
    writable=frozenset({
        "member_id", "sacrament_type", "sacrament_date", "officiating_minister",
        "church_name", "certificate_number", "godparent_1_name", "godparent_2_name",
        "spouse_id", "spouse_name", "witnesses", "notes",
    }),
    required=frozenset({"member_id", "sacrament_type", "sacrament_date"}),
    references={
        "member_id": (Member, "Member"),
        "spouse_id": (Member, "Member"),
    },
    order_by=("sacrament_date",),
)

INCOME = EntityKind(
    model=IncomeTransaction,
    label="Income transaction",
    writable=frozenset({
        "member_id", "family_id", "transaction_number", "category", "amount",
        "payment_method", "transaction_date", "transaction_time", "description",
        "reference_number", "received_by", "receipt_printed", "receipt_printed_at",
    }),
    required=frozenset({
        "transaction_number", "category", "amount", "payment_method", "transaction_date",
    }),
    references={
        "member_id": (Member, "Member"),
        "family_id": (Family, "Family"),
    },
    checks=(require_positive_amount,),
    order_by=("transaction_date", "created_at"),
)

EXPENSES = EntityKind(
    model=ExpenseVoucher,
    label="Expense voucher",
    writable=frozenset({
        "voucher_number", "category", "amount", "payment_method", "payee_name",
        "payee_phone", "expense_date", "description", "reference_number",
        "approval_status", "requested_by", "approved_by", "approved_at",
        "rejection_reason", "paid", "paid_at",
    }),
    required=frozenset({
        "voucher_number", "category", "amount", "payment_method", "payee_name",
        "expense_date", "description",
    }),
    checks=(require_positive_amount,),
    order_by=("expense_date", "created_at"),
    creator_field="requested_by",
)

BUDGETS = EntityKind(
    model=Budget,
    label="Budget",
    writable=frozenset({
        "category", "amount", "fiscal_year", "fiscal_month", "description",
    }),
    required=frozenset({"category", "amount", "fiscal_year"}),
    checks=(require_positive_amount, _check_fiscal_month),
    order_by=("fiscal_year", "fiscal_month", "category"),
    creator_field="created_by",
)
