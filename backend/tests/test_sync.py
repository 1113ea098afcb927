# Overview: Pytest coverage for offline sync reconciliation.

"""
Sync reconciler tests.

Each change record is applied in its own transaction; a failed record never
affects its siblings and the batch never aborts early.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from sanctus.extensions import db
from sanctus.models import IncomeTransaction, Member
from sanctus.services.sync_handlers import registered_tables
from sanctus.services.sync_service import ChangeRecord, reconcile

from conftest import auth_headers, principal_for


def income(parish_id, **overrides):
    data = {
        "id": str(uuid4()),
        "parish_id": parish_id,
        "transaction_number": "TX-0001",
        "category": "TITHE",
        "amount": "1500.00",
        "payment_method": "CASH",
        "transaction_date": "2026-01-05",
        "description": "Sunday tithe",
    }
    data.update(overrides)
    return data


def change(operation, data, table="income_transaction"):
    return {"table": table, "operation": operation, "data": data, "timestamp": "2026-01-05T10:00:00Z"}


def stored(model, record_id):
    db.session.expire_all()
    return db.session.get(model, record_id)


class TestRegistry:

    def test_syncable_tables(self):
        assert registered_tables() == ["expense_voucher", "income_transaction", "member", "sacrament"]


class TestInsert:

    def test_insert_is_idempotent(self, db_session, parish_a):
        record = income(parish_a.id)

        result = reconcile([change("insert", record), change("insert", dict(record, amount="9.00"))])

        assert result.to_dict() == {"status": "success", "synced_count": 2, "errors": []}
        assert db_session.query(IncomeTransaction).count() == 1
        assert stored(IncomeTransaction, record["id"]).amount == Decimal("1500.00")

    def test_server_owns_sync_markers(self, db_session, parish_a):
        record = income(parish_a.id, is_synced=False, synced_at=None, deleted_at="2020-01-01T00:00:00Z")

        reconcile([change("insert", record)])

        row = stored(IncomeTransaction, record["id"])
        assert row.is_synced is True
        assert row.synced_at is not None
        assert row.deleted_at is None

    def test_change_record_objects_accepted(self, db_session, parish_a):
        record = income(parish_a.id)
        result = reconcile([ChangeRecord(table="income_transaction", operation="insert", data=record)])
        assert result.synced_count == 1


class TestUpdate:

    def test_last_writer_wins(self, db_session, parish_a):
        record = income(parish_a.id)
        reconcile([change("insert", record)])

        result = reconcile([
            change("update", dict(record, amount="2500.00")),
            change("update", dict(record, amount="3000.00", description=None)),
        ])

        assert result.status == "success"
        row = stored(IncomeTransaction, record["id"])
        assert row.amount == Decimal("3000.00")
        assert row.description is None

    def test_missing_optional_keys_are_cleared(self, db_session, parish_a):
        record = income(parish_a.id, reference_number="REF-1")
        reconcile([change("insert", record)])

        update = dict(record)
        del update["reference_number"]
        reconcile([change("update", update)])

        assert stored(IncomeTransaction, record["id"]).reference_number is None

    def test_update_of_missing_row_is_a_no_op(self, db_session, parish_a):
        result = reconcile([change("update", income(parish_a.id))])

        assert result.synced_count == 1
        assert db_session.query(IncomeTransaction).count() == 0

    def test_update_does_not_resurrect_deleted_row(self, db_session, parish_a):
        record = income(parish_a.id)
        reconcile([change("insert", record), change("delete", {"id": record["id"]})])

        reconcile([change("update", dict(record, amount="10.00"))])

        row = stored(IncomeTransaction, record["id"])
        assert row.deleted_at is not None
        assert row.amount == Decimal("1500.00")


class TestDelete:

    def test_delete_is_soft(self, db_session, parish_a):
        record = income(parish_a.id)
        reconcile([change("insert", record), change("delete", {"id": record["id"]})])

        row = stored(IncomeTransaction, record["id"])
        assert row is not None
        assert row.deleted_at is not None

    def test_repeat_delete_keeps_first_timestamp(self, db_session, parish_a):
        record = income(parish_a.id)
        reconcile([change("insert", record), change("delete", {"id": record["id"]})])
        first = stored(IncomeTransaction, record["id"]).deleted_at

        result = reconcile([change("delete", {"id": record["id"]})])

        assert result.synced_count == 1
        assert stored(IncomeTransaction, record["id"]).deleted_at == first

    def test_delete_without_id(self, db_session):
        result = reconcile([change("delete", {})])
        assert result.errors == ["Error processing change for income_transaction: Missing ID for delete"]

    def test_delete_with_invalid_uuid(self, db_session):
        result = reconcile([change("delete", {"id": "abc"})])
        assert result.errors[0].startswith("Error processing change for income_transaction: Invalid UUID")


class TestFailures:

    def test_unknown_table_is_skipped_and_counted(self, db_session):
        result = reconcile([change("insert", {"id": str(uuid4())}, table="choir_roster")])
        assert result.to_dict() == {"status": "success", "synced_count": 1, "errors": []}

    def test_unknown_operation(self, db_session, parish_a):
        result = reconcile([change("upsert", income(parish_a.id))])

        assert result.status == "partial_success"
        assert result.errors == ["Error processing change for income_transaction: Unknown operation: upsert"]

    def test_partial_failure_keeps_siblings(self, db_session, parish_a):
        good_1, good_2 = income(parish_a.id), income(parish_a.id, transaction_number="TX-0002")
        bad = income(parish_a.id)
        del bad["amount"]

        result = reconcile([change("insert", good_1), change("insert", bad), change("insert", good_2)])

        assert result.synced_count == 2
        assert len(result.errors) == 1
        assert "Deserialization error" in result.errors[0]
        assert result.status == "partial_success"
        assert stored(IncomeTransaction, good_1["id"]) is not None
        assert stored(IncomeTransaction, good_2["id"]) is not None
        assert stored(IncomeTransaction, bad["id"]) is None

    @pytest.mark.parametrize("amount", ["0", "-5.00"])
    def test_non_positive_amount_rejected(self, db_session, parish_a, amount):
        result = reconcile([change("insert", income(parish_a.id, amount=amount))])
        assert "amount must be greater than zero" in result.errors[0]

    def test_data_must_be_an_object(self, db_session):
        result = reconcile([change("insert", ["not", "a", "record"])])
        assert "Deserialization error" in result.errors[0]


class TestMembers:

    def test_head_of_family_flag_maps_to_role(self, db_session, parish_a):
        member = {
            "id": str(uuid4()),
            "parish_id": parish_a.id,
            "member_code": "M-100",
            "first_name": "Joseph",
            "last_name": "Mrema",
            "is_head_of_family": True,
        }

        result = reconcile([change("insert", member, table="member")])

        assert result.status == "success"
        assert stored(Member, member["id"]).family_role == "HEAD"


class TestScopedSync:

    def test_foreign_parish_insert_rejected(self, db_session, accountant_a, parish_b):
        record = income(parish_b.id)

        result = reconcile([change("insert", record)], principal=principal_for(accountant_a))

        assert result.errors == [
            "Error processing change for income_transaction: Forbidden: Cross-parish access denied"
        ]
        assert stored(IncomeTransaction, record["id"]) is None

    def test_cannot_move_foreign_row_into_own_parish(self, db_session, accountant_a, parish_a, parish_b):
        record = income(parish_b.id)
        reconcile([change("insert", record)])

        result = reconcile(
            [change("update", dict(record, parish_id=parish_a.id))],
            principal=principal_for(accountant_a),
        )

        assert "Forbidden" in result.errors[0]
        assert stored(IncomeTransaction, record["id"]).parish_id == parish_b.id

    def test_cannot_delete_foreign_row(self, db_session, accountant_a, parish_b):
        record = income(parish_b.id)
        reconcile([change("insert", record)])

        result = reconcile([change("delete", {"id": record["id"]})], principal=principal_for(accountant_a))

        assert "Forbidden" in result.errors[0]
        assert stored(IncomeTransaction, record["id"]).deleted_at is None

    def test_super_admin_may_sync_any_parish(self, db_session, super_admin, parish_b):
        result = reconcile([change("insert", income(parish_b.id))], principal=principal_for(super_admin))
        assert result.status == "success"


class TestSyncRoleGate:
    """Finance tables need the finance capability, as on the finance routes."""

    def test_secretary_finance_record_fails_member_applies(self, db_session, secretary_a, parish_a):
        record = income(parish_a.id)
        member = {
            "id": str(uuid4()),
            "parish_id": parish_a.id,
            "member_code": "M-200",
            "first_name": "Agnes",
            "last_name": "Njeri",
        }

        result = reconcile(
            [change("insert", record), change("insert", member, table="member")],
            principal=principal_for(secretary_a),
        )

        assert result.to_dict() == {
            "status": "partial_success",
            "synced_count": 1,
            "errors": ["Error processing change for income_transaction: Forbidden: Finance access required"],
        }
        assert stored(IncomeTransaction, record["id"]) is None
        assert stored(Member, member["id"]) is not None

    @pytest.mark.parametrize("operation", ["update", "delete"])
    def test_secretary_cannot_touch_stored_income(self, db_session, secretary_a, parish_a, operation):
        record = income(parish_a.id)
        reconcile([change("insert", record)])
        data = dict(record, amount="1.00") if operation == "update" else {"id": record["id"]}

        result = reconcile([change(operation, data)], principal=principal_for(secretary_a))

        assert result.errors == [
            "Error processing change for income_transaction: Forbidden: Finance access required"
        ]
        row = stored(IncomeTransaction, record["id"])
        assert row.amount == Decimal("1500.00")
        assert row.deleted_at is None

    def test_role_gate_runs_before_deserialization(self, db_session, secretary_a):
        result = reconcile([change("insert", "not an object")], principal=principal_for(secretary_a))
        assert result.errors[0].endswith("Forbidden: Finance access required")

    def test_secretary_income_over_http(self, app, client, secretary_a, parish_a):
        record = income(parish_a.id)
        headers = auth_headers(app, secretary_a)

        assert client.post("/transactions/income", headers=headers, json=record).status_code == 403
        resp = client.post("/sync", headers=headers, json={"changes": [change("insert", record)]})

        assert resp.status_code == 200
        assert resp.get_json()["status"] == "partial_success"
        assert stored(IncomeTransaction, record["id"]) is None


class TestSyncRoute:

    def test_batch_over_http(self, app, client, accountant_a, parish_a):
        record = income(parish_a.id)
        resp = client.post("/sync", headers=auth_headers(app, accountant_a), json={
            "device_id": "tablet-07",
            "changes": [change("insert", record), change("upsert", record)],
        })

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "partial_success"
        assert body["synced_count"] == 1
        assert len(body["errors"]) == 1

    def test_viewer_cannot_sync(self, app, client, viewer_a):
        resp = client.post("/sync", headers=auth_headers(app, viewer_a), json={"changes": []})
        assert resp.status_code == 403

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"changes": "nope"},
            {"changes": [1]},
            {"changes": [{"table": "member"}]},
        ],
    )
    def test_malformed_batch_is_400(self, app, client, secretary_a, body):
        resp = client.post("/sync", headers=auth_headers(app, secretary_a), json=body)
        assert resp.status_code == 400

    def test_requires_auth(self, client, db_session):
        resp = client.post("/sync", json={"changes": []})
        assert resp.status_code == 401
