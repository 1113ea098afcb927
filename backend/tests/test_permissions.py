# Overview: Pytest coverage for role permissions and time-boxed per-user overrides.

"""
Permission overlay tests.

Effective permissions = role permissions UNION overrides that are active and
not yet expired.
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy import insert

from sanctus.errors import BadRequest, Conflict, Forbidden, NotFound
from sanctus.extensions import db
from sanctus.models import AuditLog, CustomRole, Permission, UserPermissionOverride
from sanctus.permissions import ALL_ROLES, DEFAULT_ROLE_PERMISSIONS, PERMISSION_DEFINITIONS, UserRole
from sanctus.services import permission_service
from sanctus.time_utils import utcnow

from conftest import auth_headers, principal_for


def permission_id(key: str) -> str:
    return db.session.query(Permission).filter_by(permission_key=key).one().id


def role_id(role_name: str) -> str:
    return db.session.query(CustomRole).filter_by(role_name=role_name).one().id


class TestBootstrap:

    def test_catalog_and_system_roles_seeded(self, db_session):
        assert db.session.query(Permission).count() == len(PERMISSION_DEFINITIONS)
        roles = {r.role_name: r for r in db.session.query(CustomRole).all()}
        assert set(roles) == set(ALL_ROLES)
        assert all(r.is_system for r in roles.values())

    def test_bootstrap_is_idempotent(self, db_session):
        assert permission_service.bootstrap_rbac() == (0, 0)

    def test_role_defaults_applied(self, db_session):
        keys = {p.permission_key for p in permission_service.get_role_permissions(role_id(UserRole.VIEWER))}
        assert keys == set(DEFAULT_ROLE_PERMISSIONS[UserRole.VIEWER])


class TestOverrides:

    def test_role_permissions_only(self, db_session, secretary_a):
        effective = permission_service.list_effective_permissions(secretary_a)
        assert effective == set(DEFAULT_ROLE_PERMISSIONS[UserRole.SECRETARY])
        assert "APPROVE_EXPENSES" not in effective

    def test_grant_adds_permission(self, db_session, parish_admin_a, secretary_a):
        permission_service.grant_overrides(
            actor=principal_for(parish_admin_a),
            user_id=secretary_a.id,
            permission_ids=[permission_id("APPROVE_EXPENSES")],
            reason="Treasurer on leave",
        )
        assert permission_service.user_has_permission(secretary_a, "APPROVE_EXPENSES")

    def test_expired_override_is_ignored(self, db_session, parish_admin_a, secretary_a):
        now = utcnow()
        permission_service.grant_overrides(
            actor=principal_for(parish_admin_a),
            user_id=secretary_a.id,
            permission_ids=[permission_id("APPROVE_EXPENSES")],
            expires_at=now + timedelta(hours=1),
            now=now,
        )

        assert permission_service.user_has_permission(secretary_a, "APPROVE_EXPENSES", now=now)
        later = now + timedelta(hours=2)
        assert not permission_service.user_has_permission(secretary_a, "APPROVE_EXPENSES", now=later)
        assert permission_service.list_user_overrides(user_id=secretary_a.id, now=later) == []
        assert len(permission_service.list_user_overrides(
            user_id=secretary_a.id, active_only=False, now=later,
        )) == 1

    def test_revoke_removes_permission_and_keeps_row(self, db_session, parish_admin_a, secretary_a):
        actor = principal_for(parish_admin_a)
        pid = permission_id("APPROVE_EXPENSES")
        permission_service.grant_overrides(actor=actor, user_id=secretary_a.id, permission_ids=[pid])

        revoked = permission_service.revoke_overrides(actor=actor, user_id=secretary_a.id, permission_ids=[pid])

        assert revoked == 1
        assert not permission_service.user_has_permission(secretary_a, "APPROVE_EXPENSES")
        row = db.session.query(UserPermissionOverride).filter_by(user_id=secretary_a.id).one()
        assert row.is_active is False

    def test_regrant_updates_the_same_row(self, db_session, parish_admin_a, secretary_a):
        actor = principal_for(parish_admin_a)
        pid = permission_id("APPROVE_EXPENSES")
        permission_service.grant_overrides(actor=actor, user_id=secretary_a.id, permission_ids=[pid], reason="first")
        permission_service.revoke_overrides(actor=actor, user_id=secretary_a.id, permission_ids=[pid])

        permission_service.grant_overrides(actor=actor, user_id=secretary_a.id, permission_ids=[pid, pid], reason="second")

        rows = db.session.query(UserPermissionOverride).filter_by(user_id=secretary_a.id).all()
        assert len(rows) == 1
        assert rows[0].is_active is True
        assert rows[0].reason == "second"

    def test_grant_updates_a_row_written_concurrently(
        self, db_session, monkeypatch, parish_admin_a, secretary_a, super_admin
    ):
        pid = permission_id("APPROVE_EXPENSES")
        load = permission_service._load_permissions

        def load_then_compete(ids):
            permissions = load(ids)
            # Another admin's grant lands after our read, before our write
            db.session.execute(insert(UserPermissionOverride).values(
                id=str(uuid4()),
                user_id=secretary_a.id,
                permission_id=pid,
                granted_by=super_admin.id,
                reason="other admin",
                is_active=False,
                created_at=utcnow(),
            ))
            return permissions

        monkeypatch.setattr(permission_service, "_load_permissions", load_then_compete)
        overrides = permission_service.grant_overrides(
            actor=principal_for(parish_admin_a), user_id=secretary_a.id, permission_ids=[pid], reason="mine",
        )

        rows = db.session.query(UserPermissionOverride).filter_by(user_id=secretary_a.id).all()
        assert len(rows) == 1
        assert (rows[0].granted_by, rows[0].reason, rows[0].is_active) == (parish_admin_a.id, "mine", True)
        assert [o.permission_id for o in overrides] == [pid]

    def test_unknown_permission_rejected_before_writing(self, db_session, parish_admin_a, secretary_a):
        with pytest.raises(BadRequest, match="Unknown permission ids"):
            permission_service.grant_overrides(
                actor=principal_for(parish_admin_a),
                user_id=secretary_a.id,
                permission_ids=[permission_id("APPROVE_EXPENSES"), "3f1c8a52-0000-4000-8000-000000000000"],
            )
        assert db.session.query(UserPermissionOverride).count() == 0

    def test_empty_grant_rejected(self, db_session, parish_admin_a, secretary_a):
        with pytest.raises(BadRequest):
            permission_service.grant_overrides(
                actor=principal_for(parish_admin_a), user_id=secretary_a.id, permission_ids=[],
            )

    def test_cannot_grant_across_parishes(self, db_session, parish_admin_a, secretary_b):
        with pytest.raises(NotFound):
            permission_service.grant_overrides(
                actor=principal_for(parish_admin_a),
                user_id=secretary_b.id,
                permission_ids=[permission_id("APPROVE_EXPENSES")],
            )

    def test_grant_is_audited(self, db_session, parish_admin_a, secretary_a):
        permission_service.grant_overrides(
            actor=principal_for(parish_admin_a),
            user_id=secretary_a.id,
            permission_ids=[permission_id("APPROVE_EXPENSES")],
        )
        entry = db.session.query(AuditLog).filter_by(action_type="PERMISSION_OVERRIDE_GRANTED").one()
        assert entry.user_id == parish_admin_a.id
        assert entry.parish_id == secretary_a.parish_id
        assert entry.new_values["permission_keys"] == ["APPROVE_EXPENSES"]


class TestRoles:

    def test_system_roles_cannot_be_deleted(self, db_session, super_admin):
        with pytest.raises(Forbidden, match="Cannot delete system roles"):
            permission_service.delete_role(actor=principal_for(super_admin), role_id=role_id(UserRole.VIEWER))
        assert db.session.query(CustomRole).filter_by(role_name=UserRole.VIEWER).count() == 1

    def test_custom_role_lifecycle(self, db_session, super_admin):
        actor = principal_for(super_admin)
        role = permission_service.create_role(
            actor=actor,
            role_name="CHOIR_TREASURER",
            display_name="Choir treasurer",
            permission_ids=[permission_id("VIEW_FINANCE")],
        )
        assert role.is_system is False

        permission_service.delete_role(actor=actor, role_id=role.id)

        assert db.session.query(CustomRole).filter_by(role_name="CHOIR_TREASURER").count() == 0

    def test_duplicate_role_name_conflicts(self, db_session, super_admin):
        with pytest.raises(Conflict):
            permission_service.create_role(
                actor=principal_for(super_admin), role_name=UserRole.VIEWER, display_name="Again",
            )

    def test_set_role_permissions_replaces_set(self, db_session, super_admin, viewer_a):
        rid = role_id(UserRole.VIEWER)
        result = permission_service.set_role_permissions(
            actor=principal_for(super_admin),
            role_id=rid,
            permission_ids=[permission_id("VIEW_MEMBERS"), permission_id("VIEW_BUDGETS")],
        )

        assert {p.permission_key for p in result} == {"VIEW_MEMBERS", "VIEW_BUDGETS"}
        assert permission_service.list_effective_permissions(viewer_a) == {"VIEW_MEMBERS", "VIEW_BUDGETS"}

    def test_set_role_permissions_failure_keeps_previous(self, db_session, super_admin):
        rid = role_id(UserRole.VIEWER)
        before = {p.id for p in permission_service.get_role_permissions(rid)}

        with pytest.raises(BadRequest):
            permission_service.set_role_permissions(
                actor=principal_for(super_admin),
                role_id=rid,
                permission_ids=[permission_id("VIEW_MEMBERS"), "not-a-uuid"],
            )

        assert {p.id for p in permission_service.get_role_permissions(rid)} == before

    def test_update_never_renames(self, db_session, super_admin):
        rid = role_id(UserRole.SECRETARY)
        role = permission_service.update_role(
            actor=principal_for(super_admin), role_id=rid, display_name="Parish secretary",
        )
        assert role.role_name == UserRole.SECRETARY
        assert role.display_name == "Parish secretary"


class TestRbacRoutes:

    def test_secretary_cannot_manage_roles(self, app, client, secretary_a):
        resp = client.get("/roles", headers=auth_headers(app, secretary_a))
        assert resp.status_code == 403

    def test_grant_and_list_over_http(self, app, client, parish_admin_a, secretary_a):
        headers = auth_headers(app, parish_admin_a)
        resp = client.post("/permissions/overrides", headers=headers, json={
            "user_id": secretary_a.id,
            "permission_ids": [permission_id("APPROVE_EXPENSES")],
            "expires_at": "2099-01-01T00:00:00Z",
        })

        assert resp.status_code == 200, resp.get_json()
        overrides = resp.get_json()
        assert [o["permission_key"] for o in overrides] == ["APPROVE_EXPENSES"]
        assert overrides[0]["expires_at"] == "2099-01-01T00:00:00Z"

        resp = client.get(f"/users/{secretary_a.id}/permissions", headers=headers)
        assert "APPROVE_EXPENSES" in resp.get_json()["permissions"]

    def test_revoke_over_http(self, app, client, parish_admin_a, secretary_a):
        headers = auth_headers(app, parish_admin_a)
        pid = permission_id("APPROVE_EXPENSES")
        client.post("/permissions/overrides", headers=headers, json={
            "user_id": secretary_a.id, "permission_ids": [pid],
        })

        resp = client.post("/permissions/overrides/revoke", headers=headers, json={
            "user_id": secretary_a.id, "permission_ids": [pid],
        })

        assert resp.status_code == 204
        resp = client.get(f"/permissions/overrides?user_id={secretary_a.id}", headers=headers)
        assert resp.get_json() == []

    def test_delete_system_role_over_http(self, app, client, super_admin):
        resp = client.delete(f"/roles/{role_id(UserRole.VIEWER)}", headers=auth_headers(app, super_admin))
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Cannot delete system roles"

    def test_listing_overrides_stays_in_parish(self, app, client, parish_admin_a, parish_admin_b, secretary_b):
        permission_service.grant_overrides(
            actor=principal_for(parish_admin_b),
            user_id=secretary_b.id,
            permission_ids=[permission_id("APPROVE_EXPENSES")],
        )

        resp = client.get("/permissions/overrides", headers=auth_headers(app, parish_admin_a))

        assert resp.status_code == 200
        assert resp.get_json() == []
