# Overview: Pytest coverage for parish scope resolution and role guards.

"""
Access scope resolver tests.

resolve_parish_id is a pure function of (principal, requested parish id), so
these tests need no database.
"""

from uuid import uuid4

import pytest

from sanctus.errors import BadRequest, Forbidden
from sanctus.permissions import ALL_ROLES, UserRole
from sanctus.services.scope_service import (
    can_access_parish,
    require_admin,
    require_finance,
    require_super_admin,
    require_write,
    resolve_optional_parish_id,
    resolve_parish_id,
)
from sanctus.services.token_service import Principal


HOME = str(uuid4())
OTHER = str(uuid4())
NON_SUPER_ROLES = [r for r in ALL_ROLES if r != UserRole.SUPER_ADMIN]


def principal(role, parish_id=HOME):
    return Principal(user_id=str(uuid4()), role=role, parish_id=parish_id)


class TestSuperAdminScope:

    def test_requested_parish_wins(self):
        assert resolve_parish_id(principal(UserRole.SUPER_ADMIN), OTHER) == OTHER

    def test_falls_back_to_home_parish(self):
        assert resolve_parish_id(principal(UserRole.SUPER_ADMIN), None) == HOME

    def test_no_parish_at_all_is_bad_request(self):
        with pytest.raises(BadRequest, match="parish_id is required"):
            resolve_parish_id(principal(UserRole.SUPER_ADMIN, None), None)

    def test_requested_id_is_canonicalized(self):
        result = resolve_parish_id(principal(UserRole.SUPER_ADMIN, None), OTHER.upper())
        assert result == OTHER

    def test_malformed_request_is_bad_request(self):
        with pytest.raises(BadRequest):
            resolve_parish_id(principal(UserRole.SUPER_ADMIN, None), "parish-7")


class TestParishBoundScope:

    @pytest.mark.parametrize("role", NON_SUPER_ROLES)
    def test_home_parish_when_nothing_requested(self, role):
        assert resolve_parish_id(principal(role), None) == HOME

    @pytest.mark.parametrize("role", NON_SUPER_ROLES)
    def test_requesting_home_parish_is_allowed(self, role):
        assert resolve_parish_id(principal(role), HOME.upper()) == HOME

    @pytest.mark.parametrize("role", NON_SUPER_ROLES)
    def test_other_parish_is_forbidden(self, role):
        with pytest.raises(Forbidden, match="Cross-parish access denied"):
            resolve_parish_id(principal(role), OTHER)

    @pytest.mark.parametrize("role", NON_SUPER_ROLES)
    def test_no_home_parish_is_forbidden(self, role):
        with pytest.raises(Forbidden, match="not assigned to a parish"):
            resolve_parish_id(principal(role, None), None)

    def test_garbage_request_is_forbidden_not_bad_request(self):
        with pytest.raises(Forbidden):
            resolve_parish_id(principal(UserRole.SECRETARY), "not-a-uuid")

    def test_blank_request_means_home_parish(self):
        assert resolve_parish_id(principal(UserRole.VIEWER), "  ") == HOME


class TestOptionalScope:

    @pytest.mark.parametrize("requested", [None, "", "  "])
    def test_super_admin_without_parish_is_diocese_wide(self, requested):
        assert resolve_optional_parish_id(principal(UserRole.SUPER_ADMIN, None), requested) is None

    def test_super_admin_named_parish(self):
        assert resolve_optional_parish_id(principal(UserRole.SUPER_ADMIN, None), OTHER) == OTHER

    def test_super_admin_home_parish(self):
        assert resolve_optional_parish_id(principal(UserRole.SUPER_ADMIN), None) == HOME

    @pytest.mark.parametrize("role", NON_SUPER_ROLES)
    def test_others_resolve_as_usual(self, role):
        assert resolve_optional_parish_id(principal(role), None) == HOME
        with pytest.raises(Forbidden):
            resolve_optional_parish_id(principal(role), OTHER)
        with pytest.raises(Forbidden):
            resolve_optional_parish_id(principal(role, None), None)


class TestCanAccessParish:

    def test_parish_bound_user(self):
        p = principal(UserRole.ACCOUNTANT)
        assert can_access_parish(p, HOME)
        assert not can_access_parish(p, OTHER)
        assert not can_access_parish(p, None)

    def test_super_admin_sees_everything(self):
        p = principal(UserRole.SUPER_ADMIN, None)
        assert can_access_parish(p, HOME)
        assert can_access_parish(p, OTHER)
        assert can_access_parish(p, None)


class TestRoleGuards:

    @pytest.mark.parametrize(
        "guard,allowed",
        [
            (require_write, {UserRole.SUPER_ADMIN, UserRole.PARISH_ADMIN, UserRole.ACCOUNTANT, UserRole.SECRETARY}),
            (require_finance, {UserRole.SUPER_ADMIN, UserRole.PARISH_ADMIN, UserRole.ACCOUNTANT}),
            (require_admin, {UserRole.SUPER_ADMIN, UserRole.PARISH_ADMIN}),
            (require_super_admin, {UserRole.SUPER_ADMIN}),
        ],
    )
    def test_allow_lists(self, guard, allowed):
        for role in ALL_ROLES:
            if role in allowed:
                guard(principal(role))
            else:
                with pytest.raises(Forbidden):
                    guard(principal(role))

    def test_viewer_write_message(self):
        with pytest.raises(Forbidden, match="Read-only users cannot modify data"):
            require_write(principal(UserRole.VIEWER))
