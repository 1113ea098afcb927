# Overview: Pytest coverage for session token issue and validation.

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from sanctus import create_app
from sanctus.errors import Unauthenticated
from sanctus.permissions import UserRole
from sanctus.services.token_service import Principal, TokenService

from conftest import auth_headers


SECRET = "unit-test-secret"


class TestTokenService:

    def test_round_trip_carries_claims(self):
        service = TokenService(SECRET)
        user_id, parish_id = str(uuid4()), str(uuid4())

        principal = service.validate(service.issue(user_id, UserRole.SECRETARY, parish_id))

        assert principal == Principal(user_id=user_id, role=UserRole.SECRETARY, parish_id=parish_id)

    def test_super_admin_without_parish(self):
        service = TokenService(SECRET)
        user_id = str(uuid4())

        principal = service.validate(service.issue(user_id, UserRole.SUPER_ADMIN, None))

        assert principal.parish_id is None
        assert principal.role == UserRole.SUPER_ADMIN

    def test_expiry_is_24_hours(self):
        service = TokenService(SECRET)
        now = datetime.now(timezone.utc).replace(microsecond=0)
        token = service.issue(str(uuid4()), UserRole.VIEWER, str(uuid4()), now=now)

        claims = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_expired_token_rejected(self):
        service = TokenService(SECRET)
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = service.issue(str(uuid4()), UserRole.VIEWER, str(uuid4()), now=issued)

        with pytest.raises(Unauthenticated, match="Token has expired"):
            service.validate(token)

    def test_token_from_other_secret_rejected(self):
        token = TokenService("another-secret").issue(str(uuid4()), UserRole.VIEWER, None)

        with pytest.raises(Unauthenticated, match="Invalid token"):
            TokenService(SECRET).validate(token)

    def test_tampered_payload_rejected(self):
        service = TokenService(SECRET)
        token = service.issue(str(uuid4()), UserRole.VIEWER, str(uuid4()))
        header, payload, signature = token.split(".")
        forged = jwt.encode({"sub": str(uuid4()), "role": "SUPER_ADMIN", "exp": 9999999999}, "x")
        forged_payload = forged.split(".")[1]

        with pytest.raises(Unauthenticated):
            service.validate(f"{header}.{forged_payload}.{signature}")

    def test_unknown_role_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "role": "BISHOP", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(Unauthenticated, match="Invalid token"):
            TokenService(SECRET).validate(token)

    def test_malformed_subject_rejected(self):
        token = jwt.encode(
            {"sub": "not-a-uuid", "role": "VIEWER", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(Unauthenticated):
            TokenService(SECRET).validate(token)

    @pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer ", "Basic dXNlcjpwYXNz"])
    def test_bad_authorization_header(self, header):
        with pytest.raises(Unauthenticated):
            TokenService(SECRET).principal_from_header(header)

    def test_empty_secret_refused(self):
        with pytest.raises(RuntimeError):
            TokenService("")

    def test_app_refuses_to_start_without_secret(self):
        with pytest.raises(RuntimeError, match="JWT_SECRET"):
            create_app({"JWT_SECRET": None, "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:"})


class TestAuthRoutes:

    def test_me_requires_token(self, client, db_session):
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.get_json()["error"]

    def test_me_rejects_expired_token(self, app, client, secretary_a):
        issued = datetime.now(timezone.utc) - timedelta(hours=30)
        token = app.extensions["sanctus_tokens"].issue(
            secretary_a.id, secretary_a.role, secretary_a.parish_id, now=issued
        )
        resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Token has expired"

    def test_me_returns_profile_and_permissions(self, app, client, secretary_a):
        resp = client.get("/auth/me", headers=auth_headers(app, secretary_a))

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["username"] == "secretary_a"
        assert body["parish_id"] == secretary_a.parish_id
        assert "password_hash" not in body
        assert "VIEW_MEMBERS" in body["permissions"]
        assert body["permissions"] == sorted(body["permissions"])
