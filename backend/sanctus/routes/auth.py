# Overview: Flask API routes for auth operations; login and the caller's profile.

"""
Authentication API routes

- POST /auth/login exchanges credentials for a 24h session token
- GET /auth/me returns the caller's profile and effective permissions

Self-registration does not exist; accounts are created by a super admin
(POST /users) or the CLI (flask users create).
"""

from flask import Blueprint, jsonify

from ..decorators import current_principal, require_auth
from ..errors import BadRequest, NotFound, Unauthenticated
from ..extensions import db
from ..models import User
from ..services import auth_service, permission_service
from ..services.token_service import get_token_service
from .common import json_body


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and issue a session token.

    Request body:
    {
        "username_or_email": "...",
        "password": "..."
    }

    Unknown users, wrong passwords and inactive accounts all answer the same
    401 so the response never reveals which check failed.
    """
    data = json_body()
    if not isinstance(data, dict):
        raise BadRequest("Invalid JSON payload")
    username = data.get("username_or_email") or data.get("username") or data.get("email")
    password = data.get("password")
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        raise BadRequest("username_or_email and password required")

    user = auth_service.authenticate(username.strip(), password)
    if user is None:
        raise Unauthenticated("Invalid credentials")

    token = get_token_service().issue(user.id, user.role, user.parish_id)
    return jsonify({"token": token, "user": user.to_profile()})


@auth_bp.get("/me")
@require_auth
def me_route():
    principal = current_principal()
    user = db.session.get(User, principal.user_id)
    if user is None or user.deleted_at is not None:
        raise NotFound("User not found")

    profile = user.to_profile()
    profile["permissions"] = sorted(permission_service.list_effective_permissions(user))
    return jsonify(profile)
