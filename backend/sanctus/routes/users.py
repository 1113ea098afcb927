# Overview: Flask API routes for user accounts; SUPER_ADMIN only.

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_auth, require_super_admin
from ..errors import BadRequest, Conflict
from ..extensions import db
from ..models import Parish, User
from ..patch import Patch
from ..permissions import UserRole
from ..repository import LiveRepository, require_live
from ..services import auth_service
from ..services.audit_service import record_audit
from ..time_utils import utcnow
from ..validation import normalize_uuid, parse_limit_offset, policy, validate_payload
from .common import json_body


users_bp = Blueprint("users", __name__)

USER_CREATE_POLICY = policy(
    {"username", "email", "full_name", "phone_number", "role", "parish_id", "profile_photo_url"},
    {"username", "email", "full_name", "role"},
)
USER_UPDATE_POLICY = policy(
    {"email", "full_name", "phone_number", "role", "parish_id", "profile_photo_url", "is_active"}
)


users = LiveRepository(User, "User")


@users_bp.get("/users")
@require_auth
@require_super_admin
def list_users_route():
    limit, offset = parse_limit_offset(request.args)
    query = users.query()
    parish_id = request.args.get("parish_id")
    if parish_id:
        query = query.filter(User.parish_id == normalize_uuid(parish_id, "parish_id"))
    role = request.args.get("role")
    if role:
        query = query.filter(User.role == role)
    rows = users.page(query, limit, offset, User.username)
    return jsonify({"items": [u.to_dict() for u in rows], "limit": limit, "offset": offset})


@users_bp.get("/users/<user_id>")
@require_auth
@require_super_admin
def get_user_route(user_id):
    return jsonify(users.get_or_404(user_id).to_dict())


@users_bp.post("/users")
@require_auth
@require_super_admin
def create_user_route():
    """
    Create a user account.

    Request body:
    {
        "username": "...", "email": "...", "full_name": "...",   // required
        "password": "...",                                         // required, min 8 chars
        "role": "SECRETARY",                                       // required
        "parish_id": "...",            // required unless role is SUPER_ADMIN
        "phone_number": "...", "profile_photo_url": "..."          // optional
    }
    """
    data = json_body()
    if not isinstance(data, dict):
        raise BadRequest("Invalid JSON payload")
    password = data.get("password")
    if not isinstance(password, str):
        raise BadRequest("password is required")

    values = validate_payload(
        model=User,
        payload={k: v for k, v in data.items() if k != "password"},
        policy=USER_CREATE_POLICY,
        partial=False,
    )
    require_live(Parish, values.get("parish_id"), "Parish")

    user = auth_service.create_user(
        username=values["username"],
        email=values["email"],
        password=password,
        full_name=values["full_name"],
        role=values["role"],
        parish_id=values.get("parish_id"),
        phone_number=values.get("phone_number"),
        commit=False,
    )
    if values.get("profile_photo_url"):
        user.profile_photo_url = values["profile_photo_url"]
    db.session.flush()
    record_audit(
        user_id=current_principal().user_id,
        action_type="CREATE",
        table_name="users",
        record_id=user.id,
        parish_id=user.parish_id,
        new_values=values,
    )
    db.session.commit()
    return jsonify(user.to_dict()), 201


@users_bp.put("/users/<user_id>")
@require_auth
@require_super_admin
def update_user_route(user_id):
    user = users.get_or_404(user_id)
    data = json_body()
    if not isinstance(data, dict):
        raise BadRequest("Invalid JSON payload")
    password = data.get("password")

    patch = Patch(validate_payload(
        model=User,
        payload={k: v for k, v in data.items() if k != "password"},
        policy=USER_UPDATE_POLICY,
        partial=True,
    ))

    new_role = patch.get("role", user.role)
    new_parish = patch.get("parish_id", user.parish_id)
    if new_role != UserRole.SUPER_ADMIN and new_parish is None:
        raise BadRequest("parish_id is required for this role")
    if patch.get("parish_id") is not None:
        require_live(Parish, patch["parish_id"], "Parish")
    if "email" in patch:
        clash = db.session.query(User).filter(User.email == patch["email"], User.id != user.id).first()
        if clash:
            raise Conflict("Username or email already exists")

    old = {}
    for key, value in patch.items():
        if getattr(user, key) != value:
            old[key] = getattr(user, key)
            setattr(user, key, value)
    if password is not None:
        user.password_hash = auth_service.hash_password(password)
        old["password"] = "***"
    user.updated_at = utcnow()

    record_audit(
        user_id=current_principal().user_id,
        action_type="UPDATE",
        table_name="users",
        record_id=user.id,
        parish_id=user.parish_id,
        old_values={k: v for k, v in old.items() if k != "password"},
        new_values={k: patch[k] for k in old if k in patch},
    )
    db.session.commit()
    return jsonify(user.to_dict())


@users_bp.delete("/users/<user_id>")
@require_auth
@require_super_admin
def delete_user_route(user_id):
    user = users.get_or_404(user_id)
    if user.id == current_principal().user_id:
        raise BadRequest("You cannot delete your own account")
    user.deleted_at = utcnow()
    user.is_active = False
    record_audit(
        user_id=current_principal().user_id,
        action_type="DELETE",
        table_name="users",
        record_id=user.id,
        parish_id=user.parish_id,
    )
    db.session.commit()
    return "", 204
