# Overview: Flask API routes for roles, the permission catalog and per-user overrides.

"""
Role and permission administration.

SECURITY: Every route requires PARISH_ADMIN or SUPER_ADMIN. Override grants
and revocations are parish scoped through the target user: a parish admin
can only touch users of its own parish. Role definitions are global.
"""

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_admin, require_auth
from ..errors import BadRequest
from ..patch import UNSET
from ..services import permission_service
from ..time_utils import parse_iso_datetime
from .common import json_body


rbac_bp = Blueprint("rbac", __name__)


def _object_body() -> dict:
    data = json_body()
    if not isinstance(data, dict):
        raise BadRequest("Invalid JSON payload")
    return data


def _bool_arg(name: str, default: bool) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no")


# -- Catalog --

@rbac_bp.get("/permissions")
@require_auth
@require_admin
def list_permissions_route():
    group = request.args.get("group")
    return jsonify([p.to_dict() for p in permission_service.list_permissions(group)])


# -- Roles --

@rbac_bp.get("/roles")
@require_auth
@require_admin
def list_roles_route():
    return jsonify([r.to_dict() for r in permission_service.list_roles()])


@rbac_bp.get("/roles/<role_id>")
@require_auth
@require_admin
def get_role_route(role_id):
    role = permission_service.get_role(role_id)
    return jsonify(permission_service.role_with_permissions(role))


@rbac_bp.post("/roles")
@require_auth
@require_admin
def create_role_route():
    """
    Create a custom role.

    Request body:
    {
        "role_name": "CHOIR_TREASURER",     // required, unique
        "display_name": "Choir treasurer",  // required
        "description": "...",               // optional
        "permission_ids": ["..."]           // optional
    }
    """
    data = _object_body()
    role = permission_service.create_role(
        actor=current_principal(),
        role_name=data.get("role_name"),
        display_name=data.get("display_name"),
        description=data.get("description"),
        permission_ids=data.get("permission_ids"),
    )
    return jsonify(permission_service.role_with_permissions(role)), 201


@rbac_bp.put("/roles/<role_id>")
@require_auth
@require_admin
def update_role_route(role_id):
    data = _object_body()
    role = permission_service.update_role(
        actor=current_principal(),
        role_id=role_id,
        display_name=data["display_name"] if "display_name" in data else UNSET,
        description=data["description"] if "description" in data else UNSET,
    )
    return jsonify(role.to_dict())


@rbac_bp.delete("/roles/<role_id>")
@require_auth
@require_admin
def delete_role_route(role_id):
    permission_service.delete_role(actor=current_principal(), role_id=role_id)
    return "", 204


@rbac_bp.put("/roles/<role_id>/permissions")
@require_auth
@require_admin
def set_role_permissions_route(role_id):
    data = _object_body()
    if "permission_ids" not in data:
        raise BadRequest("permission_ids is required")
    permissions = permission_service.set_role_permissions(
        actor=current_principal(),
        role_id=role_id,
        permission_ids=data["permission_ids"],
    )
    return jsonify([p.to_dict() for p in permissions])


# -- Overrides --

@rbac_bp.get("/permissions/overrides")
@require_auth
@require_admin
def list_overrides_route():
    overrides = permission_service.list_user_overrides(
        actor=current_principal(),
        user_id=request.args.get("user_id") or None,
        active_only=_bool_arg("active_only", True),
    )
    return jsonify([o.to_dict() for o in overrides])


@rbac_bp.post("/permissions/overrides")
@require_auth
@require_admin
def grant_overrides_route():
    """
    Grant permissions to one user on top of their role.

    Request body:
    {
        "user_id": "...",                      // required
        "permission_ids": ["..."],             // required, non-empty
        "reason": "Covering for treasurer",    // optional
        "expires_at": "2026-01-31T00:00:00Z"   // optional; absent means no expiry
    }

    Returns the user's active overrides after the grant.
    """
    data = _object_body()
    if not data.get("user_id"):
        raise BadRequest("user_id is required")

    expires_at = data.get("expires_at")
    if expires_at is not None:
        if not isinstance(expires_at, str):
            raise BadRequest("expires_at must be an ISO-8601 datetime")
        try:
            expires_at = parse_iso_datetime(expires_at)
        except ValueError:
            raise BadRequest("expires_at must be an ISO-8601 datetime")

    overrides = permission_service.grant_overrides(
        actor=current_principal(),
        user_id=data["user_id"],
        permission_ids=data.get("permission_ids"),
        reason=data.get("reason"),
        expires_at=expires_at,
    )
    return jsonify([o.to_dict() for o in overrides])


@rbac_bp.post("/permissions/overrides/revoke")
@require_auth
@require_admin
def revoke_overrides_route():
    data = _object_body()
    if not data.get("user_id"):
        raise BadRequest("user_id is required")
    permission_service.revoke_overrides(
        actor=current_principal(),
        user_id=data["user_id"],
        permission_ids=data.get("permission_ids"),
    )
    return "", 204


@rbac_bp.delete("/permissions/overrides/<override_id>")
@require_auth
@require_admin
def revoke_override_route(override_id):
    permission_service.revoke_override(actor=current_principal(), override_id=override_id)
    return "", 204


@rbac_bp.get("/users/<user_id>/permissions")
@require_auth
@require_admin
def user_effective_permissions_route(user_id):
    user = permission_service.get_user_in_scope(current_principal(), user_id)
    return jsonify({
        "user_id": user.id,
        "role": user.role,
        "permissions": sorted(permission_service.list_effective_permissions(user)),
    })
