# Overview: Flask API route for reading the audit trail.

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_admin, require_auth
from ..errors import BadRequest
from ..services.audit_service import list_audit_logs
from ..services.scope_service import resolve_optional_parish_id
from ..validation import normalize_uuid, parse_limit_offset


audit_bp = Blueprint("audit", __name__)


@audit_bp.get("/audit-logs")
@require_auth
@require_admin
def list_audit_logs_route():
    """
    Audit trail, newest first.

    Query params: parish_id, user_id, action_type, table_name, limit (default
    100, max 500), offset.

    PARISH_ADMIN always sees its own parish. SUPER_ADMIN sees the parish it
    names (or its home parish), and the whole diocese when neither exists.
    """
    principal = current_principal()
    limit, offset = parse_limit_offset(request.args, default_limit=100)

    parish_id = resolve_optional_parish_id(principal, request.args.get("parish_id"))

    user_id = request.args.get("user_id")
    if user_id:
        try:
            user_id = normalize_uuid(user_id, "user_id")
        except ValueError as e:
            raise BadRequest(str(e))

    rows = list_audit_logs(
        parish_id=parish_id,
        table_name=request.args.get("table_name"),
        action_type=request.args.get("action_type"),
        user_id=user_id,
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "items": [row.to_dict() for row in rows],
        "parish_id": parish_id,
        "limit": limit,
        "offset": offset,
    })
