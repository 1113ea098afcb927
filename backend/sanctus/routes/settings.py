# Overview: Flask API routes for parish and diocese-wide application settings.

"""
Settings Routes

SECURITY: All routes require authentication.
- Reads: any role, for its own parish; scope=global reads the diocese-wide
  defaults
- Writes: PARISH_ADMIN for its own parish; SUPER_ADMIN for any parish, and
  for the diocese-wide defaults when it names no parish and has no home parish
"""

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_admin, require_auth
from ..errors import BadRequest
from ..services import settings_service
from ..services.scope_service import resolve_optional_parish_id
from .common import json_body


settings_bp = Blueprint("settings", __name__)


@settings_bp.get("/settings")
@require_auth
def list_settings_route():
    """Query params: parish_id, setting_group, scope (parish | global)."""
    scope = request.args.get("scope", "parish")
    if scope == "global":
        parish_id = None
    elif scope == "parish":
        parish_id = resolve_optional_parish_id(current_principal(), request.args.get("parish_id"))
    else:
        raise BadRequest("scope must be 'parish' or 'global'")

    rows = settings_service.list_settings(parish_id, request.args.get("setting_group"))
    return jsonify({"items": [row.to_dict() for row in rows], "parish_id": parish_id})


@settings_bp.put("/settings")
@require_auth
@require_admin
def upsert_setting_route():
    entry = settings_service.parse_setting(json_body())
    row = settings_service.upsert_setting(actor=current_principal(), entry=entry)
    return jsonify(row.to_dict())


@settings_bp.put("/settings/bulk")
@require_auth
@require_admin
def bulk_upsert_settings_route():
    """Body: {"settings": [{setting_key, setting_value, setting_group?, description?, parish_id?}]}"""
    data = json_body()
    raw = data.get("settings") if isinstance(data, dict) else None
    if not isinstance(raw, list) or not raw:
        raise BadRequest("settings must be a non-empty list")

    entries = [settings_service.parse_setting(item) for item in raw]
    rows = settings_service.upsert_settings(actor=current_principal(), entries=entries)
    return jsonify({"items": [row.to_dict() for row in rows]})
