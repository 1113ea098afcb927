# Overview: Flask API routes for families, members and sacrament records.

"""
Parishioner Routes

SECURITY: All routes require authentication and are parish scoped.
- Reads: any role, within the resolved parish
- Writes: every role except VIEWER (require_write), within the resolved parish
"""

from flask import Blueprint, request

from ..decorators import require_auth, require_write
from ..services.entity_kinds import FAMILIES, MEMBERS, SACRAMENTS
from .common import create_response, delete_response, get_response, list_response, update_response


parishioners_bp = Blueprint("parishioners", __name__)


# -- Families --

@parishioners_bp.get("/families")
@require_auth
def list_families_route():
    return list_response(FAMILIES, scc_id=request.args.get("scc_id"))


@parishioners_bp.post("/families")
@require_auth
@require_write
def create_family_route():
    return create_response(FAMILIES)


@parishioners_bp.get("/families/<family_id>")
@require_auth
def get_family_route(family_id):
    return get_response(FAMILIES, family_id)


@parishioners_bp.put("/families/<family_id>")
@require_auth
@require_write
def update_family_route(family_id):
    return update_response(FAMILIES, family_id)


@parishioners_bp.delete("/families/<family_id>")
@require_auth
@require_write
def delete_family_route(family_id):
    return delete_response(FAMILIES, family_id)


# -- Members --

@parishioners_bp.get("/members")
@require_auth
def list_members_route():
    """
    List live members of the resolved parish, by last then first name.

    Query parameters: parish_id, family_id, scc_id, limit, offset
    """
    return list_response(
        MEMBERS,
        family_id=request.args.get("family_id"),
        scc_id=request.args.get("scc_id"),
    )


@parishioners_bp.post("/members")
@require_auth
@require_write
def create_member_route():
    return create_response(MEMBERS)


@parishioners_bp.get("/members/<member_id>")
@require_auth
def get_member_route(member_id):
    return get_response(MEMBERS, member_id)


@parishioners_bp.put("/members/<member_id>")
@require_auth
@require_write
def update_member_route(member_id):
    """
    Partial update. Absent fields are kept, null clears a field, a value
    replaces it. parish_id cannot be changed.
    """
    return update_response(MEMBERS, member_id)


@parishioners_bp.delete("/members/<member_id>")
@require_auth
@require_write
def delete_member_route(member_id):
    return delete_response(MEMBERS, member_id)


# -- Sacraments --

@parishioners_bp.get("/sacraments")
@require_auth
def list_sacraments_route():
    return list_response(
        SACRAMENTS,
        member_id=request.args.get("member_id"),
        sacrament_type=request.args.get("sacrament_type"),
    )


@parishioners_bp.post("/sacraments")
@require_auth
@require_write
def create_sacrament_route():
    return create_response(SACRAMENTS)


@parishioners_bp.get("/sacraments/<record_id>")
@require_auth
def get_sacrament_route(record_id):
    return get_response(SACRAMENTS, record_id)


@parishioners_bp.put("/sacraments/<record_id>")
@require_auth
@require_write
def update_sacrament_route(record_id):
    return update_response(SACRAMENTS, record_id)


@parishioners_bp.delete("/sacraments/<record_id>")
@require_auth
@require_write
def delete_sacrament_route(record_id):
    return delete_response(SACRAMENTS, record_id)
