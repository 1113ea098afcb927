# Overview: Flask API routes for the church hierarchy; dioceses, parishes, clusters and SCCs.

"""
Structure Routes

SECURITY: All routes require authentication.
- Dioceses: any role reads; SUPER_ADMIN writes
- Parishes: any role lists; reading one is parish scoped; SUPER_ADMIN creates
  and deletes; PARISH_ADMIN may update its own parish
- Clusters and SCCs: parish scoped; writes need require_write
"""

from flask import Blueprint, jsonify, request
from sqlalchemy.exc import IntegrityError

from ..decorators import current_principal, require_admin, require_auth, require_super_admin, require_write
from ..errors import Conflict
from ..extensions import db
from ..models import Diocese, Parish
from ..patch import Patch
from ..repository import LiveRepository, require_live
from ..services.audit_service import record_audit
from ..services.entity_kinds import CLUSTERS, SCCS
from ..validation import parse_limit_offset, policy, validate_payload
from .common import create_response, delete_response, get_response, json_body, list_response, update_response


structure_bp = Blueprint("structure", __name__)

dioceses = LiveRepository(Diocese, "Diocese")
parishes = LiveRepository(Parish, "Parish")

DIOCESE_POLICY = policy(
    {
        "diocese_code", "diocese_name", "bishop_name", "established_date",
        "headquarters_address", "contact_email", "contact_phone", "country",
        "currency_code", "logo_url", "is_active",
    },
    {"diocese_code", "diocese_name"},
)

PARISH_FIELDS = {
    "parish_code", "parish_name", "patron_saint", "priest_name", "priest_id",
    "established_date", "physical_address", "postal_address", "contact_email",
    "contact_phone", "bank_account_name", "bank_account_number", "bank_name",
    "bank_branch", "mobile_money_name", "mobile_money_number",
    "mobile_money_account_name", "timezone", "logo_url", "is_active",
}
PARISH_CREATE_POLICY = policy(PARISH_FIELDS | {"id", "diocese_id"}, {"diocese_id", "parish_code", "parish_name"})
PARISH_UPDATE_POLICY = policy(PARISH_FIELDS)


def _flush_new(label: str) -> None:
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f"{label} already exists")


def _save(row, action: str, table: str, parish_id, new_values=None, old_values=None) -> None:
    record_audit(
        user_id=current_principal().user_id,
        action_type=action,
        table_name=table,
        record_id=row.id,
        parish_id=parish_id,
        old_values=old_values,
        new_values=new_values,
    )
    db.session.commit()


# -- Dioceses --

@structure_bp.get("/dioceses")
@require_auth
def list_dioceses_route():
    limit, offset = parse_limit_offset(request.args)
    rows = dioceses.page(dioceses.query(), limit, offset, Diocese.diocese_name)
    return jsonify({"items": [d.to_dict() for d in rows], "limit": limit, "offset": offset})


@structure_bp.get("/dioceses/<diocese_id>")
@require_auth
def get_diocese_route(diocese_id):
    return jsonify(dioceses.get_or_404(diocese_id).to_dict())


@structure_bp.post("/dioceses")
@require_auth
@require_super_admin
def create_diocese_route():
    values = validate_payload(model=Diocese, payload=json_body(), policy=DIOCESE_POLICY, partial=False)
    row = dioceses.create(values)
    _flush_new("Diocese")
    _save(row, "CREATE", "dioceses", None, new_values=values)
    return jsonify(row.to_dict()), 201


@structure_bp.put("/dioceses/<diocese_id>")
@require_auth
@require_super_admin
def update_diocese_route(diocese_id):
    row = dioceses.get_or_404(diocese_id)
    patch = Patch(validate_payload(model=Diocese, payload=json_body(), policy=DIOCESE_POLICY, partial=True))
    old = dioceses.update(row, patch)
    _save(row, "UPDATE", "dioceses", None, new_values={k: patch[k] for k in old}, old_values=old)
    return jsonify(row.to_dict())


@structure_bp.delete("/dioceses/<diocese_id>")
@require_auth
@require_super_admin
def delete_diocese_route(diocese_id):
    row = dioceses.get_or_404(diocese_id)
    dioceses.soft_delete(row)
    _save(row, "DELETE", "dioceses", None)
    return "", 204


# -- Parishes --

@structure_bp.get("/parishes")
@require_auth
def list_parishes_route():
    """Every live parish, by name. The list is a directory, not parish data."""
    limit, offset = parse_limit_offset(request.args)
    query = parishes.query()
    diocese_id = request.args.get("diocese_id")
    if diocese_id:
        query = query.filter(Parish.diocese_id == diocese_id)
    rows = parishes.page(query, limit, offset, Parish.parish_name)
    return jsonify({"items": [p.to_dict() for p in rows], "limit": limit, "offset": offset})


@structure_bp.get("/parishes/<parish_id>")
@require_auth
def get_parish_route(parish_id):
    return jsonify(parishes.get_in_scope(parish_id, current_principal(), parish_attr="id").to_dict())


@structure_bp.post("/parishes")
@require_auth
@require_super_admin
def create_parish_route():
    values = validate_payload(model=Parish, payload=json_body(), policy=PARISH_CREATE_POLICY, partial=False)
    require_live(Diocese, values["diocese_id"], "Diocese")
    if values.get("id") is None:
        values.pop("id", None)
    row = parishes.create(values)
    _flush_new("Parish")
    _save(row, "CREATE", "parishes", row.id, new_values=values)
    return jsonify(row.to_dict()), 201


@structure_bp.put("/parishes/<parish_id>")
@require_auth
@require_admin
def update_parish_route(parish_id):
    row = parishes.get_in_scope(parish_id, current_principal(), parish_attr="id")
    patch = Patch(validate_payload(model=Parish, payload=json_body(), policy=PARISH_UPDATE_POLICY, partial=True))
    old = parishes.update(row, patch)
    _save(row, "UPDATE", "parishes", row.id, new_values={k: patch[k] for k in old}, old_values=old)
    return jsonify(row.to_dict())


@structure_bp.delete("/parishes/<parish_id>")
@require_auth
@require_super_admin
def delete_parish_route(parish_id):
    row = parishes.get_or_404(parish_id)
    parishes.soft_delete(row)
    _save(row, "DELETE", "parishes", row.id)
    return "", 204


# -- Clusters --

@structure_bp.get("/clusters")
@require_auth
def list_clusters_route():
    return list_response(CLUSTERS)


@structure_bp.post("/clusters")
@require_auth
@require_write
def create_cluster_route():
    return create_response(CLUSTERS)


@structure_bp.get("/clusters/<cluster_id>")
@require_auth
def get_cluster_route(cluster_id):
    return get_response(CLUSTERS, cluster_id)


@structure_bp.put("/clusters/<cluster_id>")
@require_auth
@require_write
def update_cluster_route(cluster_id):
    return update_response(CLUSTERS, cluster_id)


@structure_bp.delete("/clusters/<cluster_id>")
@require_auth
@require_write
def delete_cluster_route(cluster_id):
    return delete_response(CLUSTERS, cluster_id)


# -- Small Christian Communities --

@structure_bp.get("/sccs")
@require_auth
def list_sccs_route():
    return list_response(SCCS, cluster_id=request.args.get("cluster_id"))


@structure_bp.post("/sccs")
@require_auth
@require_write
def create_scc_route():
    return create_response(SCCS)


@structure_bp.get("/sccs/<scc_id>")
@require_auth
def get_scc_route(scc_id):
    return get_response(SCCS, scc_id)


@structure_bp.put("/sccs/<scc_id>")
@require_auth
@require_write
def update_scc_route(scc_id):
    return update_response(SCCS, scc_id)


@structure_bp.delete("/sccs/<scc_id>")
@require_auth
@require_write
def delete_scc_route(scc_id):
    return delete_response(SCCS, scc_id)
