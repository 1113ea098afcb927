# Overview: Small request helpers shared by the CRUD blueprints.

from flask import jsonify, request

from ..errors import BadRequest
from ..decorators import current_principal, scoped_parish_id
from ..services import entity_service
from ..validation import parse_limit_offset


def json_body():
    """Parsed JSON body; an empty body is {} and an unparseable one is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data():
            raise BadRequest("Malformed request body")
        return {}
    return data


def list_response(kind, **filters):
    """Scoped, paginated listing of one entity kind."""
    limit, offset = parse_limit_offset(request.args)
    parish_id = scoped_parish_id(request.args.get("parish_id"))
    rows = entity_service.list_rows(kind, parish_id, limit=limit, offset=offset, filters=filters)
    return jsonify({
        "items": [row.to_dict() for row in rows],
        "parish_id": parish_id,
        "limit": limit,
        "offset": offset,
    })


def get_response(kind, record_id):
    return jsonify(entity_service.get_row(kind, current_principal(), record_id).to_dict())


def create_response(kind, data: dict | None = None):
    row = entity_service.create_row(kind, current_principal(), json_body() if data is None else data)
    return jsonify(row.to_dict()), 201


def update_response(kind, record_id):
    row = entity_service.update_row(kind, current_principal(), record_id, json_body())
    return jsonify(row.to_dict())


def delete_response(kind, record_id):
    entity_service.delete_row(kind, current_principal(), record_id)
    return "", 204
