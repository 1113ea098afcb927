# Overview: Flask API route for offline device sync.

"""
POST /sync

Request body:
{
    "device_id": "tablet-07",                  // optional, logged only
    "changes": [
        {
            "table": "income_transaction",
            "operation": "insert",             // insert | update | delete
            "data": {...},                     // full record; {"id": ...} for delete
            "timestamp": "2026-01-05T10:00:00Z"
        }
    ]
}

A well-formed batch always answers 200; per-record failures are listed in
"errors" and the status turns to "partial_success".
"""

from flask import Blueprint, jsonify

from ..decorators import current_principal, require_auth, require_write
from ..errors import BadRequest
from ..services.sync_service import ChangeRecord, reconcile
from .common import json_body


sync_bp = Blueprint("sync", __name__)


def _parse_changes(data) -> list[ChangeRecord]:
    if not isinstance(data, dict):
        raise BadRequest("Invalid JSON payload")
    raw_changes = data.get("changes")
    if not isinstance(raw_changes, list):
        raise BadRequest("changes must be a list")

    changes = []
    for index, raw in enumerate(raw_changes):
        if not isinstance(raw, dict):
            raise BadRequest(f"changes[{index}] must be an object")
        if not isinstance(raw.get("table"), str) or not isinstance(raw.get("operation"), str):
            raise BadRequest(f"changes[{index}] needs string table and operation")
        changes.append(ChangeRecord.from_dict(raw))
    return changes


@sync_bp.post("/sync")
@require_auth
@require_write
def sync_route():
    data = json_body()
    changes = _parse_changes(data)
    device_id = data.get("device_id")
    result = reconcile(
        changes,
        principal=current_principal(),
        device_id=device_id if isinstance(device_id, str) else None,
    )
    return jsonify(result.to_dict())
