# Overview: Parish-scoped key-value application settings with single-statement upserts.

"""
Application settings

Rows are either parish settings (parish_id set) or diocese-wide defaults
(parish_id NULL). Writes are upserts keyed on (parish_id, setting_key):
- setting_value and setting_group are replaced
- description is replaced only when the new write carries one
- setting_group defaults to "general"

Scope: the target parish comes from resolve_optional_parish_id, so only a
SUPER_ADMIN without a home parish ever reaches the diocese-wide rows for
writing. A bulk write authorizes and validates every entry before it
writes any, and commits once.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func

from ..dialects import dialect_insert
from ..errors import BadRequest
from ..extensions import db
from ..logging_setup import get_logger
from ..models import AppSetting, Parish
from ..models.mixins import new_id
from ..repository import require_live
from ..time_utils import utcnow
from .audit_service import record_audit
from .scope_service import resolve_optional_parish_id
from .token_service import Principal


logger = get_logger(__name__)

DEFAULT_GROUP = "general"
MAX_KEY_LENGTH = 100
MAX_GROUP_LENGTH = 50


@dataclass(frozen=True)
class SettingWrite:
    setting_key: str
    setting_value: str
    setting_group: str
    description: str | None
    requested_parish_id: object = None


def _optional_text(raw: dict, key: str, max_length: int | None = None) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequest(f"{key} must be a string")
    if max_length is not None and len(value) > max_length:
        raise BadRequest(f"{key} must be at most {max_length} characters")
    return value


def parse_setting(raw) -> SettingWrite:
    """Validate one JSON entry. Raises BadRequest."""
    if not isinstance(raw, dict):
        raise BadRequest("Each setting must be an object")

    key = _optional_text(raw, "setting_key", MAX_KEY_LENGTH)
    if not key or not key.strip():
        raise BadRequest("setting_key is required")
    value = _optional_text(raw, "setting_value")
    if value is None:
        raise BadRequest("setting_value is required")
    group = _optional_text(raw, "setting_group", MAX_GROUP_LENGTH) or DEFAULT_GROUP

    return SettingWrite(
        setting_key=key.strip(),
        setting_value=value,
        setting_group=group,
        description=_optional_text(raw, "description"),
        requested_parish_id=raw.get("parish_id"),
    )


def find_setting(parish_id: str | None, setting_key: str) -> AppSetting | None:
    query = db.session.query(AppSetting).filter(AppSetting.setting_key == setting_key)
    if parish_id is None:
        query = query.filter(AppSetting.parish_id.is_(None))
    else:
        query = query.filter(AppSetting.parish_id == parish_id)
    return query.first()


def list_settings(parish_id: str | None, setting_group: str | None = None) -> list[AppSetting]:
    """Settings of one parish, or the diocese-wide defaults when parish_id is None."""
    query = db.session.query(AppSetting)
    if parish_id is None:
        query = query.filter(AppSetting.parish_id.is_(None))
    else:
        query = query.filter(AppSetting.parish_id == parish_id)
    if setting_group:
        query = query.filter(AppSetting.setting_group == setting_group)
    return query.order_by(AppSetting.setting_group, AppSetting.setting_key).all()


def _upsert(parish_id: str | None, entry: SettingWrite, now) -> tuple[str, dict | None]:
    """Write one row in a single statement. Returns its id and the replaced values."""
    existing = find_setting(parish_id, entry.setting_key)
    record_id = existing.id if existing else new_id()
    old_values = (
        {"setting_value": existing.setting_value, "setting_group": existing.setting_group}
        if existing else None
    )

    stmt = dialect_insert(AppSetting).values(
        id=record_id,
        parish_id=parish_id,
        setting_key=entry.setting_key,
        setting_value=entry.setting_value,
        setting_group=entry.setting_group,
        description=entry.description,
        created_at=now,
        updated_at=now,
    )
    if parish_id is None:
        target = {
            "index_elements": [AppSetting.setting_key],
            "index_where": AppSetting.parish_id.is_(None),
        }
    else:
        target = {"index_elements": [AppSetting.parish_id, AppSetting.setting_key]}

    db.session.execute(stmt.on_conflict_do_update(
        set_={
            "setting_value": stmt.excluded.setting_value,
            "setting_group": stmt.excluded.setting_group,
            "description": func.coalesce(stmt.excluded.description, AppSetting.description),
            "updated_at": stmt.excluded.updated_at,
        },
        **target,
    ))
    return record_id, old_values


def upsert_settings(*, actor: Principal, entries: list[SettingWrite]) -> list[AppSetting]:
    """
    Upsert every entry in one transaction.

    Every entry's parish is resolved before anything is written, so a
    denied entry leaves the whole batch unapplied.
    """
    targets = [
        (resolve_optional_parish_id(actor, entry.requested_parish_id), entry)
        for entry in entries
    ]
    for parish_id in {parish_id for parish_id, _ in targets}:
        require_live(Parish, parish_id, "Parish")
    now = utcnow()

    for parish_id, entry in targets:
        record_id, old_values = _upsert(parish_id, entry, now)
        record_audit(
            user_id=actor.user_id,
            action_type="UPDATE" if old_values else "CREATE",
            table_name="app_settings",
            record_id=record_id,
            parish_id=parish_id,
            old_values=old_values,
            new_values={"setting_value": entry.setting_value, "setting_group": entry.setting_group},
        )
    db.session.commit()

    logger.info(
        "settings_upserted",
        keys=[entry.setting_key for _, entry in targets],
        parish_ids=sorted({str(parish_id) for parish_id, _ in targets}),
        actor=actor.user_id,
    )
    return [find_setting(parish_id, entry.setting_key) for parish_id, entry in targets]


def upsert_setting(*, actor: Principal, entry: SettingWrite) -> AppSetting:
    return upsert_settings(actor=actor, entries=[entry])[0]
