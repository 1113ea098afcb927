# Overview: Service-layer operations for permission; catalog, roles and per-user overrides.

"""
Permission Overlay: role permissions plus time-boxed per-user overrides

Effective permissions for a user are:
    permissions of the custom role whose role_name equals the user's role
    UNION overrides where is_active AND (expires_at IS NULL OR expires_at > now)

DESIGN PRINCIPLES:
- Overrides only add; there is no deny override
- One override row per (user, permission): a repeat grant updates it in place,
  re-activating it and replacing grantor, reason and expiry (last grant wins)
- Revocation flips is_active; rows are never deleted
- System roles cannot be deleted and never change role_name
- Unknown permission ids are rejected before anything is written
- set_role_permissions() replaces the whole set inside one transaction
- Every mutation writes an audit_logs row attributed to the acting principal
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError

from ..dialects import dialect_insert
from ..errors import BadRequest, Conflict, Forbidden, NotFound
from ..extensions import db
from ..logging_setup import get_logger
from ..models import CustomRole, Permission, RolePermission, User, UserPermissionOverride
from ..models.mixins import new_id
from ..patch import UNSET
from ..permissions import (
    ALL_ROLES,
    DEFAULT_ROLE_PERMISSIONS,
    PERMISSION_DEFINITIONS,
    SYSTEM_ROLE_DISPLAY,
    UserRole,
)
from ..time_utils import utcnow
from ..validation import ValidationError, normalize_uuid
from .audit_service import record_audit
from .scope_service import can_access_parish
from .token_service import Principal


logger = get_logger(__name__)


# -- Catalog --

def list_permissions(group: str | None = None) -> list[Permission]:
    query = db.session.query(Permission)
    if group:
        query = query.filter(Permission.permission_group == group)
    return query.order_by(Permission.permission_group, Permission.permission_key).all()


def _normalize_ids(values, key: str) -> list[str]:
    if not isinstance(values, list):
        raise BadRequest(f"{key} must be a list")
    try:
        ids = [normalize_uuid(v, key) for v in values]
    except ValidationError as e:
        raise BadRequest(str(e))
    # Preserve first-seen order, drop duplicates
    return list(dict.fromkeys(ids))


def _load_permissions(permission_ids) -> list[Permission]:
    """Resolve every id or raise BadRequest naming the unknown ones."""
    ids = _normalize_ids(permission_ids, "permission_ids")
    if not ids:
        return []
    found = {
        p.id: p
        for p in db.session.query(Permission).filter(Permission.id.in_(ids)).all()
    }
    missing = [pid for pid in ids if pid not in found]
    if missing:
        raise BadRequest(f"Unknown permission ids: {', '.join(missing)}")
    return [found[pid] for pid in ids]


# -- Roles --

def get_role_permissions(role_id: str) -> list[Permission]:
    return (
        db.session.query(Permission)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role_id == role_id)
        .order_by(Permission.permission_group, Permission.permission_key)
        .all()
    )


def role_with_permissions(role: CustomRole) -> dict:
    data = role.to_dict()
    data["permissions"] = [p.to_dict() for p in get_role_permissions(role.id)]
    return data


def list_roles() -> list[CustomRole]:
    return (
        db.session.query(CustomRole)
        .order_by(CustomRole.is_system.desc(), CustomRole.role_name)
        .all()
    )


def get_role(role_id: str) -> CustomRole:
    try:
        role_id = normalize_uuid(role_id, "role_id")
    except ValidationError:
        raise NotFound("Role not found")
    role = db.session.get(CustomRole, role_id)
    if role is None:
        raise NotFound("Role not found")
    return role


def create_role(
    *,
    actor: Principal,
    role_name: str,
    display_name: str,
    description: str | None = None,
    permission_ids=None,
) -> CustomRole:
    """Create a non-system role, optionally with an initial permission set."""
    role_name = (role_name or "").strip()
    display_name = (display_name or "").strip()
    if not role_name or not display_name:
        raise BadRequest("role_name and display_name are required")
    if len(role_name) > 64 or len(display_name) > 128:
        raise BadRequest("role_name or display_name is too long")

    permissions = _load_permissions(permission_ids) if permission_ids is not None else []

    if db.session.query(CustomRole).filter_by(role_name=role_name).first():
        raise Conflict(f"Role '{role_name}' already exists")

    now = utcnow()
    role = CustomRole(
        role_name=role_name,
        display_name=display_name,
        description=description,
        is_system=False,
        created_at=now,
        updated_at=now,
    )
    db.session.add(role)
    db.session.flush()

    for permission in permissions:
        db.session.add(RolePermission(role_id=role.id, permission_id=permission.id, created_at=now))

    record_audit(
        user_id=actor.user_id,
        action_type="ROLE_CREATED",
        table_name="custom_roles",
        record_id=role.id,
        new_values={
            "role_name": role_name,
            "display_name": display_name,
            "permission_ids": [p.id for p in permissions],
        },
    )

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f"Role '{role_name}' already exists")

    logger.info("role_created", role_id=role.id, role_name=role_name, actor=actor.user_id)
    return role


def update_role(
    *,
    actor: Principal,
    role_id: str,
    display_name=UNSET,
    description=UNSET,
) -> CustomRole:
    """
    Update display metadata only.

    role_name is never changed, for system and custom roles alike.
    display_name may not be cleared; description may.
    """
    role = get_role(role_id)
    old = {"display_name": role.display_name, "description": role.description}

    if display_name is not UNSET:
        if not display_name or not str(display_name).strip():
            raise BadRequest("display_name cannot be blank")
        role.display_name = str(display_name).strip()
    if description is not UNSET:
        role.description = description
    role.updated_at = utcnow()

    record_audit(
        user_id=actor.user_id,
        action_type="ROLE_UPDATED",
        table_name="custom_roles",
        record_id=role.id,
        old_values=old,
        new_values={"display_name": role.display_name, "description": role.description},
    )
    db.session.commit()
    logger.info("role_updated", role_id=role.id, actor=actor.user_id)
    return role


def delete_role(*, actor: Principal, role_id: str) -> None:
    """Hard delete a non-system role and its role-permission rows."""
    role = get_role(role_id)
    if role.is_system:
        logger.info("role_delete_denied", role_id=role.id, actor=actor.user_id)
        raise Forbidden("Cannot delete system roles")

    db.session.query(RolePermission).filter(
        RolePermission.role_id == role.id
    ).delete(synchronize_session=False)

    record_audit(
        user_id=actor.user_id,
        action_type="ROLE_DELETED",
        table_name="custom_roles",
        record_id=role.id,
        old_values={"role_name": role.role_name, "display_name": role.display_name},
    )
    deleted_id, deleted_name = role.id, role.role_name
    db.session.delete(role)
    db.session.commit()
    logger.info("role_deleted", role_id=deleted_id, role_name=deleted_name, actor=actor.user_id)


def set_role_permissions(*, actor: Principal, role_id: str, permission_ids) -> list[Permission]:
    """
    Replace the ENTIRE permission set of a role.

    Delete-all-then-insert-all, not a diff. Both steps and the audit row
    commit together; on any failure the session is rolled back and the role
    keeps its previous permissions.
    """
    role = get_role(role_id)
    permissions = _load_permissions(permission_ids)
    previous = [p.id for p in get_role_permissions(role.id)]

    try:
        db.session.query(RolePermission).filter(
            RolePermission.role_id == role.id
        ).delete(synchronize_session=False)

        now = utcnow()
        for permission in permissions:
            db.session.add(RolePermission(role_id=role.id, permission_id=permission.id, created_at=now))
        role.updated_at = now

        record_audit(
            user_id=actor.user_id,
            action_type="ROLE_PERMISSIONS_SET",
            table_name="role_permissions",
            record_id=role.id,
            old_values={"permission_ids": previous},
            new_values={"permission_ids": [p.id for p in permissions]},
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "role_permissions_set",
        role_id=role.id,
        permission_count=len(permissions),
        actor=actor.user_id,
    )
    return get_role_permissions(role.id)


# -- Overrides --

def get_user_in_scope(actor: Principal, user_id) -> User:
    """Target user, hidden as 404 when missing, deleted or outside the actor's scope."""
    try:
        user_id = normalize_uuid(user_id, "user_id")
    except ValidationError as e:
        raise BadRequest(str(e))
    user = db.session.get(User, user_id)
    if user is None or user.deleted_at is not None:
        raise NotFound("User not found")
    if not can_access_parish(actor, user.parish_id):
        raise NotFound("User not found")
    return user


def _effective_filter(query, now: datetime):
    return query.filter(
        UserPermissionOverride.is_active.is_(True),
        db.or_(
            UserPermissionOverride.expires_at.is_(None),
            UserPermissionOverride.expires_at > now,
        ),
    )


def list_user_overrides(
    *,
    actor: Principal | None = None,
    user_id=None,
    active_only: bool = True,
    now: datetime | None = None,
) -> list[UserPermissionOverride]:
    """
    Overrides, newest first.

    active_only keeps rows that are active and not yet expired. Without a
    user_id and for a non super admin actor, only users of the actor's own
    parish are listed.
    """
    now = now or utcnow()
    query = db.session.query(UserPermissionOverride)

    if user_id is not None:
        if actor is not None:
            user = get_user_in_scope(actor, user_id)
            user_id = user.id
        else:
            user_id = normalize_uuid(user_id, "user_id")
        query = query.filter(UserPermissionOverride.user_id == user_id)
    elif actor is not None and actor.role != UserRole.SUPER_ADMIN:
        if actor.parish_id is None:
            return []
        query = query.join(User, User.id == UserPermissionOverride.user_id).filter(
            User.parish_id == actor.parish_id
        )

    if active_only:
        query = _effective_filter(query, now)

    return query.order_by(UserPermissionOverride.created_at.desc()).all()


def grant_overrides(
    *,
    actor: Principal,
    user_id,
    permission_ids,
    reason: str | None = None,
    expires_at: datetime | None = None,
    now: datetime | None = None,
) -> list[UserPermissionOverride]:
    """
    Upsert one override per permission id for the user.

    Each row ends up active with this call's grantor, reason and expiry,
    whatever it held before. Returns the user's current effective overrides.
    """
    now = now or utcnow()
    user = get_user_in_scope(actor, user_id)
    permissions = _load_permissions(permission_ids)
    if not permissions:
        raise BadRequest("permission_ids must not be empty")

    for permission in permissions:
        stmt = dialect_insert(UserPermissionOverride).values(
            id=new_id(),
            user_id=user.id,
            permission_id=permission.id,
            granted_by=actor.user_id,
            reason=reason,
            expires_at=expires_at,
            is_active=True,
            created_at=now,
        )
        # Atomic per pair; the last grant wins
        db.session.execute(stmt.on_conflict_do_update(
            index_elements=[UserPermissionOverride.user_id, UserPermissionOverride.permission_id],
            set_={
                "granted_by": stmt.excluded.granted_by,
                "reason": stmt.excluded.reason,
                "expires_at": stmt.excluded.expires_at,
                "is_active": True,
            },
        ))

    record_audit(
        user_id=actor.user_id,
        action_type="PERMISSION_OVERRIDE_GRANTED",
        table_name="user_permission_overrides",
        record_id=user.id,
        parish_id=user.parish_id,
        new_values={
            "permission_keys": [p.permission_key for p in permissions],
            "reason": reason,
            "expires_at": expires_at,
        },
    )
    db.session.commit()

    logger.info(
        "overrides_granted",
        user_id=user.id,
        permission_keys=[p.permission_key for p in permissions],
        expires_at=str(expires_at) if expires_at else None,
        actor=actor.user_id,
    )
    return list_user_overrides(user_id=user.id, active_only=True, now=now)


def revoke_overrides(*, actor: Principal, user_id, permission_ids) -> int:
    """Deactivate matching overrides. Missing rows are not an error."""
    user = get_user_in_scope(actor, user_id)
    ids = _normalize_ids(permission_ids, "permission_ids")
    if not ids:
        return 0

    overrides = db.session.query(UserPermissionOverride).filter(
        UserPermissionOverride.user_id == user.id,
        UserPermissionOverride.permission_id.in_(ids),
        UserPermissionOverride.is_active.is_(True),
    ).all()
    for override in overrides:
        override.is_active = False

    record_audit(
        user_id=actor.user_id,
        action_type="PERMISSION_OVERRIDE_REVOKED",
        table_name="user_permission_overrides",
        record_id=user.id,
        parish_id=user.parish_id,
        old_values={"permission_ids": [o.permission_id for o in overrides]},
    )
    db.session.commit()

    logger.info("overrides_revoked", user_id=user.id, revoked=len(overrides), actor=actor.user_id)
    return len(overrides)


def revoke_override(*, actor: Principal, override_id) -> bool:
    """Deactivate one override by id. Returns False when there was nothing to revoke."""
    try:
        override_id = normalize_uuid(override_id, "override_id")
    except ValidationError:
        return False

    override = db.session.get(UserPermissionOverride, override_id)
    if override is None:
        return False
    # Same visibility rule as the user it belongs to
    get_user_in_scope(actor, override.user_id)

    if not override.is_active:
        return False

    override.is_active = False
    record_audit(
        user_id=actor.user_id,
        action_type="PERMISSION_OVERRIDE_REVOKED",
        table_name="user_permission_overrides",
        record_id=override.id,
        old_values={"permission_id": override.permission_id, "user_id": override.user_id},
    )
    db.session.commit()
    logger.info("override_revoked", override_id=override.id, actor=actor.user_id)
    return True


# -- Effective permissions --

def list_effective_permissions(user: User, now: datetime | None = None) -> set[str]:
    """Role permissions UNION effective overrides, as permission keys."""
    now = now or utcnow()

    role_keys = {
        key
        for (key,) in db.session.query(Permission.permission_key)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(CustomRole, CustomRole.id == RolePermission.role_id)
        .filter(CustomRole.role_name == user.role)
        .all()
    }

    override_query = (
        db.session.query(Permission.permission_key)
        .join(UserPermissionOverride, UserPermissionOverride.permission_id == Permission.id)
        .filter(UserPermissionOverride.user_id == user.id)
    )
    override_keys = {key for (key,) in _effective_filter(override_query, now).all()}

    return role_keys | override_keys


def user_has_permission(user: User, permission_key: str, now: datetime | None = None) -> bool:
    return permission_key in list_effective_permissions(user, now)


# -- Bootstrap --

def initialize_permissions() -> int:
    """
    Create Permission rows for every catalog entry.

    Idempotent: safe to run multiple times.
    """
    created_count = 0

    for key, display_name, description, group in PERMISSION_DEFINITIONS:
        existing = db.session.query(Permission).filter_by(permission_key=key).first()
        if not existing:
            db.session.add(Permission(
                permission_key=key,
                permission_group=group,
                display_name=display_name,
                description=description,
            ))
            created_count += 1

    db.session.commit()
    return created_count


def ensure_system_roles() -> int:
    """
    Create the system role for each user role value.

    A newly created system role receives its default permissions; existing
    roles keep whatever an administrator has set since. Idempotent.
    """
    created_count = 0

    for role_name in ALL_ROLES:
        role = db.session.query(CustomRole).filter_by(role_name=role_name).first()
        if role:
            if not role.is_system:
                role.is_system = True
            continue

        display_name, description = SYSTEM_ROLE_DISPLAY[role_name]
        role = CustomRole(
            role_name=role_name,
            display_name=display_name,
            description=description,
            is_system=True,
        )
        db.session.add(role)
        db.session.flush()

        for key in DEFAULT_ROLE_PERMISSIONS.get(role_name, []):
            permission = db.session.query(Permission).filter_by(permission_key=key).first()
            if permission is None:
                continue
            db.session.add(RolePermission(role_id=role.id, permission_id=permission.id))
        created_count += 1

    db.session.commit()
    return created_count


def bootstrap_rbac() -> tuple[int, int]:
    """Catalog then system roles; returns (permissions created, roles created)."""
    return initialize_permissions(), ensure_system_roles()
