from __future__ import annotations

from ..extensions import db
from ..permissions.roles import ALL_ROLES
from ..time_utils import to_utc_z, utcnow
from .mixins import SerializeMixin, choice_column, new_id, uuid_column


class User(SerializeMixin, db.Model):
    """
    Application account.

    role is one of the five fixed role values; parish_id is the home parish
    (null for diocese-level super admins). Both are copied into the session
    token at login and are immutable for that token's lifetime.
    """
    __tablename__ = "users"
    __serialize_exclude__ = frozenset({"password_hash"})

    id = db.Column(db.String(36), primary_key=True, default=new_id, info={"uuid": True})
    parish_id = uuid_column(db.ForeignKey("parishes.id"), nullable=True, index=True)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True)

    # bcrypt for new accounts; legacy pbkdf2_sha256$... strings still verify
    password_hash = db.Column(db.String(255), nullable=False)

    full_name = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(32), nullable=True)
    role = choice_column(ALL_ROLES, nullable=False)
    profile_photo_url = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    parish = db.relationship("Parish", backref=db.backref("users", lazy=True))

    def to_profile(self) -> dict:
        return {
            "id": self.id,
            "parish_id": self.parish_id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "phone_number": self.phone_number,
            "role": self.role,
            "profile_photo_url": self.profile_photo_url,
        }


class Permission(db.Model):
    """
    Static permission catalog.

    Rows are seeded from permissions.definitions and are read-only at runtime.
    """
    __tablename__ = "permissions"

    id = db.Column(db.String(36), primary_key=True, default=new_id, info={"uuid": True})
    permission_key = db.Column(db.String(64), nullable=False, unique=True, index=True)
    permission_group = db.Column(db.String(64), nullable=False, index=True)
    display_name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "permission_key": self.permission_key,
            "permission_group": self.permission_group,
            "display_name": self.display_name,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }


class CustomRole(db.Model):
    """
    Named permission bundle.

    System roles (one per user role value) are seeded at bootstrap and are
    immutable: they cannot be deleted and their role_name never changes.
    Roles created through the API are always non-system.
    """
    __tablename__ = "custom_roles"

    id = db.Column(db.String(36), primary_key=True, default=new_id, info={"uuid": True})
    role_name = db.Column(db.String(64), nullable=False, unique=True)
    display_name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_system = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role_name": self.role_name,
            "display_name": self.display_name,
            "description": self.description,
            "is_system": self.is_system,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class RolePermission(db.Model):
    """Role-Permission association."""
    __tablename__ = "role_permissions"
    __table_args__ = (
        db.UniqueConstraint("role_id", "permission_id", name="uq_role_permissions"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    role_id = db.Column(db.String(36), db.ForeignKey("custom_roles.id"), nullable=False, index=True)
    permission_id = db.Column(db.String(36), db.ForeignKey("permissions.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    role = db.relationship("CustomRole", backref=db.backref("role_permissions", lazy=True))
    permission = db.relationship("Permission", backref=db.backref("role_permissions", lazy=True))


class UserPermissionOverride(db.Model):
    """
    Per-user, optionally time-boxed permission grant.

    DESIGN:
    - At most one row per (user_id, permission_id); a repeat grant updates it
    - Effective only while is_active and (expires_at is null or in the future)
    - Revocation flips is_active; the row stays for the audit trail
    - granted_by is mandatory so every grant is attributable
    """
    __tablename__ = "user_permission_overrides"
    __table_args__ = (
        db.UniqueConstraint("user_id", "permission_id", name="uq_user_permission_override"),
        db.Index("ix_user_perm_overrides_user_active", "user_id", "is_active"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id, info={"uuid": True})
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    permission_id = db.Column(db.String(36), db.ForeignKey("permissions.id"), nullable=False)
    granted_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    reason = db.Column(db.Text, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", foreign_keys=[user_id], backref=db.backref("permission_overrides", lazy=True))
    granted_by_user = db.relationship("User", foreign_keys=[granted_by])
    permission = db.relationship("Permission")

    def is_effective(self, now) -> bool:
        return self.is_active and (self.expires_at is None or self.expires_at > now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "permission_id": self.permission_id,
            "permission_key": self.permission.permission_key if self.permission else None,
            "permission_display_name": self.permission.display_name if self.permission else None,
            "granted_by": self.granted_by,
            "reason": self.reason,
            "expires_at": to_utc_z(self.expires_at),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
