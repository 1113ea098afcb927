# Overview: Service-layer operations for auth; password schemes, login and user creation.

"""
Password verification and user accounts.

Two stored-hash formats verify transparently:
- pbkdf2_sha256$<iterations>$<salt>$<base64 digest>: PBKDF2-HMAC-SHA256 with a
  32-byte derived key; the salt is used as its UTF-8 bytes
- anything else is treated as a bcrypt hash

New passwords are always hashed with bcrypt. Unknown or malformed stored
values never raise; they simply fail verification.
"""

import base64
import hashlib
import hmac

import bcrypt
from sqlalchemy.exc import IntegrityError

from ..errors import BadRequest, Conflict
from ..extensions import db
from ..logging_setup import get_logger
from ..models import User
from ..permissions import ALL_ROLES, UserRole
from ..time_utils import utcnow
from ..validation import normalize_uuid


logger = get_logger(__name__)

PBKDF2_PREFIX = "pbkdf2_sha256$"
PBKDF2_KEY_LENGTH = 32
MIN_PASSWORD_LENGTH = 8


def _verify_pbkdf2(password: str, stored: str) -> bool:
    parts = stored.split("$")
    if len(parts) != 4:
        return False
    _, iterations, salt, expected_b64 = parts
    try:
        iterations = int(iterations)
    except ValueError:
        return False
    if iterations < 1:
        return False

    derived = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        iterations,
        dklen=PBKDF2_KEY_LENGTH,
    )
    actual_b64 = base64.b64encode(derived).decode("ascii")
    return hmac.compare_digest(actual_b64, expected_b64)


def verify_password(password: str, stored_hash: str | None) -> bool:
    """
    Check a plaintext password against either stored scheme.

    Returns False for a mismatch and for any unknown or malformed hash.
    """
    if not password or not stored_hash:
        return False

    if stored_hash.startswith(PBKDF2_PREFIX):
        return _verify_pbkdf2(password, stored_hash)

    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash either
        return False


def hash_password(password: str, rounds: int = 12) -> str:
    """bcrypt hash for a new or changed password."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def authenticate(username_or_email: str, password: str) -> User | None:
    """
    Resolve login credentials to a live, active user.

    Returns None for unknown users, inactive or deleted accounts and wrong
    passwords alike, so callers cannot tell which check failed.
    """
    if not username_or_email or not password:
        return None

    user = db.session.query(User).filter(
        db.or_(User.username == username_or_email, User.email == username_or_email),
        User.is_active.is_(True),
        User.deleted_at.is_(None),
    ).first()

    if not user:
        logger.info("login_failed", reason="unknown_user")
        return None

    if not verify_password(password, user.password_hash):
        logger.info("login_failed", reason="bad_password", user_id=user.id)
        return None

    logger.info("login_succeeded", user_id=user.id, role=user.role)
    return user


def create_user(
    *,
    username: str,
    email: str,
    password: str,
    full_name: str,
    role: str,
    parish_id: str | None = None,
    phone_number: str | None = None,
    password_hash: str | None = None,
    commit: bool = True,
) -> User:
    """
    Create a user account.

    Non super admins must belong to a parish: a parish-less user of any other
    role could never resolve a scope.

    Raises:
        BadRequest: unknown role, missing parish, weak password
        Conflict: username or email already taken
    """
    if role not in ALL_ROLES:
        raise BadRequest(f"role must be one of: {', '.join(ALL_ROLES)}")
    if parish_id is not None:
        parish_id = normalize_uuid(parish_id, "parish_id")
    if role != UserRole.SUPER_ADMIN and parish_id is None:
        raise BadRequest("parish_id is required for this role")

    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        raise Conflict("Username or email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=password_hash or hash_password(password),
        full_name=full_name,
        role=role,
        parish_id=parish_id,
        phone_number=phone_number,
        created_at=utcnow(),
        updated_at=utcnow(),
    )
    db.session.add(user)

    if commit:
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise Conflict("Username or email already exists")
    return user
