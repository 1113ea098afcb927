# Overview: Parish scope resolution and role allow-list checks.

"""
Access scope resolution: the single authorization choke point for every
parish-scoped read or write.

SECURITY INVARIANTS:
1. Role checks run before scope resolution, so a denied role never triggers
   a parish lookup
2. The parish id bound into a query is the value returned by
   resolve_parish_id(), never the raw request parameter
3. Only SUPER_ADMIN may target a parish other than its home parish

USAGE:
    from sanctus.services.scope_service import require_write, resolve_parish_id

    require_write(principal)
    parish_id = resolve_parish_id(principal, request.args.get("parish_id"))
"""

from __future__ import annotations

from ..errors import BadRequest, Forbidden
from ..logging_setup import get_logger
from ..permissions import ADMIN_ROLES, FINANCE_ROLES, WRITE_ROLES, UserRole
from ..validation import ValidationError, normalize_uuid
from .token_service import Principal


logger = get_logger(__name__)


def _canonical(parish_id) -> str | None:
    if parish_id is None:
        return None
    if isinstance(parish_id, str) and not parish_id.strip():
        return None
    return normalize_uuid(parish_id, "parish_id")


def resolve_parish_id(principal: Principal, requested_parish_id=None) -> str:
    """
    Compute the one parish id this request may operate on.

    SUPER_ADMIN: the requested parish if given, else its home parish, else
    BadRequest. Everyone else: the home parish, which must exist, and any
    requested parish must equal it.

    Raises:
        BadRequest: super admin with neither requested nor home parish, or a
            malformed requested id
        Forbidden: non super admin without a home parish, or asking for
            another parish
    """
    if principal.role == UserRole.SUPER_ADMIN:
        try:
            requested = _canonical(requested_parish_id)
        except ValidationError as e:
            raise BadRequest(str(e))
        if requested is not None:
            return requested
        if principal.parish_id is not None:
            return principal.parish_id
        raise BadRequest("parish_id is required")

    if principal.parish_id is None:
        logger.info("scope_denied", reason="no_home_parish", user_id=principal.user_id)
        raise Forbidden("User is not assigned to a parish")

    try:
        requested = _canonical(requested_parish_id)
    except ValidationError:
        # A value that is not even a UUID can never be the home parish
        requested = requested_parish_id

    if requested is not None and requested != principal.parish_id:
        logger.info(
            "scope_denied",
            reason="cross_parish",
            user_id=principal.user_id,
            requested_parish_id=str(requested_parish_id),
        )
        raise Forbidden("Cross-parish access denied")

    return principal.parish_id


def resolve_optional_parish_id(principal: Principal, requested_parish_id=None) -> str | None:
    """
    Like resolve_parish_id, except that a SUPER_ADMIN naming no parish and
    having no home parish gets None: diocese-wide, not an error.
    """
    if (
        principal.role == UserRole.SUPER_ADMIN
        and principal.parish_id is None
        and _is_blank(requested_parish_id)
    ):
        return None
    return resolve_parish_id(principal, requested_parish_id)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_role(principal: Principal, allowed_roles, message: str = "Insufficient permissions") -> None:
    if principal.role not in allowed_roles:
        logger.info("role_denied", user_id=principal.user_id, role=principal.role)
        raise Forbidden(message)


def require_write(principal: Principal) -> None:
    """Every role except VIEWER may write."""
    require_role(principal, WRITE_ROLES, "Read-only users cannot modify data")


def require_finance(principal: Principal) -> None:
    require_role(principal, FINANCE_ROLES, "Finance access required")


def require_admin(principal: Principal) -> None:
    require_role(principal, ADMIN_ROLES, "Administrator access required")


def require_super_admin(principal: Principal) -> None:
    require_role(principal, {UserRole.SUPER_ADMIN}, "Super administrator access required")


def can_access_parish(principal: Principal, parish_id: str | None) -> bool:
    """True when resolving this parish for the principal would succeed."""
    if parish_id is None:
        return principal.role == UserRole.SUPER_ADMIN
    try:
        resolve_parish_id(principal, parish_id)
    except (BadRequest, Forbidden):
        return False
    return True
