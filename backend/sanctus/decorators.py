# Overview: Request decorators for API routes; authentication, role gates and scope.

from functools import wraps

from flask import g, request

from .errors import Unauthenticated
from .services import scope_service
from .services.token_service import Principal, get_token_service


def current_principal() -> Principal:
    """The principal set by @require_auth for this request."""
    principal = getattr(g, "principal", None)
    if principal is None:
        raise Unauthenticated()
    return principal


def require_auth(f):
    """
    Require a valid bearer token and establish the principal.

    Sets g.principal (user id, role, home parish). Raises Unauthenticated
    (401) when the header is missing, is not Bearer, or the token is
    tampered with or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.principal = get_token_service().principal_from_header(
            request.headers.get("Authorization")
        )
        return f(*args, **kwargs)

    return decorated_function


def _role_gate(check):
    """Build a decorator that runs a scope_service role check before the view."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            check(current_principal())
            return f(*args, **kwargs)
        return decorated_function
    return decorator


# Stack below @require_auth so the role check runs before any scope resolution
require_write = _role_gate(scope_service.require_write)
require_finance = _role_gate(scope_service.require_finance)
require_admin = _role_gate(scope_service.require_admin)
require_super_admin = _role_gate(scope_service.require_super_admin)


def scoped_parish_id(requested=None) -> str:
    """Resolve the parish this request may touch from an advisory parish_id."""
    return scope_service.resolve_parish_id(current_principal(), requested)
