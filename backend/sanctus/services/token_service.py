# Overview: Signed session tokens and the Principal they carry.

"""
Session token issue and validation.

Tokens are HS256 JWTs with a fixed lifetime. The claims embed the user id
(sub), the role and the optional home parish id; a validated token yields a
Principal that is immutable for the rest of the request.

There is no refresh flow: an expired token means the user logs in again.
The signing secret is frozen into a TokenService when the app is created and
is never read from the environment at call time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from ..errors import Unauthenticated
from ..logging_setup import get_logger
from ..permissions import ALL_ROLES
from ..validation import ValidationError, normalize_uuid


logger = get_logger(__name__)

TOKEN_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller: identity, role and optional home parish."""
    user_id: str
    role: str
    parish_id: str | None = None


class TokenService:
    """Issues and validates session tokens with one frozen signing secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = TOKEN_TTL):
        if not secret:
            raise RuntimeError("JWT_SECRET must be set")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, user_id: str, role: str, parish_id: str | None, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": role,
            "parish_id": str(parish_id) if parish_id else None,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def validate(self, token: str) -> Principal:
        """
        Verify signature and expiry and rebuild the Principal.

        Raises Unauthenticated for a bad signature, an elapsed expiry,
        missing/malformed claims or a role outside the fixed role set.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("token_rejected", reason="expired")
            raise Unauthenticated("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug("token_rejected", reason=type(e).__name__)
            raise Unauthenticated("Invalid token")

        role = claims.get("role")
        if role not in ALL_ROLES:
            logger.debug("token_rejected", reason="unknown_role")
            raise Unauthenticated("Invalid token")

        try:
            user_id = normalize_uuid(claims.get("sub"), "sub")
            parish_id = claims.get("parish_id")
            if parish_id is not None:
                parish_id = normalize_uuid(parish_id, "parish_id")
        except ValidationError:
            logger.debug("token_rejected", reason="malformed_claims")
            raise Unauthenticated("Invalid token")

        return Principal(user_id=user_id, role=role, parish_id=parish_id)

    def principal_from_header(self, header_value: str | None) -> Principal:
        """Parse an Authorization header value of the form 'Bearer <token>'."""
        if not header_value:
            raise Unauthenticated("Missing authorization header")
        scheme, _, token = header_value.strip().partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthenticated("Authorization header must use the Bearer scheme")
        return self.validate(token.strip())


def get_token_service() -> TokenService:
    """The TokenService built for the running app."""
    return current_app.extensions["sanctus_tokens"]
