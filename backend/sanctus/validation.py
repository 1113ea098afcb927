from __future__ import annotations
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
import uuid

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text, Time

from .time_utils import parse_iso_date, parse_iso_datetime, parse_iso_time


# Largest amount accepted for money columns (Numeric(14, 2))
MAX_AMOUNT = Decimal("999999999999.99")


class ValidationError(ValueError):
    """400-level input problem."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = field(default_factory=frozenset)


def policy(writable: set[str] | frozenset[str], required: set[str] | frozenset[str] = frozenset()) -> ModelValidationPolicy:
    return ModelValidationPolicy(frozenset(writable), frozenset(required))


def _columns_by_key(model) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def normalize_uuid(value: Any, key: str = "id") -> str:
    """Canonical lowercase hyphenated form; rejects anything that is not a UUID."""
    if isinstance(value, uuid.UUID):
        return str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a UUID string")
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        raise ValidationError(f"{key} must be a valid UUID")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or "e" in stripped.lower() or "." in stripped:
                raise ValidationError(f"{col.key} must be a plain integer")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        raise ValidationError(f"{col.key} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    # Money: accept numbers or numeric strings, never floats' binary noise
    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a decimal number")
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{col.key} must be a decimal number")
        if not amount.is_finite():
            raise ValidationError(f"{col.key} must be a finite number")
        if abs(amount) > MAX_AMOUNT:
            raise ValidationError(f"{col.key} exceeds maximum {MAX_AMOUNT}")
        return amount

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    if isinstance(coltype, Date):
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                d = parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            if d is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            return d
        raise ValidationError(f"{col.key} must be a date")

    if isinstance(coltype, Time):
        if isinstance(value, time):
            return value
        if isinstance(value, str):
            try:
                t = parse_iso_time(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 time")
            if t is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 time")
            return t
        raise ValidationError(f"{col.key} must be a time")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string")

        if col.info.get("uuid"):
            return normalize_uuid(value, col.key)

        text = str(value).strip()
        choices = col.info.get("choices")
        if choices is not None and text not in choices:
            raise ValidationError(f"{col.key} must be one of: {', '.join(choices)}")
        return text

    return value


def validate_payload(
    *,
    model,
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
    ignore_unknown: bool = False,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length, choices)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys; an explicit
    null is kept as None so callers can tell "clear" from "absent")

    ignore_unknown=True drops keys outside the policy instead of rejecting
    them; device payloads carry whole records including server-owned columns.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    cleaned: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            if ignore_unknown:
                continue
            if k not in cols:
                raise ValidationError(f"Unknown field: {k}")
            raise ValidationError(f"Field not allowed: {k}")

        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            cleaned[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        cleaned[k] = val

    return cleaned


def require_positive_amount(values: dict, key: str = "amount") -> None:
    if key in values and values[key] is not None and values[key] <= 0:
        raise ValidationError(f"{key} must be greater than zero")


def parse_limit_offset(args, default_limit: int = 50, max_limit: int = 500) -> tuple[int, int]:
    """Read limit/offset query params with bounds."""
    try:
        limit = int(args.get("limit", default_limit))
        offset = int(args.get("offset", 0))
    except (TypeError, ValueError):
        raise ValidationError("limit and offset must be integers")
    if limit < 1 or offset < 0:
        raise ValidationError("limit must be positive and offset non-negative")
    return min(limit, max_limit), offset
