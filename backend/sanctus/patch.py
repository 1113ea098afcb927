# Overview: Tri-state partial updates (absent / set-to-null / set-to-value).

"""
Partial update values.

A PATCH-style body says three different things per field:
- key absent: keep the stored value
- key present with null: clear the stored value
- key present with a value: replace the stored value

Patch keeps only the present keys, so "absent" is simply "not in the patch"
and an explicit None survives as a real value. apply_patch() is a pure
function of (existing record, patch) and needs no database.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable


class _Unset:
    """Sentinel for 'field not supplied'."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


class Patch(Mapping):
    """Immutable mapping of the fields a caller actually supplied."""

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values = dict(values or {})

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], allowed_fields: Iterable[str]) -> "Patch":
        """Keep only allowed keys that are present in payload (null included)."""
        allowed = set(allowed_fields)
        return cls({k: v for k, v in payload.items() if k in allowed})

    def get_field(self, key: str):
        """Value for key, or UNSET when the caller did not supply it."""
        return self._values.get(key, UNSET)

    def is_set(self, key: str) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Patch({self._values!r})"


def apply_patch(existing: Mapping[str, Any], patch: Mapping[str, Any]) -> dict:
    """New record dict: existing values overlaid with every supplied field."""
    merged = dict(existing)
    for key, value in patch.items():
        if value is UNSET:
            continue
        merged[key] = value
    return merged


def changed_fields(existing: Mapping[str, Any], patch: Mapping[str, Any]) -> dict:
    """Subset of the patch that differs from the existing record."""
    return {
        key: value
        for key, value in patch.items()
        if value is not UNSET and existing.get(key, UNSET) != value
    }
