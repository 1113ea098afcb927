# Overview: Lookups over the permission catalog.

from .definitions import PERMISSION_DEFINITIONS


def get_all_permission_codes():
    """Keys of every catalog entry, in catalog order."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]
