"""
Canonical role enumeration.

Role ids match the ids the backend puts in session tokens. This is the
only role table in the console; any other numbering is a bug.
"""

from enum import IntEnum
from typing import Optional


class Role(IntEnum):
    """Closed set of authenticated user categories."""

    ADMIN = 1
    OWNER = 2
    SECURITY = 3


ROLE_NAMES = {
    Role.ADMIN: 'Administrador',
    Role.OWNER: 'Propietario',
    Role.SECURITY: 'Seguridad',
}


def coerce_role_id(value) -> Optional[int]:
    """
    Convert a raw role id (int, int-like string, None) to an int.

    Returns None for anything that is not an integer id. Never raises.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def to_role(role_id) -> Optional[Role]:
    """Return the Role for a raw id, or None if it matches no known role."""
    role_id = coerce_role_id(role_id)
    if role_id is None:
        return None
    try:
        return Role(role_id)
    except ValueError:
        return None


def role_key(role_id) -> Optional[str]:
    """Symbolic name (ADMIN/OWNER/SECURITY) for a role id, or None."""
    role = to_role(role_id)
    return role.name if role is not None else None


def role_name(role_id) -> Optional[str]:
    """Display name for a role id, or None."""
    role = to_role(role_id)
    return ROLE_NAMES.get(role) if role is not None else None
