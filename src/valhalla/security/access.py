"""
Feature access resolver.

Computes a role's effective permissions on one feature. Total: an unknown
feature or role resolves to all-false permissions, never an exception.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from valhalla.security.features import Feature, get_feature
from valhalla.security.permissions import NO_ACCESS, PermissionSet
from valhalla.security.roles import coerce_role_id, role_key, role_name


@dataclass(frozen=True)
class FeatureAccess:
    """What the current role may do with one feature."""

    feature: Optional[Feature]
    role_id: Optional[int]
    role_key: Optional[str]
    role_name: Optional[str]
    permissions: PermissionSet

    @property
    def can(self) -> PermissionSet:
        """Alias of permissions, read as access.can.can_edit in screens."""
        return self.permissions


def _resolve(feature_key, role_id) -> FeatureAccess:
    feature = get_feature(feature_key)
    permissions = feature.permissions_for(role_id) if feature is not None else NO_ACCESS
    return FeatureAccess(
        feature=feature,
        role_id=role_id,
        role_key=role_key(role_id),
        role_name=role_name(role_id),
        permissions=permissions,
    )


@lru_cache(maxsize=256)
def _resolve_cached(feature_key, role_id) -> FeatureAccess:
    return _resolve(feature_key, role_id)


def resolve_access(feature_key, role_id) -> FeatureAccess:
    """
    Resolve a role's access to a feature.

    Args:
        feature_key: Registry key of the feature (e.g. 'owners')
        role_id: Numeric role id of the current session, or None

    Returns:
        FeatureAccess; permissions default to all-false when the feature is
        unknown or has no entry for the role.
    """
    # coerce before the memo; True hashes like 1
    role_id = coerce_role_id(role_id)
    try:
        return _resolve_cached(feature_key, role_id)
    except TypeError:
        # unhashable input: skip the memo
        return _resolve(feature_key, role_id)
