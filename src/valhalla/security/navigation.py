"""
Navigation resolver.

Derives everything the console shows for a role (sidebar, dashboard cards,
quick-access shortcuts, default landing path) from one role id, so all lists
of a resolution agree with each other.
"""

import sys
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from valhalla.security.features import FEATURE_ROUTES, Feature, resolve_default_path_for_role
from valhalla.security.roles import coerce_role_id, role_key, role_name


@dataclass(frozen=True)
class SidebarItem:
    key: str
    label: str
    icon: Optional[str]
    path: str
    group: Optional[str] = None


@dataclass(frozen=True)
class Navigation:
    """Navigation model for one role."""

    role_id: Optional[int]
    role_key: Optional[str]
    role_name: Optional[str]
    accessible_features: Tuple[Feature, ...]
    sidebar_items: Tuple[SidebarItem, ...]
    dashboard_cards: Tuple[Feature, ...]
    quick_access: Tuple[Feature, ...]
    default_path: str

    def sidebar_groups(self) -> List[Tuple[Optional[str], List[SidebarItem]]]:
        """Sidebar items grouped by feature group, in first-seen group order."""
        groups = OrderedDict()
        for item in self.sidebar_items:
            groups.setdefault(item.group, []).append(item)
        return list(groups.items())


def _order_key(feature: Feature):
    # Missing order sorts after every defined order
    return feature.order if feature.order is not None else sys.maxsize


def _sorted_by_order(features: Iterable[Feature]) -> Tuple[Feature, ...]:
    # sorted() is stable: equal orders keep registry order
    return tuple(sorted(features, key=_order_key))


def build_sidebar_items(features: Iterable[Feature]) -> Tuple[SidebarItem, ...]:
    return tuple(
        SidebarItem(
            key=feature.key,
            label=feature.label,
            icon=feature.icon,
            path=feature.app_path,
            group=feature.group,
        )
        for feature in features
        if feature.path and feature.label
    )


def resolve_navigation(role_id, features: Iterable[Feature] = FEATURE_ROUTES) -> Navigation:
    """
    Resolve the navigation model for a role.

    Args:
        role_id: Numeric role id of the current session, or None
        features: Feature table (defaults to the registry)

    Returns:
        Navigation with accessible features, sidebar items (registry order),
        dashboard cards and quick access (stable-sorted by order) and the
        default landing path.
    """
    features = tuple(features)
    role_id = coerce_role_id(role_id)

    if role_id is None:
        accessible = ()
    else:
        accessible = tuple(f for f in features if f.permissions_for(role_id).can_view)

    return Navigation(
        role_id=role_id,
        role_key=role_key(role_id),
        role_name=role_name(role_id),
        accessible_features=accessible,
        sidebar_items=build_sidebar_items(accessible),
        dashboard_cards=_sorted_by_order(f for f in accessible if f.show_in_dashboard),
        quick_access=_sorted_by_order(f for f in accessible if f.quick_access),
        default_path=resolve_default_path_for_role(role_id, features),
    )
