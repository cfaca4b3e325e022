"""
Feature registry.

Static, ordered table of the console's features: routing metadata, dashboard
surfacing flags and per-role permission sets. Built once at import time and
never mutated; registry order is the order of FEATURE_ROUTES.

Absence of a role in a feature's permissions means that role has no access.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from valhalla.exceptions import RegistryError
from valhalla.security.permissions import MANAGE_ALL, NO_ACCESS, VIEW_ONLY, PermissionSet
from valhalla.security.roles import Role, coerce_role_id

logger = logging.getLogger(__name__)

APP_ROOT = '/app'
ROOT_PATH = '/'


@dataclass(frozen=True)
class Feature:
    """A named unit of console functionality with its own route and permissions."""

    key: str
    label: Optional[str]
    path: Optional[str]
    icon: Optional[str] = None
    group: Optional[str] = None
    order: Optional[int] = None
    show_in_dashboard: bool = False
    quick_access: bool = False
    permissions: Mapping[int, PermissionSet] = field(
        default_factory=lambda: MappingProxyType({}), compare=False, hash=False
    )
    # Flask endpoint of the screen bound to this feature
    endpoint: Optional[str] = None
    # API resource listed by the generic resource screen
    resource: Optional[str] = None

    def permissions_for(self, role_id) -> PermissionSet:
        """Total lookup: the role's permission set, or all-false."""
        role_id = coerce_role_id(role_id)
        if role_id is None:
            return NO_ACCESS
        return PermissionSet.merge(self.permissions.get(role_id))

    @property
    def app_path(self) -> Optional[str]:
        """Absolute route of the feature, e.g. /app/owners."""
        if not self.path:
            return None
        return f'{APP_ROOT}/{self.path}'


def _feature(key, label, path, icon, group, order, permissions,
             show_in_dashboard=False, quick_access=False,
             endpoint='resources.index', resource=None) -> Feature:
    return Feature(
        key=key,
        label=label,
        path=path,
        icon=icon,
        group=group,
        order=order,
        show_in_dashboard=show_in_dashboard,
        quick_access=quick_access,
        permissions=MappingProxyType({int(role): perms for role, perms in permissions.items()}),
        endpoint=endpoint,
        resource=resource,
    )


FEATURE_ROUTES: Tuple[Feature, ...] = (
    _feature('dashboard', 'Panel de Control', 'dashboard', 'bi-speedometer2', 'General', 0,
             {Role.ADMIN: VIEW_ONLY, Role.OWNER: VIEW_ONLY},
             endpoint='home.dashboard'),
    _feature('notifications', 'Notificaciones', 'notifications', 'bi-bell', 'General', 1,
             {Role.ADMIN: MANAGE_ALL, Role.OWNER: VIEW_ONLY},
             show_in_dashboard=True, quick_access=True, resource='notifications'),
    _feature('profile', 'Perfil', 'profile', 'bi-person-circle', 'General', 2,
             {Role.ADMIN: MANAGE_ALL,
              Role.OWNER: VIEW_ONLY.with_flags(can_edit=True),
              Role.SECURITY: VIEW_ONLY.with_flags(can_edit=True)},
             show_in_dashboard=True, endpoint='profile.index'),
    _feature('owners', 'Propietarios', 'owners', 'bi-person-fill', 'Gestión', 10,
             {Role.ADMIN: MANAGE_ALL},
             show_in_dashboard=True, resource='owners'),
    _feature('guards', 'Vigilantes', 'guards', 'bi-shield-fill', 'Gestión', 11,
             {Role.ADMIN: MANAGE_ALL},
             show_in_dashboard=True, resource='guards'),
    _feature('apartments', 'Apartamentos', 'apartments', 'bi-house-door', 'Gestión', 12,
             {Role.ADMIN: MANAGE_ALL},
             show_in_dashboard=True, resource='apartments'),
    _feature('towers', 'Torres', 'towers', 'bi-building', 'Gestión', 13,
             {Role.ADMIN: MANAGE_ALL},
             resource='towers'),
    _feature('reservations', 'Reservas', 'reservations', 'bi-calendar-event', 'Operaciones', 30,
             {Role.ADMIN: MANAGE_ALL, Role.OWNER: MANAGE_ALL},
             show_in_dashboard=True, quick_access=True, resource='reservations'),
    _feature('surveys', 'Encuestas', 'surveys', 'bi-clipboard-data', 'Operaciones', 31,
             {Role.ADMIN: MANAGE_ALL, Role.OWNER: MANAGE_ALL},
             show_in_dashboard=True, resource='surveys'),
    _feature('payments', 'Pagos', 'payments', 'bi-cash', 'Operaciones', 32,
             {Role.ADMIN: MANAGE_ALL, Role.OWNER: MANAGE_ALL},
             show_in_dashboard=True, quick_access=True, resource='payments'),
    _feature('pqrs', 'PQRS', 'pqrs', 'bi-question-circle', 'Operaciones', 33,
             {Role.ADMIN: MANAGE_ALL, Role.OWNER: MANAGE_ALL},
             show_in_dashboard=True, resource='pqrs'),
    _feature('parking', 'Parqueaderos', 'parking', 'bi-p-circle', 'Operaciones', 34,
             {Role.ADMIN: MANAGE_ALL, Role.OWNER: VIEW_ONLY, Role.SECURITY: VIEW_ONLY},
             show_in_dashboard=True, resource='parking'),
    _feature('pets', 'Mascotas', 'pets', 'bi-heart', 'Operaciones', 35,
             {Role.ADMIN: MANAGE_ALL, Role.OWNER: MANAGE_ALL},
             show_in_dashboard=True, quick_access=True, resource='pets'),
    _feature('visitors', 'Visitantes', 'visitors', 'bi-door-open', 'Seguridad', 9,
             {Role.ADMIN: MANAGE_ALL, Role.SECURITY: MANAGE_ALL},
             show_in_dashboard=True, quick_access=True, resource='visitors'),
    _feature('facilities', 'Instalaciones', 'facilities', 'bi-buildings', 'Operaciones', 36,
             {Role.ADMIN: MANAGE_ALL, Role.OWNER: VIEW_ONLY},
             show_in_dashboard=True, resource='facilities'),
    _feature('roles', 'Roles', 'roles', 'bi-person-badge', 'Administración', 50,
             {Role.ADMIN: MANAGE_ALL},
             resource='roles'),
    _feature('permissions', 'Permisos', 'permissions', 'bi-key', 'Administración', 51,
             {Role.ADMIN: MANAGE_ALL},
             resource='permissions'),
)

DEFAULT_FEATURE_KEY = 'dashboard'


def validate_registry(features: Iterable[Feature], strict: bool = False) -> None:
    """
    Check a feature table for structural problems.

    Duplicate keys or paths always raise RegistryError. A permission set that
    grants create/edit/delete without view is legal but almost certainly a
    mistake: it is logged as a warning, or raises when strict is True.
    """
    seen_keys = set()
    seen_paths = set()
    for feature in features:
        if feature.key in seen_keys:
            raise RegistryError(f"Duplicate feature key: {feature.key}")
        seen_keys.add(feature.key)

        if feature.path:
            if feature.path in seen_paths:
                raise RegistryError(f"Duplicate feature path: {feature.path}")
            seen_paths.add(feature.path)

        for role_id, perms in feature.permissions.items():
            if PermissionSet.merge(perms).grants_without_view:
                message = (
                    f"Feature '{feature.key}' grants create/edit/delete "
                    f"without view to role {role_id}"
                )
                if strict:
                    raise RegistryError(message)
                logger.warning(message)


validate_registry(FEATURE_ROUTES)

_BY_KEY = MappingProxyType({feature.key: feature for feature in FEATURE_ROUTES})
_BY_PATH = MappingProxyType({feature.path: feature for feature in FEATURE_ROUTES if feature.path})


def get_feature(key) -> Optional[Feature]:
    """Look up a feature by key; None if unknown."""
    try:
        return _BY_KEY.get(key)
    except TypeError:
        return None


def get_feature_by_path(path) -> Optional[Feature]:
    """Look up a feature by its route segment; None if unknown."""
    if not isinstance(path, str):
        return None
    return _BY_PATH.get(path.strip('/'))


def resolve_default_path_for_role(role_id, features: Iterable[Feature] = FEATURE_ROUTES) -> str:
    """
    Default landing route for a role.

    The first feature in registry order the role can view, as /app/{path};
    the root path when there is none or the role is null/unknown.
    """
    for feature in features:
        if feature.path and feature.permissions_for(role_id).can_view:
            return feature.app_path
    return ROOT_PATH
