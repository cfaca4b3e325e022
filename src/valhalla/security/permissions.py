"""
Permission sets: the four-flag capability record a role has on a feature.
"""

from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional, Union

# camelCase names used by templates and the CLI
_CAMEL_NAMES = {
    'can_view': 'canView',
    'can_create': 'canCreate',
    'can_edit': 'canEdit',
    'can_delete': 'canDelete',
}
_SNAKE_NAMES = {camel: snake for snake, camel in _CAMEL_NAMES.items()}


@dataclass(frozen=True)
class PermissionSet:
    """
    View/create/edit/delete flags.

    The flags are independent: create, edit or delete do not imply view.
    """

    can_view: bool = False
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False

    @classmethod
    def merge(cls, partial: Optional[Union['PermissionSet', Mapping[str, bool]]]) -> 'PermissionSet':
        """
        Overlay a partial permission record on the all-false default.

        Accepts a PermissionSet, a mapping keyed by snake_case or camelCase
        flag names, or None. Unknown keys are ignored.
        """
        if partial is None:
            return NO_ACCESS
        if isinstance(partial, PermissionSet):
            return partial

        values = {}
        for key, value in partial.items():
            name = _SNAKE_NAMES.get(key, key)
            if name in _CAMEL_NAMES:
                values[name] = bool(value)
        return cls(**values)

    def with_flags(self, **flags) -> 'PermissionSet':
        """Copy with some flags overridden (e.g. VIEW_ONLY.with_flags(can_edit=True))."""
        return PermissionSet.merge({**self.as_snake_dict(), **flags})

    @property
    def grants_without_view(self) -> bool:
        """True when create/edit/delete is granted but view is not."""
        return not self.can_view and (self.can_create or self.can_edit or self.can_delete)

    def as_snake_dict(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def as_dict(self) -> Dict[str, bool]:
        """Flags keyed canView/canCreate/canEdit/canDelete."""
        return {_CAMEL_NAMES[name]: value for name, value in self.as_snake_dict().items()}


NO_ACCESS = PermissionSet()
VIEW_ONLY = PermissionSet(can_view=True)
MANAGE_ALL = PermissionSet(can_view=True, can_create=True, can_edit=True, can_delete=True)
