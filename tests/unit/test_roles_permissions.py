"""
Unit tests for role ids and permission sets.
"""

import pytest

from valhalla.security.permissions import MANAGE_ALL, NO_ACCESS, VIEW_ONLY, PermissionSet
from valhalla.security.roles import ROLE_NAMES, Role, coerce_role_id, role_key, role_name, to_role


class TestRoleIds:
    """Canonical role numbering and lenient id coercion."""

    def test_canonical_numbering(self):
        assert (int(Role.ADMIN), int(Role.OWNER), int(Role.SECURITY)) == (1, 2, 3)
        assert set(ROLE_NAMES) == set(Role)

    @pytest.mark.parametrize('raw,expected', [
        (1, 1), ('2', 2), (' 3 ', 3), (3.0, 3), (99, 99),
        (None, None), (True, None), ('admin', None), (2.5, None), ([], None),
    ])
    def test_coerce_role_id(self, raw, expected):
        assert coerce_role_id(raw) == expected

    def test_unknown_role_has_no_key_or_name(self):
        # a tenant id is outside the enumeration
        assert to_role(4) is None
        assert role_key(4) is None
        assert role_name(4) is None

    def test_known_role_key_and_name(self):
        assert role_key('1') == 'ADMIN'
        assert role_key(3) == 'SECURITY'
        assert role_name(2) == 'Propietario'


class TestPermissionSet:
    """Merging partial permission records over the all-false default."""

    def test_merge_none_is_no_access(self):
        assert PermissionSet.merge(None) == NO_ACCESS

    def test_merge_partial_snake_case(self):
        perms = PermissionSet.merge({'can_view': True})
        assert perms == VIEW_ONLY
        assert perms.can_create is False

    def test_merge_camel_case(self):
        perms = PermissionSet.merge({'canView': True, 'canEdit': 1})
        assert perms.can_view and perms.can_edit
        assert not perms.can_create and not perms.can_delete

    def test_merge_ignores_unknown_keys(self):
        assert PermissionSet.merge({'canFly': True}) == NO_ACCESS

    def test_with_flags_copies(self):
        perms = VIEW_ONLY.with_flags(can_edit=True)
        assert perms.can_view and perms.can_edit
        assert VIEW_ONLY.can_edit is False

    def test_flags_are_independent(self):
        perms = PermissionSet(can_create=True)
        assert perms.can_view is False
        assert perms.grants_without_view is True
        assert MANAGE_ALL.grants_without_view is False

    def test_as_dict_uses_camel_case(self):
        assert MANAGE_ALL.as_dict() == {
            'canView': True, 'canCreate': True, 'canEdit': True, 'canDelete': True,
        }
