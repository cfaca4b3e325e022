"""Shared CLI helpers."""

import click

from valhalla.security.roles import Role, coerce_role_id

EXIT_SUCCESS = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


class RoleParamType(click.ParamType):
    """Role given by name (admin, OWNER) or numeric id."""

    name = 'role'

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        role_id = coerce_role_id(value)
        if role_id is not None:
            return role_id
        try:
            return int(Role[str(value).strip().upper()])
        except KeyError:
            choices = ', '.join(role.name.lower() for role in Role)
            self.fail(f"unknown role {value!r} (choose from {choices} or a numeric id)", param, ctx)


ROLE = RoleParamType()
