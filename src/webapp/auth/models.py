"""
Flask-Login user wrapper for the console session.

This provides a thin adapter between valhalla.session.Session and
Flask-Login's requirements.
"""

from flask_login import UserMixin

from valhalla.security.roles import Role, to_role
from valhalla.session import Session


class AuthUser(UserMixin):
    """
    Flask-Login compatible user wrapper.

    Wraps the immutable Session of an authenticated snapshot; a new
    AuthUser is built whenever the session changes.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_id(self):
        """Return user ID as string (required by Flask-Login)."""
        if self.session.user_id is not None:
            return str(self.session.user_id)
        return self.session.username

    @property
    def user_id(self):
        return self.session.user_id

    @property
    def username(self):
        return self.session.username

    @property
    def role_id(self):
        return self.session.role_id

    @property
    def role_key(self):
        return self.session.role_key

    @property
    def role_name(self):
        return self.session.role_name

    @property
    def display_name(self):
        return self.session.username or self.get_id()

    def has_role(self, role) -> bool:
        """Check the user's role against a Role, role id or role key."""
        if isinstance(role, str) and not role.isdigit():
            return self.role_key == role.upper()
        target = to_role(role)
        return target is not None and target == self.role_id

    def has_any_role(self, *roles) -> bool:
        return any(self.has_role(role) for role in roles)

    @property
    def is_admin(self):
        return self.role_id == Role.ADMIN

    def __repr__(self):
        return f"<AuthUser(username='{self.username}', role={self.role_key})>"
