"""
Session value objects.

Everything here is immutable: readers of the session always receive a
snapshot, and only the SessionProvider produces new ones.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from valhalla.security.roles import coerce_role_id, role_key, role_name


class SessionState(Enum):
    """Lifecycle states of the session provider."""

    LOADING = 'loading'
    AUTHENTICATED = 'authenticated'
    UNAUTHENTICATED = 'unauthenticated'


@dataclass(frozen=True)
class Session:
    """The authenticated principal."""

    user_id: Optional[str]
    username: Optional[str]
    role_id: Optional[int]
    role_name: Optional[str] = None

    @property
    def role_key(self) -> Optional[str]:
        return role_key(self.role_id)

    def merged(self, **fields) -> 'Session':
        """
        Shallow-merge fields into a copy of this session.

        When role_id changes and no role_name is given, the display name is
        recomputed from the role table.
        """
        known = {name: value for name, value in fields.items() if name in _SESSION_FIELDS}
        if 'role_id' in known:
            known['role_id'] = coerce_role_id(known['role_id'])
            if 'role_name' not in known:
                known['role_name'] = role_name(known['role_id']) or self.role_name
        return replace(self, **known)


_SESSION_FIELDS = ('user_id', 'username', 'role_id', 'role_name')


@dataclass(frozen=True)
class AuthSnapshot:
    """Immutable view of the provider state handed to every reader."""

    state: SessionState
    session: Optional[Session] = None

    @property
    def is_loading(self) -> bool:
        return self.state is SessionState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED and self.session is not None

    @property
    def role_id(self) -> Optional[int]:
        return self.session.role_id if self.is_authenticated else None

    @property
    def role_key(self) -> Optional[str]:
        return role_key(self.role_id)


LOADING_SNAPSHOT = AuthSnapshot(SessionState.LOADING)
ANONYMOUS_SNAPSHOT = AuthSnapshot(SessionState.UNAUTHENTICATED)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a network-calling session operation."""

    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> 'AuthResult':
        return cls(success=True)

    @classmethod
    def failed(cls, message: str) -> 'AuthResult':
        return cls(success=False, error=message)
