"""
Session token handling.

Tokens are JSON Web Tokens issued by the backend. The console only decodes
them locally (no signature check) to read identity claims and the expiry
used as a pre-check; the backend's validate-token endpoint is the authority.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

from jose import JWTError, jwt

from valhalla.exceptions import TokenDecodeError
from valhalla.security.roles import ROLE_NAMES, coerce_role_id, to_role
from valhalla.session.models import Session


def _first(claims: Mapping[str, Any], *names):
    for name in names:
        value = claims.get(name)
        if value is not None and value != '':
            return value
    return None


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims read from a session token."""

    user_id: Optional[str]
    username: Optional[str]
    role_id: Optional[int]
    role_name: Optional[str]
    exp: Optional[float]
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> 'TokenClaims':
        user_id = _first(claims, 'userId', 'sub')
        role_id = coerce_role_id(_first(claims, 'roleId', 'role_id', 'role'))

        role = to_role(role_id)
        name = ROLE_NAMES.get(role) if role is not None else None
        if name is None:
            fallback = _first(claims, 'roleName', 'role')
            name = fallback if isinstance(fallback, str) else None

        exp = claims.get('exp')
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            exp = None

        return cls(
            user_id=str(user_id) if user_id is not None else None,
            username=_first(claims, 'username', 'name'),
            role_id=role_id,
            role_name=name,
            exp=exp,
            raw=dict(claims),
        )

    def is_expired(self, now: float) -> bool:
        """A token without a numeric exp counts as expired."""
        return self.exp is None or self.exp <= now

    def to_session(self) -> Session:
        return Session(
            user_id=self.user_id,
            username=self.username,
            role_id=self.role_id,
            role_name=self.role_name,
        )


def decode_token_claims(token: str) -> TokenClaims:
    """
    Decode a token's claims without verifying its signature.

    Raises:
        TokenDecodeError: If the token is not a decodable JWT
    """
    if not isinstance(token, str) or not token:
        raise TokenDecodeError("Token must be a non-empty string")
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as e:
        raise TokenDecodeError(f"Malformed session token: {e}") from e
    if not isinstance(claims, Mapping):
        raise TokenDecodeError("Session token claims are not an object")
    return TokenClaims.from_claims(claims)


class TokenStore(Protocol):
    """
    Durable storage of the single session token.

    Written only by the session provider; read only by the session provider
    and the outgoing-request authenticator.
    """

    def get(self) -> Optional[str]: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """In-process token store (CLI tools and tests)."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None
