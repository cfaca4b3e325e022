"""
Session management: the session provider, its snapshots and token handling.
"""

from valhalla.session.models import AuthResult, AuthSnapshot, Session, SessionState
from valhalla.session.provider import SessionProvider
from valhalla.session.tokens import MemoryTokenStore, TokenClaims, TokenStore, decode_token_claims

__all__ = [
    'AuthResult',
    'AuthSnapshot',
    'MemoryTokenStore',
    'Session',
    'SessionProvider',
    'SessionState',
    'TokenClaims',
    'TokenStore',
    'decode_token_claims',
]
