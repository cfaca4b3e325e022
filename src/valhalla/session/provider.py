"""
Session/identity provider.

Owns the one live session of a console context. States:

    LOADING  --restore()/login()-->  AUTHENTICATED | UNAUTHENTICATED

The session is mutated only through restore, login, logout and
update_user. Readers get immutable AuthSnapshot objects, either by calling
snapshot() or by subscribing to changes.

Network-calling operations report failure through AuthResult values; they
never raise for backend or network errors.
"""

import logging
import threading
import time
from typing import Callable, Mapping, Optional, Protocol

from valhalla.exceptions import APIError, SessionStateError, TokenDecodeError
from valhalla.session.models import (
    ANONYMOUS_SNAPSHOT,
    LOADING_SNAPSHOT,
    AuthResult,
    AuthSnapshot,
    Session,
    SessionState,
)
from valhalla.session.tokens import TokenClaims, TokenStore, decode_token_claims

logger = logging.getLogger(__name__)

LOGIN_ERROR = 'Unable to sign in'
LOGIN_CANCELLED = 'Sign-in was cancelled'
FORGOT_PASSWORD_ERROR = 'Unable to process the password reset request'
RESET_PASSWORD_ERROR = 'Unable to reset the password'
CHANGE_PASSWORD_ERROR = 'Unable to change the password'

# camelCase profile fields accepted by update_user
_FIELD_ALIASES = {
    'userId': 'user_id',
    'roleId': 'role_id',
    'roleName': 'role_name',
}

Listener = Callable[[AuthSnapshot], None]


class AuthAPI(Protocol):
    """Backend authentication endpoints the provider depends on."""

    def login(self, username: str, password: str) -> Mapping: ...

    def validate_token(self, token: str) -> bool: ...

    def forgot_password(self, email: str) -> Mapping: ...

    def reset_password(self, token: str, new_password: str) -> Mapping: ...

    def change_password(self, old_password: str, new_password: str) -> Mapping: ...


def extract_token(payload) -> Optional[str]:
    """Token from a login response: top-level 'token' or 'data.token'."""
    if not isinstance(payload, Mapping):
        return None
    token = payload.get('token')
    if not token and isinstance(payload.get('data'), Mapping):
        token = payload['data'].get('token')
    return token if isinstance(token, str) and token else None


class SessionProvider:
    """
    Holds the authenticated principal and its lifecycle.

    Args:
        auth_api: Backend auth endpoints (see AuthAPI)
        token_store: Durable storage of the session token
        clock: Returns the current time in seconds since the epoch
    """

    def __init__(self, auth_api: AuthAPI, token_store: TokenStore,
                 clock: Callable[[], float] = time.time):
        self._auth_api = auth_api
        self._tokens = token_store
        self._clock = clock
        self._lock = threading.RLock()
        self._snapshot = LOADING_SNAPSHOT
        self._listeners = []
        # bumped by logout(); results of calls started earlier are dropped
        self._epoch = 0

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def snapshot(self) -> AuthSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def state(self) -> SessionState:
        return self.snapshot().state

    @property
    def session(self) -> Optional[Session]:
        return self.snapshot().session

    @property
    def is_authenticated(self) -> bool:
        return self.snapshot().is_authenticated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with every new snapshot.

        Returns:
            A function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Internal state transitions
    # ------------------------------------------------------------------

    def _current_epoch(self) -> int:
        with self._lock:
            return self._epoch

    def _publish(self, snapshot: AuthSnapshot, epoch: int) -> bool:
        with self._lock:
            if epoch != self._epoch:
                return False
            self._snapshot = snapshot
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snapshot)
        return True

    def _discard(self, epoch: int) -> None:
        """Clear the persisted token and drop to UNAUTHENTICATED."""
        with self._lock:
            if epoch != self._epoch:
                return
            self._tokens.clear()
        self._publish(ANONYMOUS_SNAPSHOT, epoch)

    def _validate(self, token: str, claims: TokenClaims, epoch: int) -> bool:
        try:
            valid = self._auth_api.validate_token(token)
        except APIError as e:
            logger.warning(f"Token validation failed: {e}")
            valid = False

        if not valid:
            self._discard(epoch)
            return False
        return self._publish(AuthSnapshot(SessionState.AUTHENTICATED, claims.to_session()), epoch)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def restore(self) -> AuthSnapshot:
        """
        Rebuild the session from the persisted token.

        An expired (or expiry-less) token is discarded without calling the
        backend; otherwise the token is validated remotely.
        """
        epoch = self._current_epoch()
        self._publish(LOADING_SNAPSHOT, epoch)

        token = self._tokens.get()
        if not token:
            self._publish(ANONYMOUS_SNAPSHOT, epoch)
            return self.snapshot()

        try:
            claims = decode_token_claims(token)
        except TokenDecodeError as e:
            logger.warning(f"Discarding stored token: {e}")
            self._discard(epoch)
            return self.snapshot()

        if claims.is_expired(self._clock()):
            logger.info("Stored session token expired")
            self._discard(epoch)
            return self.snapshot()

        self._validate(token, claims, epoch)
        return self.snapshot()

    def login(self, username: str, password: str) -> AuthResult:
        """
        Authenticate with the backend and start a session.

        Concurrent logins are not serialized; the last response wins.
        """
        epoch = self._current_epoch()
        self._publish(LOADING_SNAPSHOT, epoch)

        try:
            payload = self._auth_api.login(username, password)
        except APIError as e:
            logger.info(f"Login failed for {username}: {e}")
            self._discard(epoch)
            return AuthResult.failed(e.user_message(LOGIN_ERROR))

        token = extract_token(payload)
        if not token:
            logger.warning("Login response carried no token")
            self._discard(epoch)
            return AuthResult.failed(LOGIN_ERROR)

        with self._lock:
            if epoch != self._epoch:
                return AuthResult.failed(LOGIN_CANCELLED)
            self._tokens.set(token)

        try:
            claims = decode_token_claims(token)
        except TokenDecodeError as e:
            logger.warning(f"Login returned an undecodable token: {e}")
            self._discard(epoch)
            return AuthResult.failed(LOGIN_ERROR)

        if self._validate(token, claims, epoch):
            logger.info(f"User {claims.username or username} signed in (role {claims.role_id})")
            return AuthResult.ok()
        if epoch != self._current_epoch():
            return AuthResult.failed(LOGIN_CANCELLED)
        return AuthResult.failed(LOGIN_ERROR)

    def logout(self) -> AuthSnapshot:
        """End the session locally. Always succeeds; no backend call."""
        with self._lock:
            self._epoch += 1
            epoch = self._epoch
            self._tokens.clear()
        self._publish(ANONYMOUS_SNAPSHOT, epoch)
        return self.snapshot()

    def update_user(self, fields: Optional[Mapping] = None, **kwargs) -> AuthSnapshot:
        """
        Shallow-merge profile fields into the live session.

        Raises:
            SessionStateError: If there is no authenticated session
        """
        changes = {}
        for name, value in {**(fields or {}), **kwargs}.items():
            changes[_FIELD_ALIASES.get(name, name)] = value

        with self._lock:
            current = self._snapshot
            if not current.is_authenticated:
                raise SessionStateError("update_user requires an authenticated session")
            updated = AuthSnapshot(SessionState.AUTHENTICATED, current.session.merged(**changes))
            epoch = self._epoch
        self._publish(updated, epoch)
        return updated

    # ------------------------------------------------------------------
    # Stateless password flows
    # ------------------------------------------------------------------

    def _stateless(self, call: Callable[[], object], fallback: str) -> AuthResult:
        try:
            call()
        except APIError as e:
            logger.info(f"{fallback}: {e}")
            return AuthResult.failed(e.user_message(fallback))
        return AuthResult.ok()

    def forgot_password(self, email: str) -> AuthResult:
        return self._stateless(lambda: self._auth_api.forgot_password(email), FORGOT_PASSWORD_ERROR)

    def reset_password(self, token: str, new_password: str) -> AuthResult:
        return self._stateless(
            lambda: self._auth_api.reset_password(token, new_password), RESET_PASSWORD_ERROR
        )

    def change_password(self, old_password: str, new_password: str) -> AuthResult:
        """Change the signed-in user's password. Does not re-authenticate."""
        return self._stateless(
            lambda: self._auth_api.change_password(old_password, new_password), CHANGE_PASSWORD_ERROR
        )
