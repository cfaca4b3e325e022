"""
Request-scoped session plumbing.

The Flask signed session cookie is the durable token storage. Each request
gets its own SessionProvider (kept on flask.g) that restores from the
cookie on first use.
"""

import logging
import time

from flask import current_app, g, session

from valhalla.session import SessionProvider, SessionState
from webapp.clients import AuthAPI, ValhallaAPIClient

logger = logging.getLogger(__name__)

TOKEN_KEY = 'token'
PROFILE_KEY = 'profile'


class FlaskSessionTokenStore:
    """TokenStore backed by the Flask session cookie."""

    def get(self):
        return session.get(TOKEN_KEY)

    def set(self, token):
        session[TOKEN_KEY] = token

    def clear(self):
        session.pop(TOKEN_KEY, None)


def get_api_client():
    """The request's ValhallaAPIClient, authenticated from the session cookie."""
    if 'api_client' not in g:
        config = current_app.config
        g.api_client = ValhallaAPIClient(
            config['VALHALLA_API_URL'],
            token_getter=FlaskSessionTokenStore().get,
            http_session=current_app.extensions.get('valhalla_http'),
            timeout=config.get('VALHALLA_API_TIMEOUT', 30),
            max_attempts=config.get('VALHALLA_API_RETRIES', 3),
            backoff_seconds=config.get('VALHALLA_API_BACKOFF', 0.5),
        )
    return g.api_client


def _on_session_change(snapshot):
    if snapshot.state is SessionState.UNAUTHENTICATED:
        # profile edits belong to the session that made them
        session.pop(PROFILE_KEY, None)
    logger.debug(f"Session state: {snapshot.state.value}")


def get_session_provider():
    """The request's SessionProvider (not yet restored)."""
    if 'session_provider' not in g:
        provider = SessionProvider(
            AuthAPI(get_api_client()),
            FlaskSessionTokenStore(),
            clock=current_app.config.get('SESSION_CLOCK') or time.time,
        )
        provider.subscribe(_on_session_change)
        g.session_provider = provider
    return g.session_provider


def restore_session():
    """
    Restore the request's session once and return its snapshot.

    Profile edits saved in the cookie are re-applied on top of the token's
    claims.
    """
    provider = get_session_provider()
    if not g.get('session_restored'):
        g.session_restored = True
        snapshot = provider.restore()
        overrides = session.get(PROFILE_KEY)
        if snapshot.is_authenticated and overrides:
            provider.update_user(overrides)
    return provider.snapshot()


def current_snapshot():
    """AuthSnapshot for the current request."""
    return restore_session()


def remember_profile(fields):
    """Persist profile edits for the rest of the session."""
    profile = dict(session.get(PROFILE_KEY) or {})
    profile.update(fields)
    session[PROFILE_KEY] = profile
