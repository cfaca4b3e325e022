"""
pytest fixtures for console route tests

Provides a Flask app wired to the FakeBackend and helpers to sign in as a
given role by writing a token into the session cookie.
"""

import pytest

from fixtures.backend import BASE_URL, make_token
from webapp.run import create_app


@pytest.fixture
def app(backend):
    """
    Create Flask app for testing.

    All backend traffic goes to the backend fixture; the audit log has no
    file handler and network retries are disabled.
    """
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'VALHALLA_API_URL': BASE_URL,
        'VALHALLA_API_RETRIES': 1,
        'VALHALLA_API_BACKOFF': 0,
        'AUDIT_LOG_PATH': None,
    }, http_session=backend)
    return app


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    return app.test_client()


@pytest.fixture
def login_as(client):
    """
    Sign the test client in by storing a backend token in the session.

    Usage:
        login_as(Role.OWNER, username='ana')
    """
    def _login(role_id, **claims):
        token = make_token(role_id=int(role_id), **claims)
        with client.session_transaction() as sess:
            sess['token'] = token
        return token
    return _login
