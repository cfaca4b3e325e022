"""
Authentication: Flask-Login integration over the session provider.
"""

from webapp.auth.models import AuthUser
from webapp.auth.session_store import (
    FlaskSessionTokenStore,
    current_snapshot,
    get_api_client,
    get_session_provider,
    restore_session,
)
from webapp.extensions import login_manager


@login_manager.request_loader
def load_user_from_request(request):
    """Load the signed-in user from the session cookie's token."""
    snapshot = restore_session()
    if snapshot.is_authenticated:
        return AuthUser(snapshot.session)
    return None


__all__ = [
    'AuthUser',
    'FlaskSessionTokenStore',
    'current_snapshot',
    'get_api_client',
    'get_session_provider',
    'restore_session',
    'load_user_from_request',
]
