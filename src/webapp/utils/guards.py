"""
Route guard decorators and template helpers.

The decisions themselves live in valhalla.security.guards; this module
applies them to the current request. Denials are silent redirects, never
error pages.

Usage:
    @bp.route('/app/towers')
    @require_feature('towers')
    def towers():
        ...
"""

import logging
from functools import wraps
from urllib.parse import urlparse

from flask import make_response, redirect, render_template, request, url_for

from valhalla.security import guards
from valhalla.security.access import resolve_access
from valhalla.security.guards import GuardOutcome
from valhalla.security.navigation import resolve_navigation
from webapp.auth.session_store import current_snapshot

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 1


def loading_response():
    """Session still being established: ask the client to retry shortly."""
    response = make_response(render_template('loading.html'), 503)
    response.headers['Retry-After'] = str(RETRY_AFTER_SECONDS)
    return response


def safe_next_url(target):
    """Return target if it is a local console path, else None."""
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith('/') or target.startswith('//'):
        return None
    return target


def guard_response(decision):
    """
    Flask response for a guard decision, or None when the view may render.
    """
    if decision.outcome is GuardOutcome.RENDER:
        return None
    if decision.outcome is GuardOutcome.WAIT:
        return loading_response()

    logger.debug(f"Guard redirect {request.path} -> {decision.location}")
    if decision.location == guards.LOGIN_PATH:
        return redirect(url_for('auth.login', next=request.full_path.rstrip('?')))
    return redirect(decision.location)


def login_required(f):
    """Decorator requiring an authenticated session."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = guard_response(guards.require_authenticated(current_snapshot()))
        if response is not None:
            return response
        return f(*args, **kwargs)
    return decorated_function


def require_role(*roles):
    """
    Decorator requiring one of the given roles.

    An empty role list only requires authentication.

    Usage:
        @require_role(Role.ADMIN, Role.SECURITY)
        def visitors_report():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            response = guard_response(guards.require_role(current_snapshot(), roles))
            if response is not None:
                return response
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def check_feature(feature_key):
    """Response enforcing authentication and view access to a feature, or None."""
    snapshot = current_snapshot()
    response = guard_response(guards.require_authenticated(snapshot))
    if response is None:
        response = guard_response(guards.require_feature(snapshot.role_id, feature_key))
    return response


def require_feature(feature_key):
    """Decorator requiring view access to a registry feature."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            response = check_feature(feature_key)
            if response is not None:
                return response
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def current_role_id():
    return current_snapshot().role_id


def rbac_context_processor():
    """
    Add navigation and access helpers to template context.

    Register this in your app:
        app.context_processor(rbac_context_processor)

    Then use in templates:
        {% if feature_access('towers').can.can_create %} ... {% endif %}
    """
    snapshot = current_snapshot()
    return {
        'auth': snapshot,
        'navigation': resolve_navigation(snapshot.role_id),
        'feature_access': lambda key: resolve_access(key, snapshot.role_id),
    }
