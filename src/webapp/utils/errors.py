"""
Application error handlers.

Usage:
    from webapp.utils.errors import register_error_handlers
    register_error_handlers(app)
"""

import logging

from flask import flash, redirect, render_template, url_for
from flask_login import logout_user

from valhalla.exceptions import APIAuthError, APIError
from webapp.auth.session_store import get_session_provider

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = 'Your session has expired. Please sign in again.'
API_ERROR_MESSAGE = 'The server could not complete the request.'


def register_error_handlers(app):
    """
    Register console error handlers on the app.

    - 404: the not-found page
    - APIAuthError from any view: end the session and go to the login page
    - other APIError escaping a view: 502 error page with the server message
    """

    @app.errorhandler(404)
    def not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(APIAuthError)
    def api_auth_error(e):
        logger.info(f"Backend rejected the session token: {e}")
        get_session_provider().logout()
        logout_user()
        flash(e.user_message(SESSION_EXPIRED_MESSAGE), 'warning')
        return redirect(url_for('auth.login'))

    @app.errorhandler(APIError)
    def api_error(e):
        logger.error(f"Unhandled API error: {e}")
        return render_template('errors/api_error.html',
                               message=e.user_message(API_ERROR_MESSAGE)), 502
