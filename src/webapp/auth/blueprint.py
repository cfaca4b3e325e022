"""
Authentication blueprint for login/logout and password recovery.
"""

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import login_user, logout_user

from valhalla.security.features import resolve_default_path_for_role
from webapp.auth.models import AuthUser
from webapp.auth.session_store import current_snapshot, get_session_provider
from webapp.utils.guards import safe_next_url

bp = Blueprint('auth', __name__)


def _landing_for(snapshot):
    return resolve_default_path_for_role(snapshot.role_id)


@bp.route('/login', methods=['GET', 'POST'])
def login():
    """
    Login page and handler.

    GET: Display login form
    POST: Authenticate against the backend and start the session
    """
    snapshot = current_snapshot()
    if snapshot.is_authenticated and request.method == 'GET':
        return redirect(safe_next_url(request.args.get('next')) or _landing_for(snapshot))

    if request.method == 'POST':
        username = (request.form.get('username') or '').strip()
        password = request.form.get('password') or ''

        if not username or not password:
            flash('Username and password are required', 'error')
            return render_template('auth/login.html', username=username), 400

        provider = get_session_provider()
        result = provider.login(username, password)

        if result.success:
            snapshot = provider.snapshot()
            login_user(AuthUser(snapshot.session))
            flash('Signed in successfully', 'success')
            next_page = safe_next_url(request.args.get('next') or request.form.get('next'))
            return redirect(next_page or _landing_for(snapshot))

        flash(result.error, 'error')
        return render_template('auth/login.html', username=username), 401

    return render_template('auth/login.html', username='')


@bp.route('/logout', methods=['GET', 'POST'])
def logout():
    """End the session locally and return to the login page."""
    get_session_provider().logout()
    logout_user()
    flash('Signed out', 'info')
    return redirect(url_for('auth.login'))


@bp.route('/forgot-password', methods=['GET', 'POST'])
def forgot_password():
    """Request a password reset e-mail."""
    if request.method == 'POST':
        email = (request.form.get('email') or '').strip()
        if not email:
            flash('Email is required', 'error')
            return render_template('auth/forgot_password.html'), 400

        result = get_session_provider().forgot_password(email)
        if result.success:
            flash('Check your email for instructions to reset your password', 'success')
            return redirect(url_for('auth.login'))
        flash(result.error, 'error')
        return render_template('auth/forgot_password.html', email=email), 400

    return render_template('auth/forgot_password.html')


@bp.route('/reset-password', methods=['GET', 'POST'])
def reset_password():
    """Set a new password using the token from the reset e-mail."""
    token = request.values.get('token', '')

    if request.method == 'POST':
        new_password = request.form.get('password') or ''
        confirm = request.form.get('confirm_password') or ''

        if not token:
            flash('The reset link is invalid or incomplete', 'error')
            return render_template('auth/reset_password.html', token=token), 400
        if not new_password or new_password != confirm:
            flash('Passwords do not match', 'error')
            return render_template('auth/reset_password.html', token=token), 400

        result = get_session_provider().reset_password(token, new_password)
        if result.success:
            flash('Password reset successfully', 'success')
            return redirect(url_for('auth.login'))
        flash(result.error, 'error')
        return render_template('auth/reset_password.html', token=token), 400

    return render_template('auth/reset_password.html', token=token)
