"""
Profile screen: the signed-in user's account details, profile edits and
password change.
"""

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from valhalla.exceptions import APIAuthError, APIError
from valhalla.security.access import resolve_access
from webapp.audit import record_mutation
from webapp.auth.session_store import (
    current_snapshot,
    get_api_client,
    get_session_provider,
    remember_profile,
)
from webapp.clients import get_resource_api
from webapp.utils.guards import require_feature

logger = logging.getLogger(__name__)

bp = Blueprint('profile', __name__, url_prefix='/app/profile')

EDITABLE_FIELDS = ('username', 'email')
UPDATE_ERROR = 'Unable to update the profile'


def _load_account(user_id):
    """Backend user record for the profile, or None if unavailable."""
    if user_id is None:
        return None
    try:
        return get_resource_api(get_api_client(), 'users').get(user_id)
    except APIAuthError:
        raise
    except APIError as e:
        logger.warning(f"Could not load user {user_id}: {e}")
        return None


@bp.route('', methods=['GET', 'POST'])
@require_feature('profile')
def index():
    """
    GET: show the profile
    POST: save profile edits (requires edit permission on the profile)
    """
    snapshot = current_snapshot()
    access = resolve_access('profile', snapshot.role_id)

    if request.method == 'POST':
        if not access.can.can_edit:
            return redirect(url_for('profile.index'))

        changes = {
            name: request.form[name].strip()
            for name in EDITABLE_FIELDS
            if request.form.get(name, '').strip()
        }
        if not changes:
            flash('Nothing to update', 'info')
            return redirect(url_for('profile.index'))

        user_id = snapshot.session.user_id
        if user_id is None:
            logger.warning("Profile update refused: session token carries no user id")
            flash(UPDATE_ERROR, 'error')
            return redirect(url_for('profile.index'))

        users = get_resource_api(get_api_client(), 'users')
        try:
            users.update(user_id, users.schema.to_backend(changes))
        except APIAuthError:
            raise
        except APIError as e:
            record_mutation('UPDATE', 'users', user_id, outcome='failed', detail=str(e))
            flash(e.user_message(UPDATE_ERROR), 'error')
            return redirect(url_for('profile.index'))

        session_fields = {k: v for k, v in changes.items() if k == 'username'}
        if session_fields:
            get_session_provider().update_user(session_fields)
            remember_profile(session_fields)
        record_mutation('UPDATE', 'users', user_id)
        flash('Profile updated', 'success')
        return redirect(url_for('profile.index'))

    return render_template(
        'app/profile.html',
        user=snapshot.session,
        account=_load_account(snapshot.session.user_id),
        can_edit=access.can.can_edit,
    )


@bp.route('/password', methods=['POST'])
@require_feature('profile')
def change_password():
    """Change the signed-in user's password."""
    old_password = request.form.get('old_password') or ''
    new_password = request.form.get('new_password') or ''
    confirm = request.form.get('confirm_password') or ''

    if not old_password or not new_password:
        flash('Current and new password are required', 'error')
    elif new_password != confirm:
        flash('Passwords do not match', 'error')
    else:
        result = get_session_provider().change_password(old_password, new_password)
        user_id = current_snapshot().session.user_id
        if result.success:
            record_mutation('PASSWORD', 'users', user_id)
            flash('Password changed', 'success')
        else:
            record_mutation('PASSWORD', 'users', user_id, outcome='failed', detail=result.error)
            flash(result.error, 'error')
    return redirect(url_for('profile.index'))
