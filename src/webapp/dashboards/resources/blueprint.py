"""
Generic resource screens.

Every registry feature bound to a backend resource gets a table screen at
/app/<path> plus create/edit/delete handlers and the resource's record
actions. Affordances are rendered only when the role's permission set allows
them, and each mutation re-checks the permission server-side; a denied
mutation redirects back without a message.
"""

import logging

from flask import Blueprint, abort, flash, redirect, render_template, request

from valhalla.exceptions import APIAuthError, APIError, APINotFoundError
from valhalla.security import guards
from valhalla.security.access import resolve_access
from valhalla.security.features import get_feature_by_path
from webapp.audit import record_mutation
from webapp.auth.session_store import current_snapshot, get_api_client
from webapp.clients import RESOURCES, get_resource_api
from webapp.dashboards.resources.actions import allowed_actions, get_action
from webapp.utils.guards import check_feature, guard_response

logger = logging.getLogger(__name__)

bp = Blueprint('resources', __name__, url_prefix='/app')

MUTATION_MESSAGES = {
    'CREATE': ('Record created', 'Unable to create the record'),
    'UPDATE': ('Record updated', 'Unable to update the record'),
    'DELETE': ('Record deleted', 'Unable to delete the record'),
}


def _authorize(feature_path, permission=None):
    """
    Resolve the screen's feature and check access.

    Returns:
        tuple: (access, response). If response is not None, return it
        immediately from the view.
    """
    response = guard_response(guards.require_authenticated(current_snapshot()))
    if response is not None:
        return None, response

    feature = get_feature_by_path(feature_path)
    if feature is None or feature.resource not in RESOURCES:
        abort(404)

    response = check_feature(feature.key)
    if response is not None:
        return None, response

    access = resolve_access(feature.key, current_snapshot().role_id)
    return access, _deny(access, permission)


def _deny(access, permission):
    """Redirect back to the screen when the permission flag is not granted."""
    if permission and not getattr(access.can, permission):
        logger.debug(f"{permission} denied on {access.feature.key} for role {access.role_key}")
        return redirect(access.feature.app_path)
    return None


def _form_data(columns):
    """Submitted values for the screen's columns (blank inputs dropped)."""
    data = {}
    for field, _ in columns:
        value = request.form.get(field, '').strip()
        if value:
            data[field] = value
    return data


def _mutate(access, action, call, record_id=None, messages=None):
    success, failure = messages or MUTATION_MESSAGES[action]
    resource = access.feature.resource
    try:
        call()
    except APIAuthError:
        raise
    except APIError as e:
        logger.warning(f"{action} {resource} {record_id} failed: {e}")
        record_mutation(action, resource, record_id, outcome='failed', detail=str(e))
        flash(e.user_message(failure), 'error')
    else:
        record_mutation(action, resource, record_id)
        flash(success, 'success')
    return redirect(access.feature.app_path)


@bp.route('/<feature_path>')
def index(feature_path):
    """Table of the resource's records."""
    access, response = _authorize(feature_path)
    if response is not None:
        return response

    spec = RESOURCES[access.feature.resource]
    api = get_resource_api(get_api_client(), access.feature.resource)
    load_error = None
    try:
        records = api.list()
    except APIAuthError:
        raise
    except APIError as e:
        logger.warning(f"Listing {access.feature.resource} failed: {e}")
        load_error = e.user_message('Unable to load the records')
        records = []

    return render_template(
        'app/resource_list.html',
        feature=access.feature,
        can=access.can,
        columns=spec.columns,
        records=records,
        actions=allowed_actions(access.feature.resource, access.can),
        load_error=load_error,
    )


@bp.route('/<feature_path>/create', methods=['POST'])
def create(feature_path):
    access, response = _authorize(feature_path, 'can_create')
    if response is not None:
        return response

    spec = RESOURCES[access.feature.resource]
    api = get_resource_api(get_api_client(), access.feature.resource)
    data = api.schema.to_backend(_form_data(spec.columns))
    return _mutate(access, 'CREATE', lambda: api.create(data))


@bp.route('/<feature_path>/<record_id>/edit', methods=['GET', 'POST'])
def edit(feature_path, record_id):
    """
    GET: edit form pre-filled with the record
    POST: save the edits
    """
    access, response = _authorize(feature_path, 'can_edit')
    if response is not None:
        return response

    spec = RESOURCES[access.feature.resource]
    api = get_resource_api(get_api_client(), access.feature.resource)

    if request.method == 'POST':
        data = api.schema.to_backend(_form_data(spec.columns))
        return _mutate(access, 'UPDATE', lambda: api.update(record_id, data), record_id)

    try:
        record = api.get(record_id)
    except APINotFoundError:
        record = None
    if record is None:
        abort(404)

    return render_template(
        'app/resource_edit.html',
        feature=access.feature,
        columns=spec.columns,
        record=record,
        record_id=record_id,
    )


@bp.route('/<feature_path>/<record_id>/delete', methods=['POST'])
def delete(feature_path, record_id):
    access, response = _authorize(feature_path, 'can_delete')
    if response is not None:
        return response

    api = get_resource_api(get_api_client(), access.feature.resource)
    return _mutate(access, 'DELETE', lambda: api.delete(record_id), record_id)


@bp.route('/<feature_path>/<record_id>/<action_name>', methods=['POST'])
def record_action(feature_path, record_id, action_name):
    """Run one of the resource's record actions (visitor exit, PQRS status, ...)."""
    access, response = _authorize(feature_path)
    if response is not None:
        return response

    action = get_action(access.feature.resource, action_name)
    if action is None:
        abort(404)
    response = _deny(access, action.permission)
    if response is not None:
        return response

    try:
        values = action.read_form(request.form)
    except ValueError as e:
        flash(str(e), 'error')
        return redirect(access.feature.app_path)

    api = get_resource_api(get_api_client(), access.feature.resource)
    return _mutate(access, action.audit_name, lambda: action.run(api, record_id, values),
                   record_id, messages=(action.success, action.failure))
