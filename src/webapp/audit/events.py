"""
Audit events for console mutations.

Each create/update/delete the console sends to the backend is written to
the audit log with the responsible user.
"""
from flask import current_app, has_request_context
from flask_login import current_user

from .logger import get_audit_logger


def responsible_user():
    """
    Get username of currently logged-in user.

    Returns:
        str: Username of authenticated user, or "anonymous" if not logged in
    """
    if has_request_context() and current_user and current_user.is_authenticated:
        return current_user.display_name
    return "anonymous"


def record_mutation(action, resource, record_id=None, outcome='ok', detail=None):
    """
    Write one mutation to the audit log.

    Args:
        action: CREATE, UPDATE, DELETE, PASSWORD or a record action (EXIT, PAY, ...)
        resource: Backend resource name (e.g. 'towers')
        record_id: Id of the affected record, when known
        outcome: 'ok' or 'failed'
        detail: Optional extra text (e.g. the server error message)
    """
    logger = current_app.extensions.get('console_audit') or get_audit_logger()

    message = (
        f"user={responsible_user()} action={action} resource={resource} "
        f"id={record_id} outcome={outcome}"
    )
    if detail:
        message += f" detail={detail!r}"
    logger.info(message)
