"""
Audit trail of console mutations.
"""
from .events import record_mutation
from .logger import get_audit_logger


def init_audit(app, logfile_path=None):
    """
    Attach audit logging to Flask application.

    Args:
        app: Flask application instance
        logfile_path: Path to audit log file (default: AUDIT_LOG_PATH config)
    """
    if logfile_path is None:
        logfile_path = app.config.get('AUDIT_LOG_PATH')
    app.extensions['console_audit'] = get_audit_logger(logfile_path)


__all__ = ['init_audit', 'record_mutation', 'get_audit_logger']
