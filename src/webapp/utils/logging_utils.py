"""
Logging configuration for the console.
"""

import logging
import logging.handlers
import sys

from flask import g, has_request_context

LOG_FORMAT = '[%(asctime)s] %(levelname)s [%(name)s] [%(console_user)s] %(message)s'


class ConsoleUserFilter(logging.Filter):
    """
    Stamp records with the signed-in console user ('-' outside requests).

    Reads the request's session provider without restoring it, so logging
    never triggers a backend call.
    """

    def filter(self, record):
        record.console_user = '-'
        if has_request_context():
            provider = g.get('session_provider')
            session = provider.session if provider is not None else None
            if session is not None and session.username:
                record.console_user = session.username
        return True


def setup_logging(log_file=None, verbose=False, level=None):
    """
    Configure logging for the console.

    Args:
        log_file: Path to log file (None = stdout only)
        verbose: Enable DEBUG level logging
        level: Explicit level name (e.g. 'WARNING'); overrides verbose
    """
    if level:
        level = logging.getLevelName(str(level).upper())
        if not isinstance(level, int):
            level = logging.INFO
    else:
        level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    user_filter = ConsoleUserFilter()

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        try:
            handlers.append(logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            ))
        except OSError as e:
            print(f"Warning: Could not create log file {log_file}: {e}", file=sys.stderr)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(user_filter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # Suppress noisy libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('werkzeug').setLevel(max(level, logging.INFO))
