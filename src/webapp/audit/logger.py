"""
Audit logging infrastructure for console mutations.

Provides rotating file logger for tracking create/update/delete requests
sent to the backend on behalf of a signed-in user.
"""
import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path

AUDIT_LOGGER_NAME = 'console_audit'


def ensure_log_directory(logfile_path):
    """
    Ensure log directory exists and is writable.

    Args:
        logfile_path: Desired log file path

    Returns:
        str: Usable log file path (may fall back to temp directory)
    """
    log_dir = Path(logfile_path).parent

    try:
        log_dir.mkdir(parents=True, exist_ok=True)

        test_file = log_dir / '.write_test'
        test_file.touch()
        test_file.unlink()

        return str(logfile_path)
    except OSError as e:
        fallback_path = os.path.join(tempfile.gettempdir(), 'console_audit.log')
        logging.getLogger(__name__).warning(
            f"Could not use log directory {log_dir}: {e}; falling back to {fallback_path}"
        )
        return fallback_path


def get_audit_logger(logfile_path=None):
    """
    Get or create the audit logger.

    Only the first call configures a handler; later calls return the same
    logger. Without a path the logger has no handler of its own and
    propagates to the root logger.

    Args:
        logfile_path: Path to audit log file

    Returns:
        logging.Logger: Configured audit logger
    """
    logger = logging.getLogger(AUDIT_LOGGER_NAME)
    logger.setLevel(logging.INFO)

    if logfile_path and not logger.handlers:
        logfile_path = ensure_log_directory(logfile_path)

        # 10MB files, 5 backups
        handler = RotatingFileHandler(
            logfile_path,
            maxBytes=10_000_000,
            backupCount=5,
            encoding='utf-8'
        )
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(handler)

    return logger
