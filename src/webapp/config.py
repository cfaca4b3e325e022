"""
Configuration management for the console.
"""

import os
import logging
from dotenv import load_dotenv, find_dotenv

from valhalla.exceptions import ConfigError

DEFAULT_API_URL = 'http://localhost:3000/api'


class Config:
    """
    Configuration loader for the console.

    Values come from the process environment, after loading the nearest
    .env file. Attribute names double as Flask config keys.
    """

    def __init__(self, load_env=True):
        self.logger = logging.getLogger(__name__)
        if load_env:
            self._load_env()
        self._read()

    def _load_env(self):
        """Load environment variables from .env file."""
        env_file = find_dotenv(usecwd=True)
        if env_file:
            load_dotenv(env_file)
            self.logger.debug(f"Loaded environment from {env_file}")

    def _read(self):
        self.SECRET_KEY = os.getenv('SECRET_KEY')
        self.VALHALLA_API_URL = os.getenv('VALHALLA_API_URL', DEFAULT_API_URL).rstrip('/')
        self.VALHALLA_API_TIMEOUT = _number_env('VALHALLA_API_TIMEOUT', 30)
        self.VALHALLA_API_RETRIES = _number_env('VALHALLA_API_RETRIES', 3)
        self.VALHALLA_API_BACKOFF = _number_env('VALHALLA_API_BACKOFF', 0.5, float)
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.LOG_FILE = os.getenv('LOG_FILE') or None
        self.AUDIT_LOG_PATH = os.getenv('AUDIT_LOG_PATH', 'logs/console_audit.log')

    def as_dict(self):
        """Flask config mapping (upper-case attributes only)."""
        return {name: value for name, value in vars(self).items() if name.isupper()}


def _number_env(name, default, cast=int):
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def validate_config(config):
    """
    Check a Flask config mapping before the app starts serving.

    Raises:
        ConfigError: If a required setting is missing or invalid
    """
    if not config.get('TESTING') and not config.get('SECRET_KEY'):
        raise ConfigError("SECRET_KEY required in .env or environment")

    if not config.get('VALHALLA_API_URL'):
        raise ConfigError("VALHALLA_API_URL must not be empty")

    if int(config.get('VALHALLA_API_RETRIES', 1)) < 1:
        raise ConfigError("VALHALLA_API_RETRIES must be at least 1")
