#!/usr/bin/env python3
"""
Application factory for the Valhalla console.
"""

import logging

import requests
from flask import Flask

from webapp.config import Config, validate_config
from webapp.extensions import login_manager
from webapp.utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)


def create_app(test_config=None, http_session=None):
    """
    Build the console application.

    Args:
        test_config: Mapping layered over the environment configuration
        http_session: requests.Session used for all backend calls
                      (tests pass a fake backend here)

    Raises:
        ConfigError: If the configuration is incomplete
    """
    app = Flask(__name__)

    testing = bool(test_config and test_config.get('TESTING'))
    app.config.update(Config(load_env=not testing).as_dict())
    if test_config:
        app.config.update(test_config)
    validate_config(app.config)

    if not testing:
        setup_logging(log_file=app.config.get('LOG_FILE'), level=app.config.get('LOG_LEVEL'))

    app.extensions['valhalla_http'] = http_session if http_session is not None else requests.Session()

    # Initialize Flask-Login; user loading is registered by webapp.auth
    import webapp.auth  # noqa: F401
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'

    from webapp.audit import init_audit
    init_audit(app)

    # Register context processor for navigation/permissions in templates
    from webapp.utils.guards import rbac_context_processor
    app.context_processor(rbac_context_processor)

    from webapp.utils.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from webapp.auth.blueprint import bp as auth_bp
    from webapp.dashboards.home.blueprint import bp as home_bp
    from webapp.dashboards.profile.blueprint import bp as profile_bp
    from webapp.dashboards.resources.blueprint import bp as resources_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(home_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(resources_bp)

    logger.info(f"Console configured for API {app.config['VALHALLA_API_URL']}")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, port=5050)
