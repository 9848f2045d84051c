"""Flask application factory."""
import logging
import os
from datetime import datetime, timezone

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from pos_backend.database import init_db

__version__ = '2.0.0'


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize Sentry for error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', __version__)
        )

    # Production: trust X-Forwarded-* from the reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    # Initialize database
    init_db(app)

    # Prometheus request metrics
    from pos_backend.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Load the acting user before each request
    from pos_backend.middleware import load_current_user

    @app.before_request
    def before_request_handler():
        load_current_user()

    # Error Handlers
    from pos_backend.exceptions import PosError

    @app.errorhandler(PosError)
    def handle_pos_error(error):
        """Handle application exceptions raised outside an orchestration."""
        app.logger.info(f"PosError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code == 404:
            return jsonify({'error': 'Endpoint no encontrado'}), 404
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.exception(f"Unhandled Exception: {error}")
        return jsonify({'error': 'Error interno del servidor'}), 500

    # Register blueprints
    from pos_backend.blueprints.sales import sales_bp
    from pos_backend.blueprints.inventory import inventory_bp
    from pos_backend.blueprints.quotes import quotes_bp
    from pos_backend.blueprints.catalog import catalog_bp
    from pos_backend.blueprints.metrics import metrics_bp

    app.register_blueprint(sales_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(quotes_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(metrics_bp)

    @app.route('/')
    def health():
        return jsonify({
            'status': 'online',
            'system': 'Tlapalería POS Backend',
            'version': __version__,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        })

    # Register CLI commands
    from pos_backend.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
