"""
TRADOS Translator Application
=============================
Flask application factory and main entry point.
"""
from flask import Flask, jsonify
from flask_cors import CORS

from trados_translator.config import config
from trados_translator.database.connection import get_database
from trados_translator.database.repositories import FormattingRuleRepository
from trados_translator.errors import ConfigurationError, ImportFormatError
from trados_translator.api.routes import (
    create_translation_blueprint,
    create_document_blueprint,
    create_memory_blueprint,
    create_terminology_blueprint,
    create_rules_blueprint,
    create_settings_blueprint,
    create_logs_blueprint
)
from trados_translator.api.middleware import add_rate_limit_headers
from trados_translator.utils.logging import get_channel, debug_print


def create_app(testing: bool = False) -> Flask:
    """
    Application factory for Flask app.

    Args:
        testing: If True, configure for testing (no database seeding, open CORS)

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    app.config.update(
        SECRET_KEY=config.server.secret_key,
        MAX_CONTENT_LENGTH=config.file.max_file_size_bytes,
        TESTING=testing
    )
    app.json.sort_keys = False

    cors_origins = config.server.cors_origins
    if testing:
        cors_origins = ['*']

    CORS(
        app,
        resources={r"/api/*": {"origins": cors_origins}},
        supports_credentials=True
    )

    # Initialize database and seed the default rule set
    if not testing:
        get_database()
        FormattingRuleRepository().ensure_default()

    app.register_blueprint(create_translation_blueprint())
    app.register_blueprint(create_document_blueprint())
    app.register_blueprint(create_memory_blueprint())
    app.register_blueprint(create_terminology_blueprint())
    app.register_blueprint(create_rules_blueprint())
    app.register_blueprint(create_settings_blueprint())
    app.register_blueprint(create_logs_blueprint())

    app.after_request(add_rate_limit_headers)

    logger = get_channel('api')

    @app.errorhandler(ConfigurationError)
    def configuration_error(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(ImportFormatError)
    def import_format_error(e):
        logger.warning(f"Rejected import: {e.reason}")
        return jsonify({'error': e.reason}), 422

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({'error': 'Bad request', 'details': str(e)}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(413)
    def file_too_large(e):
        max_mb = config.file.max_file_size_mb
        return jsonify({'error': f'File too large. Maximum size is {max_mb}MB'}), 413

    @app.errorhandler(500)
    def internal_error(e):
        get_channel('app').error(f"Internal error: {e}")
        return jsonify({'error': 'Internal server error'}), 500

    @app.route('/')
    def index():
        return jsonify({'name': 'TRADOS Translator', 'health': '/api/health'})

    get_channel('app').info(f"TRADOS Translator started on {config.server.host}:{config.server.port}")
    debug_print("Application initialized", 'app', 'INFO')

    return app


def run_server():
    """Run the Flask development server."""
    app = create_app()

    print(f"""
============================================================
  TRADOS Translator
  Server: http://{config.server.host}:{config.server.port}
  Model:  {config.gemini.model}
  Debug:  {'Enabled' if config.logging.verbose_debug else 'Disabled'}
============================================================
    """)

    app.run(
        host=config.server.host,
        port=config.server.port,
        debug=config.server.debug,
        threaded=True
    )


if __name__ == '__main__':
    run_server()
