# FILE: ecotask-backend/main.py

import logging
from flask import Flask, jsonify
from pydantic import ValidationError
from werkzeug.middleware.proxy_fix import ProxyFix

from dependencies import default_config, init_collaborators
from errors import EcoTaskError
from extensions import limiter
from logging_config import setup_logging
from models import db

def create_app(overrides=None):
    """
    Builds the Flask application.
    `overrides` is applied on top of the environment-derived config.
    Run with: gunicorn "main:create_app()"
    """
    setup_logging()

    app = Flask(__name__)
    app.config.update(default_config())
    if overrides:
        app.config.update(overrides)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    # --- Initialize Extensions ---
    db.init_app(app)
    limiter.init_app(app)
    init_collaborators(app)

    # --- Import and Register Blueprints ---
    from api.auth import auth_bp
    from api.eco_tasks import tasks_bp
    from api.submission_routes import submissions_bp, uploads_bp
    from api.gamification import gamification_bp
    from api.users import users_bp
    from api.status import status_bp
    from api.error_utils import create_error_response, domain_error_response

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(tasks_bp, url_prefix='/api/tasks')
    app.register_blueprint(submissions_bp, url_prefix='/api/submissions')
    app.register_blueprint(gamification_bp, url_prefix='/api')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(uploads_bp, url_prefix='/uploads')
    app.register_blueprint(status_bp)

    # --- Global Error Handlers ---
    @app.errorhandler(EcoTaskError)
    def handle_domain_error(e):
        return domain_error_response(e)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        details = e.errors(include_url=False, include_context=False, include_input=False)
        return jsonify({"error_code": "BAD_REQUEST", "message": "Request body could not be validated", "details": details}), 400

    @app.errorhandler(404)
    def resource_not_found(e):
        """Handles 404 Not Found errors for a clean API response."""
        return create_error_response("NOT_FOUND", "The requested resource was not found.", status_code=404)

    @app.errorhandler(413)
    def payload_too_large(e):
        return create_error_response("VALIDATION_ERROR", "Uploaded file is too large.", status_code=413)

    @app.errorhandler(500)
    def internal_server_error(e):
        """Handles unexpected 500 Internal Server Errors for a clean API response."""
        logging.critical(f"An unhandled exception occurred: {e}", exc_info=True)
        return create_error_response("INTERNAL_SERVER_ERROR", status_code=500)

    with app.app_context():
        # Import models to ensure tables are created
        import models  # noqa: F401
        db.create_all()
        if app.config['SEED_DEMO_TASKS']:
            from seed_tasks import seed_demo_tasks
            seed_demo_tasks()

    logging.info("EcoTask backend initialised")
    return app

if __name__ == "__main__":
    create_app().run(debug=True)
