"""Flask application entry point."""

import logging
from flask import Flask, jsonify
from flask_cors import CORS

from .auth.context import clear_current_identity
from .config import settings
from .db import init_db
from .exceptions import GatehouseError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Create Flask app
app = Flask(__name__)
app.secret_key = settings.secret_key

# CORS configuration
CORS(app, origins=settings.cors_origins, supports_credentials=True)


# Database initialization (runs once on app startup)
def initialize_database():
    """Initialize database on app startup."""
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


with app.app_context():
    initialize_database()


@app.teardown_request
def clear_security_context(error=None):
    """Drop the request's identity so it cannot outlive the request."""
    clear_current_identity()


# Error handlers
@app.errorhandler(GatehouseError)
def handle_gatehouse_error(error):
    """Render any Gatehouse exception as a structured JSON failure."""
    response = {
        "error": {
            "type": error.__class__.__name__,
            "code": error.code,
            "message": error.message
        }
    }
    if error.details:
        response["error"]["details"] = error.details
    return jsonify(response), error.status_code


@app.errorhandler(500)
def handle_internal_error(error):
    """Handle internal server errors."""
    logger.error(f"Internal error: {error}")
    return jsonify({
        "error": {
            "type": "InternalServerError",
            "code": "internal_error",
            "message": "An internal error occurred"
        }
    }), 500


# Health check endpoint
@app.route("/health")
def health():
    """Health check endpoint."""
    return jsonify({"status": "ok"})


# Register API blueprints
from .api.auth import auth_bp

app.register_blueprint(auth_bp)


if __name__ == "__main__":
    app.run(debug=True)
