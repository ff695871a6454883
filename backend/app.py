# backend/app.py

import os
import logging
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from . import db
from .auth import auth_bp
from .categories import category_bp
from .errors import ERROR_MESSAGES, error_response
from .expenses import expense_bp

# ---------------- Configuration ----------------
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("expense-backend")

ACCESS_TOKEN_TTL = timedelta(minutes=15)


def load_config():
    """Settings read once from the process environment."""
    return {
        "DB_PATH": os.environ.get("DB_PATH", db.DEFAULT_DB_PATH),
        "JWT_SECRET_KEY": os.environ.get("JWT_SECRET_KEY", "dev-key-for-local-use-only-change-me"),
        "CORS_ORIGINS": os.environ.get("CORS_ORIGINS", "http://localhost:8501"),
        "PORT": int(os.environ.get("PORT", 5000)),
    }


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response(ERROR_MESSAGES["TOKEN_NOT_FOUND"], 401, error=reason)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response(ERROR_MESSAGES["INVALID_TOKEN"], 401, error=reason)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return error_response(ERROR_MESSAGES["EXPIRED_TOKEN"], 401)


# ---------------- Flask App Factory ----------------
def create_app(config=None):
    app = Flask(__name__)

    settings = load_config()
    settings.update(config or {})
    app.config.update(settings)
    app.config['JWT_TOKEN_LOCATION'] = ['headers']
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = ACCESS_TOKEN_TTL

    jwt = JWTManager(app)
    register_jwt_handlers(jwt)

    # CORS
    origins = [o.strip() for o in app.config['CORS_ORIGINS'].split(",") if o.strip()]
    CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=True,
         methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"])

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(category_bp, url_prefix='/api/category')
    app.register_blueprint(expense_bp, url_prefix='/api/expenses')

    # Initialize DB
    with app.app_context():
        db.init_db()
        logger.info(f"Database initialized at {app.config['DB_PATH']}")

    app.teardown_appcontext(db.close_db)

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    return app


# ---------------- Run ----------------
def main():
    load_dotenv()
    app = create_app()
    app.run(host="0.0.0.0", port=app.config['PORT'])


if __name__ == '__main__':
    main()
