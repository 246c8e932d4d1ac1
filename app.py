"""Application factory."""

import json
import os
import uuid

from flask import Flask, g, jsonify, request, send_from_directory
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes.auth import auth_bp
from routes.categories import categories_bp
from routes.comments import comments_bp
from routes.password import password_bp
from routes.posts import posts_bp
from routes.users import users_bp
from storage import init_image_storage
from utils.errors import Unauthenticated
from utils.mailer import init_mailer

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    init_mailer(app)
    init_image_storage(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Ensure uploads directory exists
    upload_dir = app.config.get("UPLOAD_DIR")
    if upload_dir:
        os.makedirs(upload_dir, exist_ok=True)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(password_bp, url_prefix="/password")
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(posts_bp, url_prefix="/posts")
    app.register_blueprint(comments_bp, url_prefix="/comments")
    app.register_blueprint(categories_bp, url_prefix="/categories")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Locally hosted images
    if (app.config.get("IMAGE_STORAGE") or "local").lower() == "local" and upload_dir:
        media_base = (app.config.get("MEDIA_BASE_URL") or "/media").rstrip("/")

        @app.route(f"{media_base}/<path:filename>", methods=["GET"])
        def media(filename: str):
            return send_from_directory(os.path.abspath(upload_dir), filename)

    # Errors
    _register_jwt_handlers()
    _register_error_handlers(app)

    return app


def _error_payload(error: HTTPException, request_id: str) -> dict:
    payload = {
        "success": False,
        "message": error.description,
        "error": getattr(error, "name", "Error"),
        "request_id": request_id,
    }
    errors = getattr(error, "errors", None)
    if errors:
        payload["errors"] = errors
    return payload


def _unauthenticated_response(message: str):
    request_id = g.get("request_id") or str(uuid.uuid4())
    response = jsonify(_error_payload(Unauthenticated(message), request_id))
    response.status_code = 401
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_jwt_handlers() -> None:
    """Render credential failures in the same shape as other errors."""

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _unauthenticated_response("No token provided, access denied")

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _unauthenticated_response("Invalid token, access denied")

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict, jwt_payload: dict):
        return _unauthenticated_response("Token has expired, access denied")


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        if error.code and error.code >= 500:
            app.logger.error("%s: %s", error.name, error.description)
        response = error.get_response()
        response.data = json.dumps(_error_payload(error, request_id))
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        request_id = g.get("request_id") or str(uuid.uuid4())
        db.session.rollback()
        app.logger.exception("Unhandled application error", exc_info=error)
        payload = {
            "success": False,
            "message": "An unexpected error occurred.",
            "error": "Internal Server Error",
            "request_id": request_id,
        }
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
