"""Application factory."""

import json
import uuid

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from bootstrap import ensure_super_admin
from config import Config
from models import db
from routes.auth import auth_bp
from routes.users import users_bp
from storage import CredentialStore
from utils.authorization import authorize_user_writes

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

REDACTED_FIELDS = frozenset({"password", "passwordHash", "password_hash"})


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    CredentialStore(db).init_app(app)

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

    # Request hooks, in order: request id, access log, role policy
    _register_request_hooks(app)

    # Blueprints; the /api prefixes mirror the storefront's public paths
    app.register_blueprint(auth_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth", name="api_auth")
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(users_bp, url_prefix="/api/users", name="api_users")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_error_handlers(app)

    # Super-admin bootstrap runs once, before any request is served
    if app.config.get("SEED_SUPER_ADMIN", True):
        with app.app_context():
            ensure_super_admin()

    return app


def _redact(payload):
    if isinstance(payload, dict):
        return {
            key: "***" if key in REDACTED_FIELDS else _redact(value)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [_redact(item) for item in payload]
    return payload


def _register_request_hooks(app: Flask) -> None:
    """Register request ids, access logging and the authorization middleware."""

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.before_request
    def _log_request():
        app.logger.info("%s %s", request.method, request.full_path.rstrip("?"))
        if request.method in {"POST", "PUT", "PATCH"}:
            body = request.get_json(silent=True)
            if body is not None:
                app.logger.debug("Body: %s", json.dumps(_redact(body)))

    app.before_request(authorize_user_writes)

    @app.after_request
    def _add_request_id_header(response):
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "success": False,
            "error": getattr(error, "name", "Error"),
            "code": getattr(error, "code_name", None) or getattr(error, "name", "Error"),
            "detail": error.description,
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        request_id = g.get("request_id") or str(uuid.uuid4())
        app.logger.exception("Unhandled application error", exc_info=error)
        payload = {
            "success": False,
            "error": "Internal Server Error",
            "code": "InternalError",
            "detail": "An unexpected error occurred.",
            "request_id": request_id,
        }
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=application.config["PORT"])
