"""Application factory."""

import json
import logging
import os
import uuid

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import (
    BadRequest,
    Conflict,
    HTTPException,
    InternalServerError,
    NotFound,
)

from config import Config
from routes.files import files_bp
from storage import (
    ConflictError,
    InvalidInputError,
    StorageError,
    StorageIOError,
    StoredFileNotFoundError,
    create_storage,
)

_STORAGE_HTTP_ERRORS = {
    InvalidInputError: BadRequest,
    StoredFileNotFoundError: NotFound,
    ConflictError: Conflict,
}


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    _configure_logging(app)

    # Storage engine; a root that cannot be created aborts startup
    app.extensions["storage"] = create_storage(
        app.config.get("STORAGE_BACKEND", "local"),
        app.config["STORAGE_DIR"],
    )

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

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Blueprints
    app.register_blueprint(files_bp, url_prefix="/files")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_error_handlers(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    app.logger.setLevel(level)
    logging.getLogger("storage").setLevel(level)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


def _error_response(error: HTTPException):
    request_id = g.get("request_id") or str(uuid.uuid4())
    response = error.get_response()
    payload = {
        "error": getattr(error, "name", "Error"),
        "detail": error.description,
        "request_id": request_id,
    }
    response.data = json.dumps(payload)
    response.content_type = "application/json"
    response.headers.setdefault("X-Request-ID", request_id)
    return response


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
        return _error_response(error)

    @app.errorhandler(StorageError)
    def _handle_storage_error(error: StorageError):
        for error_class, http_error in _STORAGE_HTTP_ERRORS.items():
            if isinstance(error, error_class):
                return _error_response(http_error(str(error)))

        if isinstance(error, StorageIOError):
            app.logger.exception("Storage operation failed", exc_info=error)
        else:
            app.logger.exception("Unexpected storage error", exc_info=error)
        return _error_response(
            InternalServerError("The storage operation could not be completed.")
        )

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        request_id = g.get("request_id") or str(uuid.uuid4())
        app.logger.exception("Unhandled application error", exc_info=error)
        payload = {
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred.",
            "request_id": request_id,
        }
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
