"""Flask Routes (View Layer): HTML pages, error handlers, API registration."""

from __future__ import annotations

import logging
from typing import Any, List

from flask import Flask, jsonify, render_template, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from butterfly_survey.domain.enums import RequestSource
from butterfly_survey.domain.errors import (
    DuplicateEmailError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from butterfly_survey.models.schemas import SurveyFormSubmission
from butterfly_survey.views.api import create_api_blueprint
from butterfly_survey.views.validation import validate_body, validated

logger = logging.getLogger(__name__)

API_PREFIX = "/api/surveys"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com https://cdn.jsdelivr.net; "
        "font-src 'self' https://fonts.gstatic.com; "
        "script-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https:"
    ),
}


def _wants_json() -> bool:
    return request.path.startswith("/api/")


def _render_form_errors(errors: List[str]):
    return (
        render_template("results.html", title="Incorrect Input", errors=errors, is_error=True),
        400,
    )


def create_app(controller: Any = None) -> Flask:
    """Flask application factory (MVC pattern)."""
    if controller is None:
        from butterfly_survey.controllers.survey_controller import SurveyController

        controller = SurveyController()

    settings = controller.settings

    app = Flask(
        __name__,
        template_folder="../templates",
        static_folder="../static",
    )
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["MAX_CONTENT_LENGTH"] = settings.max_content_length

    CORS(
        app,
        resources={f"{API_PREFIX}/*": {"origins": settings.allowed_origins}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=[settings.rate_limit],
        default_limits_exempt_when=lambda: request.endpoint == "static",
        storage_uri=settings.rate_limit_storage_uri,
        headers_enabled=True,
        enabled=settings.rate_limit_enabled,
    )

    @app.after_request
    def set_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    # ── Error handlers ───────────────────────────────

    def _error_message(exc: Exception, fallback: str) -> str:
        return str(exc) if settings.expose_error_details else fallback

    @app.errorhandler(NotFoundError)
    def survey_not_found(exc: NotFoundError):
        if _wants_json():
            return (
                jsonify({"success": False, "error": f"{exc.resource} not found", "message": str(exc)}),
                404,
            )
        return render_template("404.html", title="Page Not Found", url=request.path), 404

    @app.errorhandler(DuplicateEmailError)
    def duplicate_email(exc: DuplicateEmailError):
        if request.method == "POST":
            error, message = "Duplicate survey", str(exc)
        else:
            error, message = "Duplicate email", "Another survey with this email already exists"
        return jsonify({"success": False, "error": error, "message": message}), 409

    @app.errorhandler(ValidationError)
    def domain_validation_error(exc: ValidationError):
        if _wants_json():
            return (
                jsonify({"success": False, "error": "Validation failed", "details": [str(exc)]}),
                400,
            )
        return _render_form_errors([str(exc)])

    @app.errorhandler(StorageError)
    def storage_error(exc: StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.path, exc)
        message = _error_message(exc, "A database error occurred. Please try again later.")
        if _wants_json():
            return jsonify({"success": False, "error": "Database error", "message": message}), 500
        return (
            render_template("error.html", title="Database Error", message=message, status=500),
            500,
        )

    @app.errorhandler(404)
    def not_found(_error):
        if _wants_json():
            return jsonify({"error": "Not found", "status": 404}), 404
        return render_template("404.html", title="Page Not Found", url=request.path), 404

    @app.errorhandler(405)
    def method_not_allowed(_error):
        return jsonify({"error": "Method not allowed", "status": 405}), 405

    @app.errorhandler(429)
    def too_many_requests(_error):
        if request.endpoint == "submit_survey":
            message = "Too many form submissions from this IP, please try again later."
        else:
            message = "Too many requests from this IP, please try again later."
        logger.warning("Rate limit hit on %s %s", request.method, request.path)
        if _wants_json():
            return jsonify({"error": message, "retryAfter": settings.rate_limit_retry_after}), 429
        return (
            render_template("error.html", title="Too Many Requests", message=message, status=429),
            429,
        )

    @app.errorhandler(500)
    def internal_error(_error):
        logger.exception("Internal server error")
        if _wants_json():
            return jsonify({"error": "Internal server error", "status": 500}), 500
        return (
            render_template(
                "error.html",
                title="Server Error",
                message="Something went wrong on the server.",
                status=500,
            ),
            500,
        )

    # ── Pages ────────────────────────────────────────

    @app.route("/")
    def index():
        if settings.maintenance_mode:
            return (
                render_template(
                    "error.html",
                    title="Maintenance Mode",
                    message="The application is currently under maintenance. Please try again later.",
                    status=503,
                ),
                503,
            )
        return render_template(
            "index.html",
            title=settings.app_name,
            description=settings.app_description,
            version=settings.app_version,
            enable_analytics=settings.enable_analytics,
            analytics_id=settings.google_analytics_id,
        )

    @app.route("/submitsurvey", methods=["POST"])
    @limiter.limit(lambda: settings.submit_rate_limit, override_defaults=False)
    @validate_body(SurveyFormSubmission, error_handler=_render_form_errors)
    def submit_survey():
        form = validated(RequestSource.BODY)
        result = controller.submit_response(form)
        return render_template(
            "results.html",
            title="Survey Submitted",
            form=form,
            averages=result.averages,
            is_error=False,
            errors=[],
        )

    @app.route("/surveys")
    def list_surveys():
        listing = controller.list_responses(request.args.to_dict())
        return render_template("surveys.html", title="Survey List", listing=listing)

    @app.route("/health")
    def health():
        return jsonify(controller.health().model_dump())

    app.register_blueprint(create_api_blueprint(controller), url_prefix=API_PREFIX)

    return app
