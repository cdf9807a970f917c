import json
import logging
from typing import Any, Dict, Optional

from flask import Flask, current_app, request
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from ..config import default_config, load_config
from ..errors import MalformedInput, MissingField, PasswordServiceError
from ..evaluator import ValidationRequirements, validate_password
from ..generator import GenerationOptions, generate, generate_multiple, parse_int
from ..hashing import hasher_from_config
from ..repository import PasswordRepository
from .responses import error, success

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "GET  /api/password": "Generate one password.",
    "POST /api/passwords": "Generate several passwords.",
    "POST /api/password/validate": "Check a password against strength requirements.",
}


def _repo() -> PasswordRepository:
    return current_app.extensions["pwservice.repository"]


def _json_body() -> Dict[str, Any]:
    raw = request.get_data(as_text=True)
    if not raw or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise MalformedInput("Request body is not valid JSON.") from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedInput("Request body must be a JSON object.")
    return data


def create_app(config: Optional[Dict[str, Any]] = None, repository: Optional[PasswordRepository] = None) -> Flask:
    """
    Build the Flask app. The repository is injected; when omitted one is
    opened from config["db_path"]. An explicit config is layered over the
    defaults only; the user config file and environment are read when it
    is omitted.
    """
    if config is None:
        cfg = load_config()
    else:
        cfg = default_config()
        cfg.update(config)
    if repository is None:
        repository = PasswordRepository.open(cfg["db_path"], hasher_from_config(cfg))

    app = Flask(__name__)
    # "/api/password/" routes like "/api/password"
    app.url_map.strict_slashes = False
    app.config["PWSERVICE"] = cfg
    app.extensions["pwservice.repository"] = repository

    @app.before_request
    def preflight():
        if request.method == "OPTIONS":
            return "", 204

    @app.after_request
    def cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = cfg.get("cors_origin") or "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.errorhandler(PasswordServiceError)
    def handle_input_error(e):
        return error(e.message, e.code, e.details)

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        return error(
            f"Route '{request.path}' [{request.method}] not found.",
            404,
            {"available_endpoints": ENDPOINTS},
        )

    @app.errorhandler(MethodNotAllowed)
    def handle_method_not_allowed(e):
        return error(
            f"Method {request.method} not allowed on '{request.path}'.",
            405,
            {"available_endpoints": ENDPOINTS},
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return error(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error("Internal server error.", 500)

    @app.route("/")
    def home():
        return success({"endpoints": ENDPOINTS}, "pwservice API is running.")

    @app.route("/api/password", methods=["GET"])
    def generate_one():
        opts = GenerationOptions.from_mapping(request.args)
        opts.validate()

        password = generate(opts)
        repo = _repo()
        request_id = repo.log_request(opts, 1)
        repo.save_passwords(request_id, [password])
        logger.info("Generated 1 password (length=%d, request_id=%s)", opts.length, request_id)

        return success(
            {"password": password, "length": len(password), "request_id": request_id},
            "Password generated successfully.",
        )

    @app.route("/api/passwords", methods=["POST"])
    def generate_many():
        body = _json_body()
        count = parse_int(body["count"], "count") if body.get("count") is not None else 1
        opts = GenerationOptions.from_mapping(body)
        opts.validate()

        passwords = generate_multiple(count, opts)
        repo = _repo()
        request_id = repo.log_request(opts, count)
        repo.save_passwords(request_id, passwords)
        logger.info("Generated %d passwords (length=%d, request_id=%s)", count, opts.length, request_id)

        return success(
            {
                "passwords": passwords,
                "count": len(passwords),
                "length": opts.length,
                "request_id": request_id,
            },
            "Passwords generated successfully.",
            201,
        )

    @app.route("/api/password/validate", methods=["POST"])
    def validate_route():
        body = _json_body()
        password = body.get("password")
        if not password:
            raise MissingField("password")
        if not isinstance(password, str):
            raise MalformedInput("Field 'password' must be a string.", {"field": "password"})
        raw_reqs = body.get("requirements") or {}
        if not isinstance(raw_reqs, dict):
            raise MalformedInput("Field 'requirements' must be an object.", {"field": "requirements"})
        reqs = ValidationRequirements.from_mapping(raw_reqs)

        result = validate_password(password, reqs)
        _repo().log_validation(password, reqs, result.is_valid)
        logger.info("Validated a password (valid=%s, score=%d)", result.is_valid, result.score)

        if result.is_valid:
            return success(result.to_dict(), "Password meets the requirements.")
        return success(result.to_dict(), "Password does NOT meet the requirements.", 422)

    return app
