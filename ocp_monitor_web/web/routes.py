## routes.py
from __future__ import annotations

from typing import Optional

from flask import Blueprint, abort, current_app, jsonify, request, send_file
from werkzeug.exceptions import HTTPException

from ocp_monitor_web.domain.errors import MonitorWebError, RequestValidationError
from ocp_monitor_web.domain.models import MonitorRunResult
from ocp_monitor_web.services.run_request import parse_run_request

# Known /api endpoints and the methods each one answers
API_ROUTES = {
    "/categories": ["GET"],
    "/reports": ["GET"],
    "/run-monitor": ["POST"],
}

# Everything else under /api is answered by the catch-all so that routing
# never falls back to Flask's HTML 404/405 pages.
CATCH_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


def _error(message: str, status: int, output: Optional[str] = None, headers: Optional[dict] = None):
    current_app.logger.warning("Sending error response: %s (status: %s)", message, status)
    body = {"success": False, "error": message}
    if output:
        body["output"] = output
    return jsonify(body), status, headers or {}


def create_blueprint(catalog_service, monitor_service) -> Blueprint:
    bp = Blueprint("api", __name__, url_prefix="/api")

    @bp.route("/categories", methods=API_ROUTES["/categories"])
    def categories():
        current_app.logger.info("Fetching monitoring categories")
        cats = catalog_service.list_categories()
        return jsonify(success=True, categories=[c.to_json() for c in cats])

    @bp.route("/reports", methods=API_ROUTES["/reports"])
    def reports():
        current_app.logger.info("Fetching reports list")
        items = catalog_service.list_reports()
        return jsonify(success=True, reports=[r.to_json() for r in items])

    @bp.route("/run-monitor", methods=API_ROUTES["/run-monitor"])
    def run_monitor():
        # Validation errors raise before the service is touched
        run_request = parse_run_request(request.get_data())

        result: MonitorRunResult = monitor_service.run(run_request)
        current_app.logger.info(
            "Run %s success=%s exit=%s report=%s",
            result.run_id, result.success, result.exit_code, result.report_file,
        )

        if not result.success:
            return _error(result.message, 500, output=result.output)
        return jsonify(result.to_json())

    @bp.route("/", methods=CATCH_ALL_METHODS)
    def no_endpoint():
        return _error("API endpoint not specified", 400)

    @bp.route("/<path:endpoint>", methods=CATCH_ALL_METHODS)
    def unknown_endpoint(endpoint: str):
        allowed = API_ROUTES.get(f"/{endpoint}")
        if allowed:
            return _error(
                f"Method {request.method} not allowed for /{endpoint}",
                405,
                headers={"Allow": ", ".join(allowed)},
            )
        return _error(f"Unknown endpoint: /{endpoint}", 404)

    @bp.errorhandler(RequestValidationError)
    def handle_validation(e: RequestValidationError):
        return _error(str(e), e.status_code)

    @bp.errorhandler(MonitorWebError)
    def handle_domain(e: MonitorWebError):
        if e.status_code >= 500:
            current_app.logger.error("Request to %s failed: %s", request.path, e)
        return _error(str(e), e.status_code)

    @bp.errorhandler(HTTPException)
    def handle_http(e: HTTPException):
        return _error(e.description or e.name, e.code or 500)

    @bp.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        current_app.logger.exception("Error handling %s request: %s", request.method, request.path)
        return _error(f"Internal server error: {e}", 500)

    return bp


def create_reports_blueprint(report_repo) -> Blueprint:
    bp = Blueprint("reports", __name__, url_prefix=report_repo.url_prefix.rstrip("/") or None)

    @bp.get("/<filename>")
    def report(filename: str):
        full = report_repo.resolve(filename)
        if full is None:
            abort(404)
        return send_file(full, mimetype="text/html")

    return bp
