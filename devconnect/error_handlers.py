from flask import Blueprint, current_app, jsonify

from .errors import AppError, NotAuthorizedError, NotFoundError

error_handlers_bp = Blueprint("error_handlers", __name__)


def error_response(message, status_code):
    """Build the JSON body shared by every error response."""
    return jsonify({"success": False, "message": message}), status_code


@error_handlers_bp.app_errorhandler(NotFoundError)
def handle_not_found_error(error):
    """Handles not found errors."""
    current_app.logger.warning(f"Not Found Error: {error.message}")
    return error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(NotAuthorizedError)
def handle_not_authorized_error(error):
    """Handles ownership and role check failures."""
    current_app.logger.warning(f"Not Authorized Error: {error.message}")
    return error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles validation, duplicate request and other application errors."""
    current_app.logger.warning(f"Application Error: {error.message}")
    return error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(404)
def handle_404(e):
    """Handles generic 404 errors for routes that don't exist."""
    return error_response("Route not found", 404)


@error_handlers_bp.app_errorhandler(405)
def handle_405(e):
    """Handles requests made with an unsupported method."""
    return error_response("Method not allowed", 405)


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors.

    The message of the underlying exception is returned to the client as is.
    """
    original = getattr(e, "original_exception", None) or e
    current_app.logger.error(f"Internal Server Error: {original}")
    return error_response(str(original), 500)
