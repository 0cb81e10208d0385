"""Error taxonomy for application, board and service operations.

Every service-layer operation raises one of these; the blueprints turn them into
JSON responses using ``status_code``. Messages are safe to show to the
requester and never describe another owner's data.
"""


class AppError(Exception):
    """Base class for all service-layer failures."""

    status_code = 400
    default_message = "Request failed."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class AuthorizationError(AppError):
    """Requester does not own the targeted board/service, lane or application."""

    status_code = 403
    default_message = "You are not allowed to modify this resource."


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found."


class ValidationError(AppError):
    """Malformed input (missing ids, negative positions, bad names)."""

    status_code = 400
    default_message = "Invalid request."


class PersistenceError(AppError):
    """The database transaction failed and was rolled back."""

    status_code = 500
    default_message = "The change could not be saved."
