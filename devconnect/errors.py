"""Custom exception classes for the application."""


class AppError(Exception):
    """Base application error class."""

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ValidationError(AppError):
    """Raised when user input fails validation."""

    def __init__(self, message="Validation failed."):
        """Initialize the error."""
        super().__init__(message, 400)


class DuplicateRequestError(AppError):
    """Raised when a user asks to join a project they already asked to join."""

    def __init__(self, message="You have already sent a join request for this project"):
        """Initialize the error."""
        super().__init__(message, 400)


class AuthenticationRequiredError(AppError):
    """Raised when a route needs a verified user and there is none."""

    def __init__(self, message="Not authorized, no valid token"):
        """Initialize the error."""
        super().__init__(message, 401)


class NotAuthorizedError(AppError):
    """Raised when the caller is not allowed to act on a resource."""

    def __init__(self, message="Not authorized"):
        """Initialize the error."""
        super().__init__(message, 403)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)
