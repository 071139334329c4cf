# bookstore/domain/errors.py


class BookstoreError(Exception):
    """Base for every error a service raises on purpose. Carries its HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, errors: list[str] | None = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(BookstoreError):
    status_code = 400
    default_message = "Validation failed"


class NotFoundError(BookstoreError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(BookstoreError):
    status_code = 409
    default_message = "Resource already exists"


class InvalidCredentialsError(BookstoreError):
    status_code = 401
    default_message = "Invalid email or password"


class InvalidTokenError(BookstoreError):
    status_code = 401
    default_message = "Invalid or expired token"


class IncorrectPasswordError(BookstoreError):
    status_code = 400
    default_message = "Current password is incorrect"


class ForbiddenError(BookstoreError):
    status_code = 403
    default_message = "Access denied. Insufficient permissions."


class InsufficientStockError(BookstoreError):
    status_code = 400
    default_message = "Not enough stock"


class InvalidStateError(BookstoreError):
    status_code = 400
    default_message = "Operation not allowed in the current state"


class RateLimitError(BookstoreError):
    status_code = 429
    default_message = "Too many requests, please try again later"
