"""
Error taxonomy shared by every module.

Handlers raise these; BuskCats maps them to ``{"error": message}`` JSON
responses with the matching status code.
"""


class AppError(Exception):
    """Base application error with a client-safe message."""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = 'Bad request'


class UnauthorizedError(AppError):
    status_code = 401
    default_message = 'Unauthorized'


class NotFoundError(AppError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(AppError):
    status_code = 409
    default_message = 'Already subscribed'


class TransportError(AppError):
    """Outbound email send failed. ``detail`` is for logs only."""

    status_code = 500
    default_message = 'Failed to send email'

    def __init__(self, detail=None):
        super().__init__()
        self.detail = detail or ''

    def __str__(self):
        return self.detail or self.message


class StoreError(Exception):
    """Storage failure that is fatal for the current request."""


class UniqueViolation(StoreError):
    """An insert collided with a UNIQUE constraint."""
