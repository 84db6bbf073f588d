"""Workflow exception taxonomy.

Each error carries the HTTP-style code that the API envelope reports. Messages
are user-facing and returned verbatim.
"""


class ApplicationError(Exception):
    """Base class for errors raised by the seal workflows."""

    code = 500
    kind = "INTERNAL"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApplicationError):
    """A required field is missing or a value is not acceptable."""
    code = 400
    kind = "VALIDATION"


class NotFoundError(ApplicationError):
    """The referenced record does not exist."""
    code = 404
    kind = "NOT_FOUND"


class InvalidStateError(ApplicationError):
    """The requested transition is not allowed from the current status."""
    code = 400
    kind = "INVALID_STATE"


class ForbiddenError(ApplicationError):
    """The caller is not the applicant of the application."""
    code = 403
    kind = "FORBIDDEN"


class InternalError(ApplicationError):
    """Unexpected persistence failure."""
    code = 500
    kind = "INTERNAL"
