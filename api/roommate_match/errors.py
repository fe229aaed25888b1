"""
Domain error taxonomy.

Every error is deterministic for a given input and leaves state unchanged.
The HTTP layer maps ``status_code`` onto the response; the core never
depends on FastAPI.
"""


class RoommateError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(RoommateError):
    kind = "validation_error"
    status_code = 422


class NotFoundError(RoommateError):
    kind = "not_found"
    status_code = 404


class SelfInterestError(RoommateError):
    kind = "self_interest"
    status_code = 400


class DuplicateInterestError(RoommateError):
    kind = "duplicate_interest"
    status_code = 409


class UnauthorizedError(RoommateError):
    kind = "unauthorized"
    status_code = 403


class InvalidStateError(RoommateError):
    kind = "invalid_state"
    status_code = 409
