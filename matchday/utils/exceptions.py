"""
Error taxonomy for the prediction engine.

Every error raised by the services carries a ``kind`` the HTTP layer and the
CLI can tell apart, plus whether the caller may safely retry.
"""


class MatchdayError(Exception):
    """Base error with status code, kind and message."""

    kind = "error"
    status_code = 500
    retryable = False

    def __init__(self, message=None, **details):
        self.message = message or self.__class__.__doc__.strip()
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        data = {
            "error": self.kind,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            data["details"] = self.details
        return data


class ValidationError(MatchdayError):
    """Invalid input."""

    kind = "validation_error"
    status_code = 400


class ConflictError(MatchdayError):
    """Request conflicts with the current state."""

    kind = "conflict"
    status_code = 409


class NotFoundError(MatchdayError):
    """Resource not found."""

    kind = "not_found"
    status_code = 404


class DependencyError(MatchdayError):
    """A storage dependency is unavailable."""

    kind = "dependency_unavailable"
    status_code = 503
    retryable = True
