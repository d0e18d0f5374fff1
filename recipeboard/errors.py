class BoardError(Exception):
    status = 500
    default_message = "Request failed"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self):
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(BoardError):
    status = 400
    default_message = "Invalid request"


class Unauthenticated(BoardError):
    status = 401
    default_message = "Authentication required"


# Also raised for other users' rows, which must look nonexistent.
class NotFound(BoardError):
    status = 404
    default_message = "Not found"


class Conflict(BoardError):
    status = 409
    default_message = "Order is out of date"


class Internal(BoardError):
    status = 500
    default_message = "Internal server error"


# Client side only: raised before any HTTP status exists.


class NetworkError(BoardError):
    status = None
    default_message = "Network error"


class RequestTimedOut(BoardError):
    status = None
    default_message = "Request timed out"


_BY_STATUS = {
    400: ValidationError,
    401: Unauthenticated,
    404: NotFound,
    409: Conflict,
}


def error_for_status(status, payload=None):
    """Build the exception matching an HTTP error response."""
    payload = payload if isinstance(payload, dict) else {}
    cls = _BY_STATUS.get(status, Internal)
    return cls(payload.get("error"), payload.get("details"))
