"""Exception hierarchy for service calls.

Every transport or server failure is normalized into one ``ApiError``
subclass carrying a single user-facing message.
"""


class ApiError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiConnectionError(ApiError):
    """No response was received; safe to retry."""

    pass


class ApiResponseError(ApiError):
    """The server rejected the request."""

    pass


class AuthenticationError(ApiResponseError):
    """Missing, invalid or expired credentials (401)."""

    def __init__(self, message: str, status_code: int | None = 401):
        super().__init__(message, status_code)


class PermissionDeniedError(ApiResponseError):
    """Authenticated, but not allowed to access the resource (403)."""

    def __init__(self, message: str, status_code: int | None = 403):
        super().__init__(message, status_code)


class NotFoundError(ApiResponseError):
    """The requested record does not exist (404).

    On read endpoints this is an expected negative result, not a failure.
    """

    def __init__(self, message: str, status_code: int | None = 404):
        super().__init__(message, status_code)
