"""Authentication errors around the admin session credential."""

from app.exceptions.base import AppException
from app.exceptions.remote import RequestRejectedError


class AuthenticationError(AppException):
    """Base class for authentication-related errors."""

    pass


class NotAuthenticatedError(AuthenticationError):
    """No admin credential is held by the session; nothing may be read."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class UnauthorizedError(RequestRejectedError, AuthenticationError):
    """The backend refused the forwarded credential (HTTP 401)."""

    def __init__(self, server_message: str | None = None):
        """
        Initialize the UnauthorizedError.

        Parameters:
            server_message (str | None): Server-supplied reason, if any; the display
                message falls back to a generic re-login prompt.
        """
        super().__init__(
            server_message or "Session expired, please sign in again",
            status_code=401,
            server_message=server_message,
        )
