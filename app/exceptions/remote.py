"""Exceptions for failed calls to the learning platform API."""

from app.exceptions.base import AppException


class RemoteError(AppException):
    """Base class for failures reported by, or on the way to, the backend."""

    def __init__(self, message: str, server_message: str | None = None):
        """
        Parameters:
            message (str): The richest display message available.
            server_message (str | None): The message supplied by the server itself,
                when the response carried one.
        """
        self.server_message = server_message
        super().__init__(message)


class TransportError(RemoteError):
    """No response was received (connection refused, DNS, timeout...)."""

    def __init__(self, message: str = "Network error"):
        """
        Initialize the TransportError with the transport-level message.

        Parameters:
            message (str): Message from the transport layer; defaults to "Network error".
        """
        super().__init__(message or "Network error")


class RequestRejectedError(RemoteError):
    """The backend answered with a non-success status or a failed envelope."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
    ):
        """
        Initialize a RequestRejectedError.

        Parameters:
            message (str): The server-supplied message, or the best fallback available.
            status_code (int | None): HTTP status of the response; None when the
                transport succeeded but the response envelope reported a failure.
            server_message (str | None): The server-supplied message, if any.
        """
        self.status_code = status_code
        super().__init__(message, server_message=server_message)
