"""Base exception for the application."""


class AppException(Exception):
    """Root of every domain-level error raised by the console core."""

    def __init__(self, message: str):
        """
        Initialize the exception with a human-readable message.

        Parameters:
            message (str): The single display message for this failure.
        """
        self.message = message
        super().__init__(message)
